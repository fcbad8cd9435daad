"""
Exercise Checklist
==================
Per-exercise completion flag and load text for the workout on screen,
index-aligned with the workout's exercise list.

Every change is applied locally first and then mirrored to the backend in
the background. A failed write is logged and left alone: the local value
stays, and the full snapshot sent at finish time is what counts.

Writes for the same index are chained, so rapid toggling of one exercise
reaches the backend in the order the user made the changes. Writes for
different indexes run independently.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Sequence

from fittrack.errors import FitTrackError
from fittrack.models.workout import ExerciseProgress

logger = logging.getLogger(__name__)

# (index, completed, load) -> persisted
PersistFn = Callable[[int, bool, str], Awaitable[None]]


class ExerciseChecklist:
    """Local exercise progress, optionally mirrored through ``persist``."""

    def __init__(self) -> None:
        self._entries: list[ExerciseProgress] = []
        self._persist: Optional[PersistFn] = None
        self._pending: dict[int, asyncio.Task] = {}

    # ---- Queries ---------------------------------------------------------

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> list[ExerciseProgress]:
        """Copy of the current state, safe to send or render."""
        return [entry.model_copy() for entry in self._entries]

    @property
    def mirroring(self) -> bool:
        return self._persist is not None

    # ---- Lifecycle -------------------------------------------------------

    def reset(self, size: int) -> None:
        """Fresh (False, "") entries, one per exercise."""
        self._entries = [ExerciseProgress() for _ in range(size)]

    def restore(self, persisted: Sequence[ExerciseProgress], size: int) -> None:
        """Load saved progress, padding any missing index with defaults."""
        self.reset(max(size, len(persisted)))
        for index, progress in enumerate(persisted):
            self._entries[index] = progress.model_copy()

    def clear(self) -> None:
        self._entries = []

    def attach(self, persist: PersistFn) -> None:
        """Mirror every following change through ``persist``."""
        self._persist = persist

    def detach(self) -> None:
        self._persist = None

    # ---- Commands --------------------------------------------------------

    def set_completed(self, index: int, value: bool) -> None:
        entry = self._entry(index)
        entry.completed = value
        self._mirror(index, entry)

    def set_load(self, index: int, text: str) -> None:
        entry = self._entry(index)
        entry.load = text
        self._mirror(index, entry)

    async def drain(self) -> None:
        """Wait for every write scheduled so far."""
        pending = list(self._pending.values())
        if pending:
            await asyncio.wait(pending)

    def cancel_pending(self) -> None:
        for task in self._pending.values():
            task.cancel()
        self._pending.clear()

    # ---- Internals -------------------------------------------------------

    def _entry(self, index: int) -> ExerciseProgress:
        if not 0 <= index < len(self._entries):
            raise IndexError(f"No exercise at index {index}")
        return self._entries[index]

    def _mirror(self, index: int, entry: ExerciseProgress) -> None:
        if self._persist is None:
            return
        previous = self._pending.get(index)
        task = asyncio.get_running_loop().create_task(
            self._write(self._persist, index, entry.completed, entry.load, previous)
        )
        self._pending[index] = task
        task.add_done_callback(lambda done, i=index: self._forget(i, done))

    def _forget(self, index: int, task: asyncio.Task) -> None:
        if self._pending.get(index) is task:
            del self._pending[index]

    async def _write(
        self,
        persist: PersistFn,
        index: int,
        completed: bool,
        load: str,
        previous: Optional[asyncio.Task],
    ) -> None:
        if previous is not None:
            await asyncio.wait([previous])
        try:
            await persist(index, completed, load)
        except FitTrackError as exc:
            # Not surfaced: a hiccup here must not interrupt the workout.
            logger.warning("Failed to persist exercise %d: %s", index, exc.message)
