"""
Tests for Exercise Checklist
============================
Covers:
- reset(): N default entries
- restore(): persisted progress loaded, missing indexes padded with (False, "")
- Index isolation: changing index i leaves every other entry untouched
- Out-of-range index raises IndexError without persisting
- Mirroring: each change persisted with the entry's (completed, load) pair
- Mirroring off: no persistence when detached
- Failed persistence is logged and never reverts the local value, including
  a backend reply that is not JSON
- Same-index writes reach the backend in the order they were made

Run: pytest tests/test_checklist.py -v
"""

from __future__ import annotations

import asyncio
import functools
import logging
from unittest.mock import AsyncMock

import pytest
import respx
from httpx import Response

from fittrack.errors import BackendAPIError, BackendConnectionError
from fittrack.models.workout import ExerciseProgress
from fittrack.services.backend import BackendClient
from fittrack.services.checklist import ExerciseChecklist


def _pairs(checklist: ExerciseChecklist) -> list[tuple[bool, str]]:
    return [(entry.completed, entry.load) for entry in checklist.entries]


# ---------------------------------------------------------------------------
# TestLocalState
# ---------------------------------------------------------------------------

class TestLocalState:

    def test_reset_creates_defaults(self):
        checklist = ExerciseChecklist()
        checklist.reset(3)
        assert _pairs(checklist) == [(False, ""), (False, ""), (False, "")]

    def test_restore_pads_missing_indexes(self):
        checklist = ExerciseChecklist()
        checklist.restore([ExerciseProgress(completed=True, load="20kg")], size=3)
        assert _pairs(checklist) == [(True, "20kg"), (False, ""), (False, "")]

    def test_restore_keeps_extra_persisted_entries(self):
        """More saved entries than exercises (plan edited mid-session): keep them."""
        checklist = ExerciseChecklist()
        checklist.restore(
            [ExerciseProgress(completed=True), ExerciseProgress(load="8kg")], size=0
        )
        assert _pairs(checklist) == [(True, ""), (False, "8kg")]

    def test_set_completed_is_index_isolated(self):
        checklist = ExerciseChecklist()
        checklist.reset(4)
        checklist.set_load(0, "10kg")
        checklist.set_completed(2, True)
        assert _pairs(checklist) == [(False, "10kg"), (False, ""), (True, ""), (False, "")]

    def test_entries_is_a_copy(self):
        checklist = ExerciseChecklist()
        checklist.reset(1)
        checklist.entries[0].completed = True
        assert _pairs(checklist) == [(False, "")]

    def test_out_of_range_raises(self):
        checklist = ExerciseChecklist()
        checklist.reset(2)
        with pytest.raises(IndexError):
            checklist.set_completed(2, True)
        with pytest.raises(IndexError):
            checklist.set_load(-1, "5kg")


# ---------------------------------------------------------------------------
# TestMirroring
# ---------------------------------------------------------------------------

class TestMirroring:

    @pytest.mark.asyncio
    async def test_change_is_persisted_with_full_pair(self):
        persist = AsyncMock()
        checklist = ExerciseChecklist()
        checklist.reset(2)
        checklist.attach(persist)

        checklist.set_load(1, "32kg")
        checklist.set_completed(1, True)
        await checklist.drain()

        assert persist.await_args_list[0].args == (1, False, "32kg")
        assert persist.await_args_list[1].args == (1, True, "32kg")

    @pytest.mark.asyncio
    async def test_detached_checklist_does_not_persist(self):
        persist = AsyncMock()
        checklist = ExerciseChecklist()
        checklist.reset(1)
        checklist.attach(persist)
        checklist.detach()

        checklist.set_completed(0, True)
        await checklist.drain()

        persist.assert_not_awaited()
        assert _pairs(checklist) == [(True, "")]

    @pytest.mark.asyncio
    async def test_out_of_range_does_not_persist(self):
        persist = AsyncMock()
        checklist = ExerciseChecklist()
        checklist.reset(1)
        checklist.attach(persist)

        with pytest.raises(IndexError):
            checklist.set_completed(5, True)
        await checklist.drain()
        persist.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [BackendConnectionError(), BackendAPIError(500, "boom")],
    )
    async def test_failure_is_logged_not_reverted(self, error, caplog):
        persist = AsyncMock(side_effect=error)
        checklist = ExerciseChecklist()
        checklist.reset(2)
        checklist.attach(persist)

        with caplog.at_level(logging.WARNING, logger="fittrack.services.checklist"):
            checklist.set_completed(0, True)
            await checklist.drain()

        assert _pairs(checklist) == [(True, ""), (False, "")]
        assert "Failed to persist exercise 0" in caplog.text

    @pytest.mark.asyncio
    async def test_same_index_writes_stay_in_order(self):
        """The first write is slowest; it must still land before the later ones."""
        delays = iter([0.05, 0.0, 0.01])
        landed: list[tuple[int, bool, str]] = []

        async def slow_persist(index: int, completed: bool, load: str) -> None:
            await asyncio.sleep(next(delays))
            landed.append((index, completed, load))

        checklist = ExerciseChecklist()
        checklist.reset(1)
        checklist.attach(slow_persist)

        checklist.set_completed(0, True)
        checklist.set_completed(0, False)
        checklist.set_completed(0, True)
        await checklist.drain()

        assert landed == [(0, True, ""), (0, False, ""), (0, True, "")]

    @pytest.mark.asyncio
    async def test_different_indexes_do_not_wait_on_each_other(self):
        gate = asyncio.Event()
        landed: list[int] = []

        async def persist(index: int, completed: bool, load: str) -> None:
            if index == 0:
                await gate.wait()
            landed.append(index)

        checklist = ExerciseChecklist()
        checklist.reset(2)
        checklist.attach(persist)

        checklist.set_completed(0, True)
        checklist.set_completed(1, True)
        await asyncio.sleep(0.01)
        assert landed == [1]

        gate.set()
        await checklist.drain()
        assert landed == [1, 0]

    @pytest.mark.asyncio
    @respx.mock
    async def test_unreadable_backend_reply_is_logged(self, caplog):
        respx.post("http://fittrack.test/api/workout-sessions/10/update-exercise").mock(
            return_value=Response(200, text="<html>Maintenance</html>")
        )
        client = BackendClient("http://fittrack.test", timeout=5)
        checklist = ExerciseChecklist()
        checklist.reset(1)
        checklist.attach(functools.partial(client.update_exercise, 10))

        with caplog.at_level(logging.WARNING, logger="fittrack.services.checklist"):
            checklist.set_load(0, "20kg")
            await checklist.drain()

        assert _pairs(checklist) == [(False, "20kg")]
        assert "Failed to persist exercise 0: Failed to update exercise" in caplog.text
