"""
Session Timer
=============
Elapsed wall-clock time of the running workout session.

The displayed value is derived purely from the session's start time and
the current clock, recomputed on a fixed tick. The tick is an asyncio task
owned by the timer: ``start()`` acquires it, ``stop()`` releases it. A
stopped timer reads zero.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Optional

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def elapsed_seconds(started_at: datetime, now: datetime) -> int:
    """Whole seconds between two instants, clamped at zero.

    A start time in the future (clock skew between us and the backend)
    reads as 0:00 rather than a negative duration.
    """
    return max(0, int((now - started_at).total_seconds()))


def format_elapsed(seconds: int) -> str:
    """``M:SS`` below one hour, ``H:MM:SS`` from one hour on.

    >>> format_elapsed(65)
    '1:05'
    >>> format_elapsed(3661)
    '1:01:01'
    """
    seconds = max(0, int(seconds))
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


class SessionTimer:
    """Ticks once per ``tick_seconds`` while a session is running."""

    def __init__(self, tick_seconds: float = 1.0, clock: Clock = utc_now) -> None:
        self._tick = tick_seconds
        self._clock = clock
        self._started_at: Optional[datetime] = None
        self._elapsed = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def started_at(self) -> Optional[datetime]:
        return self._started_at

    @property
    def elapsed(self) -> int:
        """Seconds as of the last tick."""
        return self._elapsed

    @property
    def display(self) -> str:
        return format_elapsed(self._elapsed)

    def start(self, started_at: datetime) -> None:
        """Begin ticking from ``started_at``. Must be called inside a running loop."""
        self.stop()
        self._started_at = started_at
        self._elapsed = elapsed_seconds(started_at, self._clock())
        self._task = asyncio.get_running_loop().create_task(self._run())

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None
        self._started_at = None
        self._elapsed = 0

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._tick)
            if self._started_at is None:
                return
            self._elapsed = elapsed_seconds(self._started_at, self._clock())
