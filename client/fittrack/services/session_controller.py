"""
Workout Session Controller
==========================
Owns the student dashboard's state and the transitions between:

    IDLE      no workout on screen
    SELECTED  a day with a workout is on screen, no session open
    ACTIVE    a session is open; the timer ticks and checklist changes
              are mirrored to the backend

Transitions:
    select()  IDLE/SELECTED -> IDLE/SELECTED  (refused while ACTIVE)
    start()   SELECTED -> ACTIVE              (backend may refuse)
    finish()  ACTIVE -> SELECTED              (backend computes duration)
    load()    resumes ACTIVE if the backend reports an open session,
              e.g. after the app restarted mid-workout

The backend owns the "one open session per user" rule; the controller only
proposes transitions and reflects what the backend answers. Any failed
command leaves the state exactly as it was.
"""

from __future__ import annotations

import functools
import logging
from enum import Enum
from typing import Optional, Union

from fittrack.config import get_settings
from fittrack.errors import FitTrackError, PreconditionError
from fittrack.models.workout import Weekday, WorkoutDefinition, WorkoutSession
from fittrack.services.backend import BackendClient, get_backend_client
from fittrack.services.checklist import ExerciseChecklist
from fittrack.services.day_selector import DaySelector
from fittrack.services.timer import Clock, SessionTimer, format_elapsed, utc_now

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    IDLE = "idle"
    SELECTED = "selected"
    ACTIVE = "active"


class WorkoutSessionController:
    """Student dashboard state, usable without any rendering layer."""

    def __init__(
        self,
        client: BackendClient,
        tick_seconds: float = 1.0,
        clock: Clock = utc_now,
    ) -> None:
        self._client = client
        self._clock = clock
        self.selector = DaySelector()
        self.checklist = ExerciseChecklist()
        self.timer = SessionTimer(tick_seconds=tick_seconds, clock=clock)
        self.active_session: Optional[WorkoutSession] = None
        self.last_finished: Optional[WorkoutSession] = None
        self.loaded = False
        # True while start/finish is in flight; a second click is refused.
        self.busy = False
        # Bumped by reset(); replies from before a reset are dropped.
        self._epoch = 0

    async def __aenter__(self) -> "WorkoutSessionController":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # ---- Queries ---------------------------------------------------------

    @property
    def current_state(self) -> SessionState:
        if self.active_session is not None:
            return SessionState.ACTIVE
        if self.selector.current_workout is not None:
            return SessionState.SELECTED
        return SessionState.IDLE

    @property
    def current_workout(self) -> Optional[WorkoutDefinition]:
        return self.selector.current_workout

    @property
    def elapsed(self) -> int:
        return self.timer.elapsed

    @property
    def elapsed_display(self) -> str:
        return format_elapsed(self.timer.elapsed)

    # ---- Commands --------------------------------------------------------

    async def load(self) -> None:
        """Fetch the weekly plan and resume any session left open.

        A failed fetch leaves ``loaded`` False so the next view tries again.
        """
        epoch = self._epoch
        try:
            workouts = await self._client.fetch_workouts()
            session = await self._client.fetch_active_session()
        except FitTrackError as exc:
            logger.warning("Could not load the weekly plan: %s", exc.message)
            return
        if epoch != self._epoch:
            return
        self.selector.set_workouts(workouts)
        self.loaded = True

        if session is not None and session.is_open:
            self._resume(session)

    def select(self, day: Union[Weekday, str]) -> Optional[WorkoutDefinition]:
        """Show ``day``. Refused while a session is open."""
        workout = self.selector.select(day, locked=self.active_session is not None)
        self.checklist.clear()
        return workout

    async def start(self) -> WorkoutSession:
        if self.active_session is not None:
            raise PreconditionError("A workout is already in progress")
        workout = self.selector.current_workout
        if workout is None:
            raise PreconditionError("Select a day with a workout available")
        self._claim()
        epoch = self._epoch

        try:
            session = await self._client.create_session(workout.id)
        finally:
            self._release(epoch)
        if epoch != self._epoch:
            logger.info("Dropping session %s started before a reset", session.id)
            return session

        self.checklist.reset(len(workout.exercises))
        self._activate(session)
        logger.info("Started session %s for workout %s", session.id, workout.id)
        return session

    async def finish(self) -> WorkoutSession:
        """Close the open session and return it with its duration."""
        session = self.active_session
        if session is None:
            raise PreconditionError("No workout in progress")
        self._claim()
        epoch = self._epoch

        try:
            # Per-exercise writes go first so none lands after the close.
            await self.checklist.drain()
            finished = await self._client.finish_session(session.id, self.checklist.entries)
        finally:
            self._release(epoch)
        if epoch != self._epoch:
            return finished

        self._deactivate()
        self.last_finished = finished
        logger.info("Finished session %s after %ss", session.id, finished.duration_seconds)
        return finished

    def set_completed(self, index: int, value: bool) -> None:
        self._require_active()
        self.checklist.set_completed(index, value)

    def set_load(self, index: int, text: str) -> None:
        self._require_active()
        self.checklist.set_load(index, text)

    def reset(self) -> None:
        """Forget everything tied to the logged-in student. Pending exercise
        writes are cancelled.
        """
        self._epoch += 1
        self.checklist.cancel_pending()
        self.checklist.detach()
        self.checklist.clear()
        self.timer.stop()
        self.selector = DaySelector()
        self.active_session = None
        self.last_finished = None
        self.busy = False
        self.loaded = False

    async def close(self) -> None:
        """Release the timer and wait out in-flight exercise writes."""
        await self.checklist.drain()
        self.checklist.detach()
        self.timer.stop()

    # ---- Internals -------------------------------------------------------

    def _claim(self) -> None:
        if self.busy:
            raise PreconditionError("Another request is still in progress")
        self.busy = True

    def _release(self, epoch: int) -> None:
        if epoch == self._epoch:
            self.busy = False

    def _require_active(self) -> None:
        if self.active_session is None:
            raise PreconditionError("Start the workout first")

    def _resume(self, session: WorkoutSession) -> None:
        match = self.selector.find_by_workout_id(session.workout_id)
        if match is None:
            # Still ACTIVE, just without an exercise list to show.
            logger.warning(
                "Active session %s refers to unknown workout %s",
                session.id,
                session.workout_id,
            )
            self.selector.show(None, None)
            size = 0
        else:
            day, workout = match
            self.selector.show(day, workout)
            size = len(workout.exercises)

        self.checklist.restore(session.exercise_status, size)
        self._activate(session)
        logger.info("Resumed session %s", session.id)

    def _activate(self, session: WorkoutSession) -> None:
        self.active_session = session
        self.checklist.attach(functools.partial(self._client.update_exercise, session.id))
        self.timer.start(session.started_at or self._clock())

    def _deactivate(self) -> None:
        self.checklist.detach()
        self.timer.stop()
        self.active_session = None


def finish_summary(session: WorkoutSession) -> str:
    """The message shown once a session closes."""
    minutes, seconds = divmod(session.duration_seconds or 0, 60)
    return f"Workout finished! Total time: {minutes}min {seconds}s"


# ---------------------------------------------------------------------------
# Singleton
# ---------------------------------------------------------------------------

_default_controller: WorkoutSessionController | None = None


def get_session_controller() -> WorkoutSessionController:
    global _default_controller
    if _default_controller is None:
        _default_controller = WorkoutSessionController(
            get_backend_client(),
            tick_seconds=get_settings().timer_tick_seconds,
        )
    return _default_controller
