"""
Trainer Workspace
=================
State behind the trainer dashboard: the students linked to the trainer's
code, and a draft weekday plan being written for one of them.

Decision logic for save():
    1. A student and a day must be selected.
    2. The draft must have at least one exercise.
    3. Every exercise row must have name, sets and rest filled in.
    4. Only then is the plan sent; the backend replaces any existing plan
       for that student and day.
Failures at 1-3 raise PreconditionError and make no request.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional, Union

from fittrack.config import get_settings
from fittrack.errors import FitTrackError, PreconditionError
from fittrack.models.user import Student
from fittrack.models.workout import ExerciseSpec, Weekday
from fittrack.services.backend import BackendClient, get_backend_client
from fittrack.services.timer import Clock, utc_now

logger = logging.getLogger(__name__)

SAVED_MESSAGE = "Workout saved successfully!"

EXERCISE_FIELDS = frozenset({"name", "sets", "rest"})


class TransientMessage:
    """A message that reads as None once ``ttl_seconds`` have passed."""

    def __init__(self, ttl_seconds: float, clock: Clock = utc_now) -> None:
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock
        self._text: Optional[str] = None
        self._expires_at: Optional[datetime] = None

    def show(self, text: str) -> None:
        self._text = text
        self._expires_at = self._clock() + self._ttl

    def clear(self) -> None:
        self._text = None
        self._expires_at = None

    @property
    def text(self) -> Optional[str]:
        if self._expires_at is not None and self._clock() >= self._expires_at:
            self.clear()
        return self._text


class TrainerWorkspace:

    def __init__(
        self,
        client: BackendClient,
        banner_seconds: float = 3.0,
        clock: Clock = utc_now,
    ) -> None:
        self._client = client
        self.students: list[Student] = []
        self.selected_student: Optional[Union[int, str]] = None
        self.selected_day: Optional[Weekday] = None
        self.exercises: list[ExerciseSpec] = []
        self.success = TransientMessage(banner_seconds, clock)
        self.saving = False

    async def load_students(self) -> list[Student]:
        try:
            self.students = await self._client.fetch_students()
        except FitTrackError as exc:
            logger.warning("Could not load students: %s", exc.message)
        return self.students

    def student(self, student_id: Union[int, str]) -> Optional[Student]:
        for student in self.students:
            if str(student.id) == str(student_id):
                return student
        return None

    # ---- Draft editing ---------------------------------------------------

    def select_student(self, student_id: Union[int, str]) -> None:
        self.selected_student = student_id
        self._reset_draft()

    def select_day(self, day: Union[Weekday, str]) -> None:
        try:
            self.selected_day = Weekday(day)
        except ValueError:
            raise PreconditionError(f"Unknown weekday: {day}") from None
        self._reset_draft()

    def add_exercise(self) -> int:
        self.exercises.append(ExerciseSpec())
        return len(self.exercises) - 1

    def update_exercise(self, index: int, field: str, value: str) -> None:
        if field not in EXERCISE_FIELDS:
            raise PreconditionError(f"Unknown exercise field: {field}")
        setattr(self._row(index), field, value)

    def remove_exercise(self, index: int) -> None:
        self._row(index)
        del self.exercises[index]

    def reset(self) -> None:
        """Forget the previous trainer's students, selection, draft and banner."""
        self.students = []
        self.selected_student = None
        self.selected_day = None
        self.exercises = []
        self.success.clear()
        self.saving = False

    # ---- Save ------------------------------------------------------------

    async def save(self) -> None:
        if self.selected_student is None or self.selected_day is None:
            raise PreconditionError("Select a student and a day of the week")
        if not self.exercises:
            raise PreconditionError("Add at least one exercise")
        for number, exercise in enumerate(self.exercises, start=1):
            if not (exercise.name and exercise.sets and exercise.rest):
                raise PreconditionError(f"Fill in every field of exercise {number}")
        if self.saving:
            raise PreconditionError("Another request is still in progress")

        self.saving = True
        try:
            await self._client.save_workout(
                self.selected_student, self.selected_day, self.exercises
            )
        finally:
            self.saving = False

        logger.info(
            "Saved %d exercises for student %s on %s",
            len(self.exercises),
            self.selected_student,
            self.selected_day.value,
        )
        self.success.show(SAVED_MESSAGE)

    # ---- Internals -------------------------------------------------------

    def _row(self, index: int) -> ExerciseSpec:
        if not 0 <= index < len(self.exercises):
            raise IndexError(f"No exercise at index {index}")
        return self.exercises[index]

    def _reset_draft(self) -> None:
        # Existing plans are not fetched back; each selection starts blank.
        self.exercises = []


# ---------------------------------------------------------------------------
# Singleton
# ---------------------------------------------------------------------------

_default_workspace: TrainerWorkspace | None = None


def get_trainer_workspace() -> TrainerWorkspace:
    global _default_workspace
    if _default_workspace is None:
        _default_workspace = TrainerWorkspace(
            get_backend_client(),
            banner_seconds=get_settings().success_banner_seconds,
        )
    return _default_workspace
