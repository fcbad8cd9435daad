"""
Day / Workout Selector
======================
Maps the seven weekday tags to the student's workout plans and tracks
which day is on screen. A day without a plan is a valid selection: it
shows an informational "nothing scheduled" state, not an error.

While a session is running, only the session's own day stays enabled,
and re-selection of any day is refused.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from fittrack.errors import PreconditionError
from fittrack.models.workout import Weekday, WorkoutDefinition

logger = logging.getLogger(__name__)

DAY_LOCKED_MESSAGE = "Finish the current workout before selecting another day"


@dataclass(frozen=True)
class DayOption:
    """One weekday button."""

    day: Weekday
    label: str
    exercise_count: Optional[int]  # None when nothing is scheduled
    selected: bool
    selectable: bool


class DaySelector:

    def __init__(self) -> None:
        self.workouts: dict[Weekday, WorkoutDefinition] = {}
        self.selected_day: Optional[Weekday] = None
        self.current_workout: Optional[WorkoutDefinition] = None

    def set_workouts(self, workouts: dict[Weekday, WorkoutDefinition]) -> None:
        self.workouts = dict(workouts)

    def workout_for(self, day: Weekday) -> Optional[WorkoutDefinition]:
        return self.workouts.get(day)

    def find_by_workout_id(
        self, workout_id: Union[int, str]
    ) -> Optional[tuple[Weekday, WorkoutDefinition]]:
        """Linear scan for the day whose plan has ``workout_id``."""
        for day, workout in self.workouts.items():
            if str(workout.id) == str(workout_id):
                return day, workout
        return None

    def select(self, day: Union[Weekday, str], locked: bool = False) -> Optional[WorkoutDefinition]:
        """Put ``day`` on screen and return its plan (None if there is none).

        Raises PreconditionError, leaving the selection untouched, when
        ``locked`` or when ``day`` is not a weekday tag.
        """
        if locked:
            raise PreconditionError(DAY_LOCKED_MESSAGE)
        day = _parse_day(day)
        self.selected_day = day
        self.current_workout = self.workouts.get(day)
        return self.current_workout

    def show(self, day: Optional[Weekday], workout: Optional[WorkoutDefinition]) -> None:
        """Force the on-screen day, bypassing the lock (used on resume)."""
        self.selected_day = day
        self.current_workout = workout

    def day_options(self, active: bool = False) -> list[DayOption]:
        options = []
        for day in Weekday:
            workout = self.workouts.get(day)
            options.append(
                DayOption(
                    day=day,
                    label=day.label,
                    exercise_count=len(workout.exercises) if workout else None,
                    selected=day == self.selected_day,
                    selectable=not active or day == self.selected_day,
                )
            )
        return options


def _parse_day(day: Union[Weekday, str]) -> Weekday:
    try:
        return Weekday(day)
    except ValueError:
        raise PreconditionError(f"Unknown weekday: {day}") from None
