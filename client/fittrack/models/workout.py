"""
Workout Schemas
===============
Pydantic models for workout plans and workout sessions as the fitness
backend sends them. Wire field names are Portuguese; attribute names are
not, so every field carries an alias and the models accept either.

Key design decisions:
- ExerciseProgress tolerates nulls from the backend and normalises them
  to (False, "") so the checklist never has holes.
- Naive timestamps are treated as UTC.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ---------------------------------------------------------------------------
# Weekdays
# ---------------------------------------------------------------------------

class Weekday(str, Enum):
    """The seven fixed weekday tags used by the backend."""

    MONDAY = "segunda"
    TUESDAY = "terca"
    WEDNESDAY = "quarta"
    THURSDAY = "quinta"
    FRIDAY = "sexta"
    SATURDAY = "sabado"
    SUNDAY = "domingo"

    @property
    def label(self) -> str:
        return WEEKDAY_LABELS[self]


WEEKDAY_LABELS: dict[Weekday, str] = {
    Weekday.MONDAY: "Monday",
    Weekday.TUESDAY: "Tuesday",
    Weekday.WEDNESDAY: "Wednesday",
    Weekday.THURSDAY: "Thursday",
    Weekday.FRIDAY: "Friday",
    Weekday.SATURDAY: "Saturday",
    Weekday.SUNDAY: "Sunday",
}


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


# ---------------------------------------------------------------------------
# Workout plan (trainer-authored, read-only for the student)
# ---------------------------------------------------------------------------

class ExerciseSpec(_WireModel):
    """One prescribed exercise. All three fields are free text."""

    name: str = Field(default="", alias="nome")
    sets: str = Field(default="", alias="series")  # e.g. "3x12"
    rest: str = Field(default="", alias="tempo_descanso")  # e.g. "60s"


class WorkoutDefinition(_WireModel):
    """The plan for one weekday."""

    id: Union[int, str]
    weekday: Optional[Weekday] = Field(default=None, alias="dia_semana")
    exercises: list[ExerciseSpec] = Field(default_factory=list, alias="exercicios")


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------

class ExerciseProgress(_WireModel):
    """Completion flag and free-text load for one exercise of a session."""

    completed: bool = False
    load: str = Field(default="", alias="carga")

    @field_validator("completed", mode="before")
    @classmethod
    def _null_completed(cls, value):
        return False if value is None else value

    @field_validator("load", mode="before")
    @classmethod
    def _null_load(cls, value):
        return "" if value is None else str(value)


class WorkoutSession(_WireModel):
    """A single timed execution of a workout. Open while ``ended_at`` is None."""

    id: Union[int, str]
    workout_id: Union[int, str]
    started_at: Optional[datetime] = Field(default=None, alias="inicio")
    ended_at: Optional[datetime] = Field(default=None, alias="fim")
    exercise_status: list[ExerciseProgress] = Field(
        default_factory=list, alias="exercicios_status"
    )
    duration_seconds: Optional[int] = Field(default=None, alias="duracao_segundos")

    @field_validator("exercise_status", mode="before")
    @classmethod
    def _null_status(cls, value):
        return [] if value is None else value

    @field_validator("started_at", "ended_at")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def is_open(self) -> bool:
        return self.ended_at is None


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class FinishSessionRequest(_WireModel):
    """Full checklist snapshot sent when a session is closed."""

    exercise_status: list[ExerciseProgress] = Field(alias="exercicios_status")


class ExerciseUpdateRequest(_WireModel):
    """Progress of a single exercise, persisted while the session runs."""

    exercise_index: int = Field(..., ge=0)
    completed: bool
    load: str = Field(default="", alias="carga")
