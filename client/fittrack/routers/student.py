"""
Student Dashboard Router
========================
The student's screen: pick a weekday, start the workout, tick exercises
off and note loads while the timer runs, then finish.

Every route returns the full dashboard snapshot so the caller can render
in one round-trip. State lives in the WorkoutSessionController; the routes
only translate commands and errors.

Routes (prefix /api/v1/student):
    GET  /dashboard                      current snapshot
    POST /select/{day}                   show a weekday (409 mid-workout)
    POST /session/start                  open a session
    POST /session/finish                 close it, returns the duration
    POST /exercises/{index}/completed    tick / untick one exercise
    POST /exercises/{index}/load         record the load used
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from fastapi import APIRouter, status
from pydantic import BaseModel

from fittrack.errors import FitTrackError
from fittrack.models.workout import Weekday
from fittrack.routers._shared import exercise_not_found, http_error, require_user
from fittrack.services.session_controller import (
    SessionState,
    WorkoutSessionController,
    finish_summary,
    get_session_controller,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/student", tags=["student"])


# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------

class CompletedUpdate(BaseModel):
    completed: bool


class LoadUpdate(BaseModel):
    load: str


class DayOptionView(BaseModel):
    """One weekday button."""
    day: Weekday
    label: str
    exercise_count: Optional[int] = None
    selected: bool
    selectable: bool


class ExerciseView(BaseModel):
    """One exercise card: the prescription plus the student's progress."""
    index: int
    name: str
    sets: str
    rest: str
    completed: bool
    load: str


class StudentDashboardResponse(BaseModel):
    state: SessionState
    days: list[DayOptionView]
    selected_day: Optional[Weekday] = None
    workout_id: Optional[Union[int, str]] = None
    exercises: list[ExerciseView]
    session_id: Optional[Union[int, str]] = None
    elapsed_seconds: int
    elapsed_display: str
    busy: bool
    # Informational text for empty states; never an error.
    notice: Optional[str] = None


class FinishResponse(BaseModel):
    duration_seconds: Optional[int] = None
    summary: str
    dashboard: StudentDashboardResponse


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

async def _controller() -> WorkoutSessionController:
    await require_user("aluno")
    controller = get_session_controller()
    if not controller.loaded:
        await controller.load()
    return controller


def _render(controller: WorkoutSessionController) -> StudentDashboardResponse:
    selector = controller.selector
    workout = controller.current_workout
    active = controller.active_session is not None
    progress = controller.checklist.entries

    exercises = []
    for index, spec in enumerate(workout.exercises if workout else []):
        entry = progress[index] if index < len(progress) else None
        exercises.append(
            ExerciseView(
                index=index,
                name=spec.name,
                sets=spec.sets,
                rest=spec.rest,
                completed=entry.completed if entry else False,
                load=entry.load if entry else "",
            )
        )

    notice = None
    if selector.selected_day is None and not active:
        notice = "Welcome! Pick a day of the week to see and start your workout."
    elif selector.selected_day is not None and workout is None:
        notice = (
            f"No workout scheduled for {selector.selected_day.label}. "
            "Get in touch with your personal trainer."
        )

    return StudentDashboardResponse(
        state=controller.current_state,
        days=[DayOptionView(**vars(option)) for option in selector.day_options(active)],
        selected_day=selector.selected_day,
        workout_id=workout.id if workout else None,
        exercises=exercises,
        session_id=controller.active_session.id if active else None,
        elapsed_seconds=controller.elapsed,
        elapsed_display=controller.elapsed_display,
        busy=controller.busy,
        notice=notice,
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get(
    "/dashboard",
    response_model=StudentDashboardResponse,
    summary="Student dashboard snapshot",
)
async def get_dashboard() -> StudentDashboardResponse:
    controller = await _controller()
    return _render(controller)


@router.post(
    "/select/{day}",
    response_model=StudentDashboardResponse,
    summary="Show a weekday's workout",
    responses={409: {"description": "A workout is in progress, or unknown day"}},
)
async def select_day(day: str) -> StudentDashboardResponse:
    controller = await _controller()
    try:
        controller.select(day)
    except FitTrackError as exc:
        raise http_error(exc) from exc
    return _render(controller)


@router.post(
    "/session/start",
    response_model=StudentDashboardResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Start the selected workout",
    responses={
        409: {"description": "No workout selected or one already running"},
        502: {"description": "Backend refused, e.g. a session is already open"},
        503: {"description": "Backend unreachable"},
    },
)
async def start_session() -> StudentDashboardResponse:
    controller = await _controller()
    try:
        await controller.start()
    except FitTrackError as exc:
        raise http_error(exc) from exc
    return _render(controller)


@router.post(
    "/session/finish",
    response_model=FinishResponse,
    summary="Finish the running workout",
    responses={
        409: {"description": "No workout in progress"},
        502: {"description": "Backend refused"},
        503: {"description": "Backend unreachable"},
    },
)
async def finish_session() -> FinishResponse:
    controller = await _controller()
    try:
        finished = await controller.finish()
    except FitTrackError as exc:
        raise http_error(exc) from exc
    return FinishResponse(
        duration_seconds=finished.duration_seconds,
        summary=finish_summary(finished),
        dashboard=_render(controller),
    )


@router.post(
    "/exercises/{index}/completed",
    response_model=StudentDashboardResponse,
    summary="Tick or untick an exercise",
)
async def set_completed(index: int, body: CompletedUpdate) -> StudentDashboardResponse:
    controller = await _controller()
    try:
        controller.set_completed(index, body.completed)
    except IndexError as exc:
        raise exercise_not_found(index) from exc
    except FitTrackError as exc:
        raise http_error(exc) from exc
    return _render(controller)


@router.post(
    "/exercises/{index}/load",
    response_model=StudentDashboardResponse,
    summary="Record the load used for an exercise",
)
async def set_load(index: int, body: LoadUpdate) -> StudentDashboardResponse:
    controller = await _controller()
    try:
        controller.set_load(index, body.load)
    except IndexError as exc:
        raise exercise_not_found(index) from exc
    except FitTrackError as exc:
        raise http_error(exc) from exc
    return _render(controller)
