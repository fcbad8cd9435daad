"""
Trainer Dashboard Router
========================
The trainer's screen: their shareable trainer code, the students linked
to it, and the plan editor for one student and weekday.

The editor is a draft held in TrainerWorkspace; nothing reaches the
backend until POST /save, which validates the draft locally first. After
a successful save the workspace shows a success banner that clears itself
after a few seconds.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from fastapi import APIRouter
from pydantic import BaseModel

from fittrack.errors import FitTrackError
from fittrack.models.user import Student
from fittrack.models.workout import ExerciseSpec, Weekday
from fittrack.routers._shared import exercise_not_found, http_error, require_user
from fittrack.services.trainer_workspace import TrainerWorkspace, get_trainer_workspace

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/trainer", tags=["trainer"])


# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------

class StudentSelection(BaseModel):
    student_id: Union[int, str]


class DaySelection(BaseModel):
    day: str


class ExerciseFieldUpdate(BaseModel):
    field: str  # name | sets | rest
    value: str


class TrainerWorkspaceResponse(BaseModel):
    trainer_code: Optional[str] = None
    students: list[Student]
    selected_student: Optional[Union[int, str]] = None
    selected_student_name: Optional[str] = None
    selected_day: Optional[Weekday] = None
    exercises: list[ExerciseSpec]
    saving: bool
    success: Optional[str] = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

async def _workspace() -> tuple[TrainerWorkspace, Optional[str]]:
    user = await require_user("personal_trainer")
    return get_trainer_workspace(), user.trainer_code


def _render(workspace: TrainerWorkspace, trainer_code: Optional[str]) -> TrainerWorkspaceResponse:
    student = (
        workspace.student(workspace.selected_student)
        if workspace.selected_student is not None
        else None
    )
    return TrainerWorkspaceResponse(
        trainer_code=trainer_code,
        students=workspace.students,
        selected_student=workspace.selected_student,
        selected_student_name=student.full_name if student else None,
        selected_day=workspace.selected_day,
        exercises=workspace.exercises,
        saving=workspace.saving,
        success=workspace.success.text,
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("/workspace", response_model=TrainerWorkspaceResponse, summary="Trainer dashboard snapshot")
async def get_workspace(refresh: bool = False) -> TrainerWorkspaceResponse:
    """Snapshot of the editor. Students are (re)fetched on first view or ``?refresh=true``."""
    workspace, code = await _workspace()
    if refresh or not workspace.students:
        await workspace.load_students()
    return _render(workspace, code)


@router.post("/select-student", response_model=TrainerWorkspaceResponse)
async def select_student(body: StudentSelection) -> TrainerWorkspaceResponse:
    workspace, code = await _workspace()
    workspace.select_student(body.student_id)
    return _render(workspace, code)


@router.post("/select-day", response_model=TrainerWorkspaceResponse)
async def select_day(body: DaySelection) -> TrainerWorkspaceResponse:
    workspace, code = await _workspace()
    try:
        workspace.select_day(body.day)
    except FitTrackError as exc:
        raise http_error(exc) from exc
    return _render(workspace, code)


@router.post("/exercises", response_model=TrainerWorkspaceResponse)
async def add_exercise() -> TrainerWorkspaceResponse:
    workspace, code = await _workspace()
    workspace.add_exercise()
    return _render(workspace, code)


@router.post("/exercises/{index}", response_model=TrainerWorkspaceResponse)
async def update_exercise(index: int, body: ExerciseFieldUpdate) -> TrainerWorkspaceResponse:
    workspace, code = await _workspace()
    try:
        workspace.update_exercise(index, body.field, body.value)
    except IndexError as exc:
        raise exercise_not_found(index) from exc
    except FitTrackError as exc:
        raise http_error(exc) from exc
    return _render(workspace, code)


@router.delete("/exercises/{index}", response_model=TrainerWorkspaceResponse)
async def remove_exercise(index: int) -> TrainerWorkspaceResponse:
    workspace, code = await _workspace()
    try:
        workspace.remove_exercise(index)
    except IndexError as exc:
        raise exercise_not_found(index) from exc
    return _render(workspace, code)


@router.post(
    "/save",
    response_model=TrainerWorkspaceResponse,
    summary="Save the drafted plan",
    responses={
        409: {"description": "Draft incomplete or nothing selected"},
        502: {"description": "Backend refused"},
        503: {"description": "Backend unreachable"},
    },
)
async def save_workout() -> TrainerWorkspaceResponse:
    workspace, code = await _workspace()
    try:
        await workspace.save()
    except FitTrackError as exc:
        raise http_error(exc) from exc
    return _render(workspace, code)
