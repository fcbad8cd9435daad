"""
Tests for Trainer Workspace
===========================
Covers:
- load_students: list fetched; failure logged and previous list kept
- Draft editing: add / update / remove rows, unknown field, bad index,
  selecting student or day resets the draft
- save(): refused without student/day, with no rows, with an incomplete row
  (1-based row number in the message); no request made in those cases
- save(): plan sent for the selected student and day, success banner shown
- Success banner clears itself after the configured delay
- Backend refusal: error raised, no banner
- reset(): students, selection, draft and banner cleared

Run: pytest tests/test_trainer_workspace.py -v
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from fittrack.errors import BackendAPIError, BackendConnectionError, PreconditionError
from fittrack.models.user import Student
from fittrack.models.workout import Weekday
from fittrack.services.backend import BackendClient
from fittrack.services.trainer_workspace import (
    SAVED_MESSAGE,
    TrainerWorkspace,
    TransientMessage,
)

# ---------------------------------------------------------------------------
# Fixtures / constants
# ---------------------------------------------------------------------------

_T0 = datetime(2026, 10, 19, 18, 0, 0, tzinfo=timezone.utc)

_STUDENTS = [
    Student(id=3, nome_completo="Bruno Lima", email="bruno@example.com"),
    Student(id=4, nome_completo="Carla Dias", email="carla@example.com"),
]


class _FakeClock:

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def _workspace(client: AsyncMock | None = None, clock: _FakeClock | None = None) -> TrainerWorkspace:
    client = client or AsyncMock(spec=BackendClient)
    return TrainerWorkspace(client, banner_seconds=3, clock=clock or _FakeClock(_T0))


def _filled(workspace: TrainerWorkspace, rows: int = 1) -> TrainerWorkspace:
    workspace.select_student(3)
    workspace.select_day("quinta")
    for _ in range(rows):
        index = workspace.add_exercise()
        workspace.update_exercise(index, "name", f"Exercise {index + 1}")
        workspace.update_exercise(index, "sets", "3x12")
        workspace.update_exercise(index, "rest", "60s")
    return workspace


# ---------------------------------------------------------------------------
# TestStudents
# ---------------------------------------------------------------------------

class TestStudents:

    @pytest.mark.asyncio
    async def test_load_students(self):
        client = AsyncMock(spec=BackendClient)
        client.fetch_students.return_value = _STUDENTS
        workspace = _workspace(client)

        assert await workspace.load_students() == _STUDENTS
        assert workspace.student("4").full_name == "Carla Dias"
        assert workspace.student(99) is None

    @pytest.mark.asyncio
    async def test_load_failure_keeps_previous_list(self):
        client = AsyncMock(spec=BackendClient)
        client.fetch_students.side_effect = [_STUDENTS, BackendConnectionError()]
        workspace = _workspace(client)

        await workspace.load_students()
        assert await workspace.load_students() == _STUDENTS


# ---------------------------------------------------------------------------
# TestDraft
# ---------------------------------------------------------------------------

class TestDraft:

    def test_add_update_remove(self):
        workspace = _filled(_workspace(), rows=3)
        workspace.remove_exercise(1)

        assert [e.name for e in workspace.exercises] == ["Exercise 1", "Exercise 3"]

    def test_unknown_field_refused(self):
        workspace = _workspace()
        workspace.add_exercise()
        with pytest.raises(PreconditionError):
            workspace.update_exercise(0, "weight", "20kg")

    def test_bad_index(self):
        workspace = _workspace()
        with pytest.raises(IndexError):
            workspace.update_exercise(0, "name", "Row")
        with pytest.raises(IndexError):
            workspace.remove_exercise(0)

    def test_selecting_resets_draft(self):
        workspace = _filled(_workspace(), rows=2)
        workspace.select_day("sexta")
        assert workspace.exercises == []

        _filled(workspace)
        workspace.select_student(4)
        assert workspace.exercises == []

    def test_unknown_day_refused(self):
        workspace = _workspace()
        with pytest.raises(PreconditionError):
            workspace.select_day("someday")
        assert workspace.selected_day is None


# ---------------------------------------------------------------------------
# TestSave
# ---------------------------------------------------------------------------

class TestSave:

    @pytest.mark.asyncio
    async def test_requires_student_and_day(self):
        client = AsyncMock(spec=BackendClient)
        workspace = _workspace(client)
        workspace.select_student(3)

        with pytest.raises(PreconditionError) as exc_info:
            await workspace.save()

        assert exc_info.value.message == "Select a student and a day of the week"
        client.save_workout.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_requires_an_exercise(self):
        client = AsyncMock(spec=BackendClient)
        workspace = _workspace(client)
        workspace.select_student(3)
        workspace.select_day("quinta")

        with pytest.raises(PreconditionError) as exc_info:
            await workspace.save()

        assert exc_info.value.message == "Add at least one exercise"
        client.save_workout.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_incomplete_row_names_its_number(self):
        client = AsyncMock(spec=BackendClient)
        workspace = _filled(_workspace(client), rows=2)
        workspace.update_exercise(1, "rest", "")

        with pytest.raises(PreconditionError) as exc_info:
            await workspace.save()

        assert exc_info.value.message == "Fill in every field of exercise 2"
        client.save_workout.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_save_sends_plan_and_shows_banner(self):
        client = AsyncMock(spec=BackendClient)
        workspace = _filled(_workspace(client), rows=2)

        await workspace.save()

        student_id, day, exercises = client.save_workout.await_args.args
        assert student_id == 3
        assert day == Weekday.THURSDAY
        assert [e.name for e in exercises] == ["Exercise 1", "Exercise 2"]
        assert workspace.success.text == SAVED_MESSAGE
        assert not workspace.saving

    @pytest.mark.asyncio
    async def test_banner_clears_after_delay(self):
        clock = _FakeClock(_T0)
        workspace = _filled(_workspace(clock=clock))

        await workspace.save()
        clock.now = _T0 + timedelta(seconds=2.9)
        assert workspace.success.text == SAVED_MESSAGE

        clock.now = _T0 + timedelta(seconds=3)
        assert workspace.success.text is None

    @pytest.mark.asyncio
    async def test_backend_refusal_shows_no_banner(self):
        client = AsyncMock(spec=BackendClient)
        client.save_workout.side_effect = BackendAPIError(403, "Student is not linked to you")
        workspace = _filled(_workspace(client))

        with pytest.raises(BackendAPIError) as exc_info:
            await workspace.save()

        assert exc_info.value.message == "Student is not linked to you"
        assert workspace.success.text is None
        assert not workspace.saving
        assert len(workspace.exercises) == 1


# ---------------------------------------------------------------------------
# TestTransientMessage
# ---------------------------------------------------------------------------

class TestTransientMessage:

    def test_show_again_extends_lifetime(self):
        clock = _FakeClock(_T0)
        message = TransientMessage(3, clock)
        message.show("first")

        clock.now = _T0 + timedelta(seconds=2)
        message.show("second")
        clock.now = _T0 + timedelta(seconds=4)

        assert message.text == "second"

    def test_clear(self):
        message = TransientMessage(3, _FakeClock(_T0))
        message.show("hello")
        message.clear()
        assert message.text is None


# ---------------------------------------------------------------------------
# TestReset
# ---------------------------------------------------------------------------

class TestReset:

    @pytest.mark.asyncio
    async def test_reset_forgets_previous_trainer(self):
        client = AsyncMock(spec=BackendClient)
        client.fetch_students.return_value = _STUDENTS
        workspace = _workspace(client)
        await workspace.load_students()
        _filled(workspace, rows=2)
        await workspace.save()

        workspace.reset()

        assert workspace.students == []
        assert workspace.selected_student is None
        assert workspace.selected_day is None
        assert workspace.exercises == []
        assert workspace.success.text is None
        assert not workspace.saving
