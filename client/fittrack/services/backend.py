"""
Fitness Backend Client
======================
Async HTTP wrapper around the fitness backend's JSON API.

Responsibilities:
- keep the backend's session cookie between calls (auth is cookie-based)
- turn non-2xx responses into BackendAPIError, carrying the backend's
  ``error`` text verbatim when there is one, else a per-call fallback
- turn transport failures (refused, reset, timed out) into
  BackendConnectionError

The client never interprets business rules: "a session is already open",
"no workout for that day" and friends are the backend's call.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Optional, Union

import httpx

from fittrack.config import get_settings
from fittrack.errors import BackendAPIError, BackendConnectionError
from fittrack.models.user import Student, User
from fittrack.models.workout import (
    ExerciseProgress,
    ExerciseSpec,
    ExerciseUpdateRequest,
    FinishSessionRequest,
    Weekday,
    WorkoutDefinition,
    WorkoutSession,
)

logger = logging.getLogger(__name__)

Identifier = Union[int, str]


class BackendClient:
    """Makes cookie-authenticated requests to the fitness backend."""

    def __init__(self, base_url: str, timeout: Optional[float] = None) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._cookies = httpx.Cookies()

    # ---- Account ---------------------------------------------------------

    async def fetch_me(self) -> Optional[User]:
        """GET /api/me. None when the backend does not recognise our session."""
        response = await self._send("GET", "/api/me")
        if not response.is_success:
            return None
        return User(**response.json())

    async def login(self, email: str, password: str) -> User:
        """POST /api/login. The backend sets the session cookie on success."""
        data = await self._post(
            "/api/login",
            {"email": email, "senha": password},
            fallback="Failed to log in",
        )
        return User(**data.get("user", data))

    async def logout(self) -> None:
        await self._post("/api/logout", None, fallback="Failed to log out")
        self._cookies.clear()

    async def register(self, payload: dict) -> User:
        """POST /api/register with an already-cleaned payload."""
        data = await self._post("/api/register", payload, fallback="Failed to create account")
        return User(**data.get("user", data))

    # ---- Workouts --------------------------------------------------------

    async def fetch_workouts(self) -> dict[Weekday, WorkoutDefinition]:
        """GET /api/workouts: weekday tag to plan, for the logged-in student."""
        data = await self._get("/api/workouts", fallback="Failed to load workouts")
        workouts: dict[Weekday, WorkoutDefinition] = {}
        for tag, workout in data.items():
            try:
                day = Weekday(tag)
            except ValueError:
                logger.warning("Skipping workout for unknown weekday tag %r", tag)
                continue
            if workout:
                workouts[day] = WorkoutDefinition(**workout)
        return workouts

    async def save_workout(
        self,
        student_id: Identifier,
        day: Weekday,
        exercises: list[ExerciseSpec],
    ) -> dict:
        """POST /api/workouts: create or replace a student's plan for a day."""
        return await self._post(
            "/api/workouts",
            {
                "aluno_id": student_id,
                "dia_semana": day.value,
                "exercicios": [exercise.to_wire() for exercise in exercises],
            },
            fallback="Failed to save workout",
        )

    async def fetch_students(self) -> list[Student]:
        data = await self._get("/api/students", fallback="Failed to load students")
        return [Student(**item) for item in data]

    # ---- Sessions --------------------------------------------------------

    async def fetch_active_session(self) -> Optional[WorkoutSession]:
        """GET /api/workout-sessions/active. 404 means no session is open."""
        response = await self._send("GET", "/api/workout-sessions/active")
        if response.status_code == 404:
            return None
        data = _json_or_raise(response, fallback="Failed to load active session")
        return WorkoutSession(**data)

    async def create_session(self, workout_id: Identifier) -> WorkoutSession:
        data = await self._post(
            "/api/workout-sessions",
            {"workout_id": workout_id},
            fallback="Failed to start workout",
        )
        return WorkoutSession(**data)

    async def finish_session(
        self, session_id: Identifier, progress: list[ExerciseProgress]
    ) -> WorkoutSession:
        """Close the session with the full checklist snapshot.

        The returned session carries ``duration_seconds`` computed server-side.
        """
        body = FinishSessionRequest(exercise_status=progress).to_wire()
        data = await self._post(
            f"/api/workout-sessions/{session_id}/finish",
            body,
            fallback="Failed to finish workout",
        )
        return WorkoutSession(**data)

    async def update_exercise(
        self, session_id: Identifier, index: int, completed: bool, load: str
    ) -> None:
        body = ExerciseUpdateRequest(exercise_index=index, completed=completed, load=load).to_wire()
        await self._post(
            f"/api/workout-sessions/{session_id}/update-exercise",
            body,
            fallback="Failed to update exercise",
        )

    # ---- Transport -------------------------------------------------------

    async def _get(self, path: str, fallback: str) -> Any:
        response = await self._send("GET", path)
        return _json_or_raise(response, fallback)

    async def _post(self, path: str, body: Optional[dict], fallback: str) -> Any:
        response = await self._send("POST", path, json=body)
        return _json_or_raise(response, fallback)

    async def _send(self, method: str, path: str, json: Optional[dict] = None) -> httpx.Response:
        """Shared request path. Raises BackendConnectionError on transport failure."""
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                cookies=self._cookies,
                timeout=self._timeout,
            ) as client:
                response = await client.request(method, path, json=json)
                self._cookies = httpx.Cookies(client.cookies)
        except httpx.TransportError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise BackendConnectionError() from exc
        return response


def _json_or_raise(response: httpx.Response, fallback: str) -> Any:
    """Return the decoded body of a 2xx response, else raise BackendAPIError."""
    if response.is_success:
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            logger.warning(
                "%s %s answered %s with a non-JSON body",
                response.request.method,
                response.request.url.path,
                response.status_code,
            )
            raise BackendAPIError(response.status_code, fallback) from None

    message = fallback
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("error"):
        message = str(body["error"])
    raise BackendAPIError(response.status_code, message)


@lru_cache
def get_backend_client() -> BackendClient:
    settings = get_settings()
    return BackendClient(settings.api_base_url, timeout=settings.request_timeout_seconds)
