"""
Router helpers shared by every screen: the logged-in-user guard and the
mapping from FitTrackError to HTTPException.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import HTTPException, status

from fittrack.errors import (
    BackendAPIError,
    BackendConnectionError,
    FitTrackError,
    PreconditionError,
)
from fittrack.models.user import User, UserRole
from fittrack.services.auth import get_auth_service

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: dict[type[FitTrackError], int] = {
    PreconditionError: status.HTTP_409_CONFLICT,
    BackendAPIError: status.HTTP_502_BAD_GATEWAY,
    BackendConnectionError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def http_error(exc: FitTrackError) -> HTTPException:
    """Render a FitTrackError as the inline alert the screen shows."""
    status_code = _STATUS_BY_ERROR.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    return HTTPException(
        status_code=status_code,
        detail={"message": exc.message, "code": exc.code},
    )


def exercise_not_found(index: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={"message": f"No exercise at index {index}", "code": "exercise_not_found"},
    )


async def require_user(role: Optional[UserRole] = None) -> User:
    """Return the logged-in user, re-checking with the backend if needed.

    Raises HTTPException 401 when nobody is logged in and 403 when the
    user's role does not match ``role``.
    """
    auth = get_auth_service()
    user = auth.user or await auth.check()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": "Not logged in", "code": "auth_required"},
        )
    if role is not None and user.role != role:
        logger.warning("User %s (%s) denied %s screen", user.id, user.role, role)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"message": "This screen is not available for your account", "code": "wrong_role"},
        )
    return user
