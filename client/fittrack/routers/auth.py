"""
Auth Router
===========
Login, logout, sign-up and "who am I" for the local client.

The backend owns the account and the session cookie; these routes just
drive AuthService and report who is on the other end. Sign-up runs the
minimal form checks (matching passwords, minimum length) before anything
is sent.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from fittrack.errors import FitTrackError
from fittrack.models.user import LoginRequest, RegistrationForm, User
from fittrack.routers._shared import http_error
from fittrack.services.auth import get_auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.get(
    "/me",
    response_model=User,
    summary="Current user",
    responses={401: {"description": "Not logged in"}},
)
async def get_me() -> User:
    user = await get_auth_service().check()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": "Not logged in", "code": "auth_required"},
        )
    return user


@router.post("/login", response_model=User, summary="Log in")
async def login(body: LoginRequest) -> User:
    try:
        return await get_auth_service().login(body.email, body.password)
    except FitTrackError as exc:
        raise http_error(exc) from exc


@router.post(
    "/register",
    response_model=User,
    status_code=status.HTTP_201_CREATED,
    summary="Create an account",
    responses={409: {"description": "Passwords do not match or are too short"}},
)
async def register(body: RegistrationForm) -> User:
    try:
        return await get_auth_service().register(body)
    except FitTrackError as exc:
        raise http_error(exc) from exc


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT, summary="Log out")
async def logout() -> None:
    try:
        await get_auth_service().logout()
    except FitTrackError as exc:
        logger.error("Logout failed: %s", exc.message)
        raise http_error(exc) from exc
