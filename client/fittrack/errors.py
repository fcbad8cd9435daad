"""
Errors
======
Every failure a user-triggered action can end in. The view server maps
each class to one HTTP status; nothing retries automatically.
"""

from __future__ import annotations

CONNECTION_ERROR_MESSAGE = "Connection error"


class FitTrackError(Exception):
    """Base class. ``message`` is safe to show the user as-is."""

    code = "fittrack_error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class PreconditionError(FitTrackError):
    """Local check failed; no request was made."""

    code = "precondition_failed"


class BackendAPIError(FitTrackError):
    """Non-2xx response from the fitness backend."""

    code = "backend_rejected"

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        super().__init__(message)


class BackendConnectionError(FitTrackError):
    """The backend could not be reached, or did not answer in time."""

    code = "connection_error"

    def __init__(self, message: str = CONNECTION_ERROR_MESSAGE) -> None:
        super().__init__(message)
