"""
Auth Service
============
Who is logged in. The backend keeps the real session (a cookie held by
BackendClient); this service only remembers the user it last reported.

Screens keep per-user state in process-wide singletons, so every change of
user (login, sign-up, logout, or the backend recognising someone else)
runs the ``on_user_change`` hooks, which wipe that state.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence, Union

from fittrack.errors import BackendConnectionError
from fittrack.models.user import RegistrationForm, User
from fittrack.services import registration
from fittrack.services.backend import BackendClient, get_backend_client
from fittrack.services.session_controller import get_session_controller
from fittrack.services.trainer_workspace import get_trainer_workspace

logger = logging.getLogger(__name__)

UserChangeHook = Callable[[], None]


class AuthService:

    def __init__(
        self,
        client: BackendClient,
        on_user_change: Sequence[UserChangeHook] = (),
    ) -> None:
        self._client = client
        self._hooks = list(on_user_change)
        self.user: Optional[User] = None
        # Survives a failed check, so a brief outage does not count as a switch.
        self._last_user_id: Optional[Union[int, str]] = None

    async def check(self) -> Optional[User]:
        """Ask the backend whether our cookie still maps to a user."""
        try:
            user = await self._client.fetch_me()
        except BackendConnectionError:
            logger.info("Backend unreachable during session check; treating as logged out")
            user = None
        if user is not None and user.id != self._last_user_id:
            self._switch(user)
        else:
            self.user = user
        return self.user

    async def login(self, email: str, password: str) -> User:
        user = await self._client.login(email, password)
        self._switch(user)
        logger.info("User %s logged in", user.id)
        return user

    async def register(self, form: RegistrationForm) -> User:
        registration.validate(form)
        user = await self._client.register(registration.to_payload(form))
        self._switch(user)
        logger.info("Registered user %s as %s", user.id, user.role)
        return user

    async def logout(self) -> None:
        await self._client.logout()
        self._switch(None)

    def _switch(self, user: Optional[User]) -> None:
        self.user = user
        self._last_user_id = user.id if user is not None else None
        for hook in self._hooks:
            hook()


# ---------------------------------------------------------------------------
# Singleton
# ---------------------------------------------------------------------------

_default_auth: AuthService | None = None


def get_auth_service() -> AuthService:
    global _default_auth
    if _default_auth is None:
        _default_auth = AuthService(
            get_backend_client(),
            on_user_change=[get_session_controller().reset, get_trainer_workspace().reset],
        )
    return _default_auth
