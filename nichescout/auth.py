"""Mock session authentication.

Stands in for a real identity provider: one demo account, and the signed-in
user persisted under a single key so the CLI and API share a session.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from nichescout.models.user import UserIdentity

if TYPE_CHECKING:
    from nichescout.config import Settings
    from nichescout.protocols import KeyValuePort

logger = structlog.get_logger()

CURRENT_USER_KEY = "user"


class InvalidCredentialsError(ValueError):
    """Email/password pair rejected."""


class SessionAuth:
    def __init__(self, store: KeyValuePort, settings: Settings) -> None:
        self._store = store
        self._settings = settings

    def login(self, email: str, password: str) -> UserIdentity:
        if email != self._settings.demo_email or password != self._settings.demo_password:
            raise InvalidCredentialsError("Invalid email or password")
        return self._start_session(UserIdentity(id=email, email=email, name="Test User"))

    def signup(self, name: str, email: str) -> UserIdentity:
        """Create-and-sign-in; nothing is verified in the mock provider."""
        return self._start_session(UserIdentity(id=email, email=email, name=name))

    def logout(self) -> None:
        self._store.delete(CURRENT_USER_KEY)
        logger.info("Signed out")

    def get_current_user(self) -> UserIdentity | None:
        raw = self._store.get(CURRENT_USER_KEY)
        if raw is None:
            return None
        try:
            return UserIdentity.model_validate_json(raw)
        except ValidationError:
            logger.warning("Discarding unreadable session")
            self._store.delete(CURRENT_USER_KEY)
            return None

    def _start_session(self, user: UserIdentity) -> UserIdentity:
        self._store.set(CURRENT_USER_KEY, json.dumps(user.model_dump()))
        logger.info("Signed in", user_id=user.id)
        return user
