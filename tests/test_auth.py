"""Tests for mock session authentication."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from nichescout.auth import CURRENT_USER_KEY, InvalidCredentialsError, SessionAuth

if TYPE_CHECKING:
    from nichescout.config import Settings
    from nichescout.db import KeyValueStore


class TestSessionAuth:
    def test_signed_out_by_default(self, store: KeyValueStore, settings: Settings):
        assert SessionAuth(store, settings).get_current_user() is None

    def test_demo_login(self, store: KeyValueStore, settings: Settings):
        auth = SessionAuth(store, settings)
        user = auth.login("test@example.com", "password")
        assert user.id == "test@example.com"
        assert user.name == "Test User"
        assert SessionAuth(store, settings).get_current_user() == user

    def test_wrong_password_rejected(self, store: KeyValueStore, settings: Settings):
        with pytest.raises(InvalidCredentialsError):
            SessionAuth(store, settings).login("test@example.com", "nope")
        assert store.get(CURRENT_USER_KEY) is None

    def test_signup_signs_in(self, store: KeyValueStore, settings: Settings):
        auth = SessionAuth(store, settings)
        user = auth.signup("Ada", "ada@example.com")
        assert auth.get_current_user() == user

    def test_logout(self, store: KeyValueStore, settings: Settings):
        auth = SessionAuth(store, settings)
        auth.login("test@example.com", "password")
        auth.logout()
        assert auth.get_current_user() is None

    def test_corrupt_session_discarded(self, store: KeyValueStore, settings: Settings):
        store.set(CURRENT_USER_KEY, "{broken")
        assert SessionAuth(store, settings).get_current_user() is None
        assert store.get(CURRENT_USER_KEY) is None
