"""FastAPI dependency injection."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request

from nichescout.config import Settings
from nichescout.db import KeyValueStore
from nichescout.models.user import UserIdentity
from nichescout.service import ResearchService


def _get_store(request: Request) -> KeyValueStore:
    return request.app.state.store  # type: ignore[no-any-return]


def _get_settings(request: Request) -> Settings:
    return request.app.state.settings  # type: ignore[no-any-return]


def _get_service(request: Request) -> ResearchService:
    return request.app.state.service  # type: ignore[no-any-return]


def _require_user(service: Annotated[ResearchService, Depends(_get_service)]) -> UserIdentity:
    user = service.current_user()
    if user is None:
        raise HTTPException(status_code=401, detail="Not signed in")
    return user


StoreDep = Annotated[KeyValueStore, Depends(_get_store)]
SettingsDep = Annotated[Settings, Depends(_get_settings)]
ServiceDep = Annotated[ResearchService, Depends(_get_service)]
UserDep = Annotated[UserIdentity, Depends(_require_user)]
