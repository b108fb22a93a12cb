"""Identity of the signed-in user."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class UserIdentity(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    email: str
    name: str = ""
