"""API request/response schemas (separate from domain models)."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

# --- Requests ---


class RunPipelineRequest(BaseModel):
    collect_errors: bool = False


class SaveIdeaRequest(BaseModel):
    content: str | None = Field(
        default=None,
        description="Content to save; the most recent pipeline result when omitted",
    )


class AddNicheRequest(BaseModel):
    niche: str = Field(min_length=1)


class LoginRequest(BaseModel):
    email: str
    password: str


# --- Responses ---


class HealthResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: str
    version: str
    db_connected: bool
    checks: dict[str, bool] = Field(default_factory=dict)


class ConfigCheckResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    configured: dict[str, bool]
    models: dict[str, str] = Field(default_factory=dict)


class IdeaResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    content: str


class IdeaListResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    ideas: list[IdeaResponse]
    total: int


class NicheListResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    niches: list[str]
    total: int


class UserResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    email: str
    name: str


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str
