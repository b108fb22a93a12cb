"""Health check and config endpoints."""

from __future__ import annotations

from fastapi import APIRouter
from sqlalchemy.exc import SQLAlchemyError

from nichescout import __version__
from nichescout.api.deps import SettingsDep, StoreDep
from nichescout.api.schemas import ConfigCheckResponse, HealthResponse

router = APIRouter(tags=["system"])


@router.get("/health", response_model=HealthResponse)
def health_check(
    store: StoreDep,
) -> HealthResponse:
    db_ok = False
    try:
        db_ok = store.check_connection()
    except SQLAlchemyError:
        pass

    return HealthResponse(
        status="healthy" if db_ok else "unhealthy",
        version=__version__,
        db_connected=db_ok,
    )


@router.get("/config/check", response_model=ConfigCheckResponse)
def config_check(
    settings: SettingsDep,
) -> ConfigCheckResponse:
    return ConfigCheckResponse(
        configured={
            "gemini": bool(settings.gemini_api_key),
            "reddit": settings.reddit_enabled,
        },
        models={
            "fast": settings.llm_fast_model,
            "quality": settings.llm_quality_model,
        },
    )
