"""Re-exports all Pydantic models."""

from nichescout.models.failure import FailureReport, StageFailure
from nichescout.models.idea import SavedIdea
from nichescout.models.market import ChosenMarket, MarketCategory, extract_niche
from nichescout.models.result import PipelineResult
from nichescout.models.user import UserIdentity

__all__ = [
    "ChosenMarket",
    "FailureReport",
    "MarketCategory",
    "PipelineResult",
    "SavedIdea",
    "StageFailure",
    "UserIdentity",
    "extract_niche",
]
