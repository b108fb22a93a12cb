"""Models for the market discovery stage output."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

CORE_MARKETS: tuple[str, ...] = ("Health", "Wealth", "Relationships")


class ChosenMarket(BaseModel):
    """The single niche selected by the discovery stage."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    core_market: str = Field(default="", alias="coreMarket")
    category: str = ""
    subcategory: str = ""
    niche: str = ""
    sub_niche: str = Field(default="", alias="subNiche")
    reasoning: str = ""

    @classmethod
    def from_discovery(cls, market_discovery: Any) -> ChosenMarket | None:
        """Read ``chosenMarket`` out of a discovery payload, or None if unusable."""
        if not isinstance(market_discovery, dict):
            return None
        chosen = market_discovery.get("chosenMarket")
        if not isinstance(chosen, dict):
            return None
        try:
            return cls.model_validate(chosen)
        except ValidationError:
            return None


class MarketCategory(BaseModel):
    """One entry of the category map the discovery stage returns alongside its pick."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    main: str
    subcategories: list[str] = Field(default_factory=list)


def extract_niche(market_discovery: Any) -> str | None:
    """Return ``chosenMarket.niche`` if it is a non-blank string.

    Tolerates opaque text and partially filled objects, which is what the
    model returns when it ignores the requested JSON shape.
    """
    if not isinstance(market_discovery, dict):
        return None
    chosen = market_discovery.get("chosenMarket")
    if not isinstance(chosen, dict):
        return None
    niche = chosen.get("niche")
    if isinstance(niche, str) and niche.strip():
        return niche
    return None
