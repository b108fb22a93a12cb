"""The aggregate record produced by one pipeline run."""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from nichescout.models.failure import StageFailure
from nichescout.models.market import ChosenMarket, MarketCategory, extract_niche

# Serialized (camelCase) key -> attribute name
RESULT_FIELDS: dict[str, str] = {
    "marketDiscovery": "market_discovery",
    "research": "research",
    "analysis": "analysis",
    "strategy": "strategy",
}


class PipelineResult(BaseModel):
    """Output of a pipeline run.

    Each stage field holds either a decoded JSON value or the opaque text the
    model returned. Fields for stages that never ran are absent from the
    serialized form rather than ``null``; use :meth:`has` to test presence.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    market_discovery: Any = Field(default=None, alias="marketDiscovery")
    research: Any = None
    analysis: Any = None
    strategy: Any = None
    errors: list[StageFailure] = Field(default_factory=list)

    def has(self, key: str) -> bool:
        """True if the stage field (camelCase or attribute name) was populated."""
        attr = RESULT_FIELDS.get(key, key)
        return attr in self.model_fields_set

    def to_dict(self) -> dict[str, Any]:
        """Serialize with camelCase keys, omitting absent stages and empty errors."""
        data = self.model_dump(by_alias=True, exclude_unset=True, mode="json")
        if not self.errors:
            data.pop("errors", None)
        return data

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_json(cls, text: str) -> PipelineResult:
        return cls.model_validate(json.loads(text))

    @property
    def niche(self) -> str | None:
        return extract_niche(self.market_discovery)

    @property
    def chosen_market(self) -> ChosenMarket | None:
        return ChosenMarket.from_discovery(self.market_discovery)

    @property
    def categories(self) -> list[MarketCategory]:
        if not isinstance(self.market_discovery, dict):
            return []
        raw = self.market_discovery.get("categories")
        if not isinstance(raw, list):
            return []
        categories: list[MarketCategory] = []
        for entry in raw:
            try:
                categories.append(MarketCategory.model_validate(entry))
            except ValidationError:
                continue
        return categories

    @property
    def solution_names(self) -> list[str]:
        """Names of the strategy's solution concepts, in the order returned."""
        if not isinstance(self.strategy, dict):
            return []
        solutions = self.strategy.get("solutions")
        if not isinstance(solutions, list):
            return []
        return [
            s["name"]
            for s in solutions
            if isinstance(s, dict) and isinstance(s.get("name"), str) and s["name"]
        ]
