"""Stage 1: Market Discovery. Pick one unexplored niche from the core markets."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from nichescout.models.market import CORE_MARKETS, extract_niche
from nichescout.parsing import parse_response
from nichescout.stages.base import AbstractStage, StageContext, register_stage

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = structlog.get_logger()

_DISCOVERY_PROMPT = """\
You are a business strategy and market segmentation expert. Your task is to:
1. Select ONE unique niche (not previously chosen) from the core markets {markets}.
2. Output a JSON object with the following structure:
{{
  "chosenMarket": {{
    "coreMarket": "[{market_choices}]",
    "category": "[Category]",
    "subcategory": "[Subcategory]",
    "niche": "[Niche]",
    "subNiche": "[Sub-Niche]",
    "reasoning": "[Why this niche was selected and why it is unique]"
  }},
  "categories": [
    {{
      "main": "[Category]",
      "subcategories": ["[Subcategory1]", "[Subcategory2]"]
    }}
  ]
}}
List as many categories as you can.
Rules:
- Do NOT select any niche from this exclusion list: {exclusions}
- Do NOT ask the user for input, just select and output the JSON.
- All fields must be filled. Do not leave any blank.
- The output must be valid JSON, with no extra text before or after.
Begin now.
"""


def build_discovery_prompt(excluded_niches: Iterable[str]) -> str:
    excluded = sorted(set(excluded_niches))
    return _DISCOVERY_PROMPT.format(
        markets=", ".join(CORE_MARKETS[:-1]) + f", or {CORE_MARKETS[-1]}",
        market_choices="|".join(CORE_MARKETS),
        exclusions=", ".join(excluded) if excluded else "None",
    )


@register_stage
class MarketDiscoveryStage(AbstractStage):
    name = "market_discovery"
    stage_number = 1
    result_key = "marketDiscovery"
    use_high_quality_model = True

    async def run(self, ctx: StageContext, previous: Any) -> Any:
        prompt = build_discovery_prompt(ctx.excluded_niches)
        response = await self.complete(ctx, prompt)
        discovery = parse_response(response)

        niche = extract_niche(discovery)
        if niche is None:
            logger.warning(
                "Discovery returned no usable niche",
                structured=not isinstance(discovery, str),
            )
        elif niche in ctx.excluded_niches:
            # The exclusion is a request to the model, not a guarantee.
            logger.warning("Discovery repeated an excluded niche", niche=niche)
        else:
            logger.info("Niche chosen", niche=niche)
        return discovery
