"""Stage 2: Research. Turn the chosen niche into a Reddit search query."""

from __future__ import annotations

from typing import Any

import structlog

from nichescout.models.market import extract_niche
from nichescout.stages.base import AbstractStage, StageContext, register_stage

logger = structlog.get_logger()

_RESEARCH_PROMPT = """\
You are a research agent. Your task is to generate a Reddit search query for the following market or niche:
"{niche}" (
   site:reddit.com
   inurl:comments|inurl:thread
   | intext:"I think"|"I feel"|"I was"|"I have been"|"I experienced"|"my experience"|"in my opinion"|"IMO"|
   "my biggest struggle"|"my biggest fear"|"I found that"|"I learned"|"I realized"|"my advice"|
   "struggles"|"problems"|"issues"|"challenge"|"difficulties"|"hardships"|"pain point"|
   "barriers"|"obstacles"|"concerns"|"frustrations"|"worries"|"hesitations"|"what I wish I knew"|"what I regret"
)
Return only the search query string, nothing else.
"""


def build_research_prompt(niche: str) -> str:
    return _RESEARCH_PROMPT.format(niche=niche)


@register_stage
class ResearchStage(AbstractStage):
    """Output is ``{"query": <raw text>}``; the reply is a bare query string and is
    never decoded. When a research source is configured, matching threads are
    attached under ``threads``."""

    name = "research"
    stage_number = 2
    result_key = "research"
    use_high_quality_model = True

    async def run(self, ctx: StageContext, previous: Any) -> Any:
        niche = extract_niche(previous)
        if niche is None:
            niche = ctx.settings.default_niche
            logger.info("Using default niche for research", niche=niche)

        query = await self.complete(ctx, build_research_prompt(niche))
        research: dict[str, Any] = {"query": query}

        if ctx.research_source is not None:
            threads = await ctx.research_source.search_market_discussions(niche)
            research["threads"] = threads
            logger.info(
                "Research threads collected",
                niche=niche,
                threads=len(threads),
                mock=any(t.get("isMockData", False) for t in threads),
            )
        return research
