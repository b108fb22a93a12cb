"""Stage 4: Strategy. Turn the pain point analysis into solution proposals."""

from __future__ import annotations

import json
from typing import Any

from nichescout.parsing import parse_response
from nichescout.stages.base import AbstractStage, StageContext, register_stage

_STRATEGY_PROMPT = """\
I've identified specific pain points within a market through research and customer feedback. Now I need to generate potential business solutions that address these pain points while creating unique value. Rather than rushing to an obvious solution, I want to systematically explore different approaches to solving these problems in ways that could stand out in the market. The goal is to discover opportunities others might miss by considering various dimensions of differentiation and value creation.

Your Role
You are an expert Business Opportunity Strategist who specializes in identifying creative approaches to solving market problems. Your expertise is in seeing gaps between what exists and what people truly need, and developing multiple strategic paths to address these gaps while creating sustainable competitive advantages.

Your Mission
Analyze the provided market pain points
Generate potential solutions using multiple strategic frameworks
Consider both capturing existing demand and creating new demand
Evaluate each solution for its potential to be "best in its category"
Identify unique angles and differentiators for each solution
Present a comprehensive yet practical set of business opportunities

Solution Frameworks to Apply
1. Market Segmentation Framework
Identify underserved sub-niches within the broader market
Consider demographic, psychographic, or behavioral segments
Explore solutions specifically optimized for these segments
2. Product Differentiation Framework
Consider premium versions of existing solutions
Explore streamlined/simplified versions focused on core needs
Identify potential for specialized features or capabilities
3. Business Model Innovation Framework
Explore subscription vs. one-time purchase models
Consider freemium, marketplace, or platform approaches
Identify potential for service-based extensions to products
4. Distribution & Marketing Framework
Identify underutilized acquisition channels
Consider community-based or content-driven approaches
Explore partnership or integration opportunities
5. New Paradigm Framework
Consider applications of emerging technologies
Identify relevant new trends, regulations, or data sources
Explore potential for creating entirely new categories

Output Format
Executive Summary: Brief overview of the identified market opportunity and key solution themes
For each framework, provide:
2-3 specific solution concepts
Key differentiators for each concept
Target audience specifics
Potential challenges to overcome
"Best in the world" potential assessment
For each solution concept, include:
Clear descriptive name
2-3 sentence explanation
Key features or components
Primary value proposition
Potential business model
How it specifically addresses identified pain points
Opportunity Assessment: Conclude with a ranked evaluation of the top 3 solutions based on:
Market size and growth potential
Competitive advantage sustainability
Implementation feasibility
Potential for category dominance ("best in the world" potential)
{analysis}
"""


def build_strategy_prompt(analysis: Any) -> str:
    """Append the analysis verbatim when it is text, else as compact JSON."""
    if isinstance(analysis, str):
        text = analysis
    else:
        text = json.dumps(analysis, separators=(",", ":"), ensure_ascii=False)
    return _STRATEGY_PROMPT.format(analysis=text)


@register_stage
class StrategyStage(AbstractStage):
    name = "strategy"
    stage_number = 4
    result_key = "strategy"
    use_high_quality_model = True

    async def run(self, ctx: StageContext, previous: Any) -> Any:
        response = await self.complete(ctx, build_strategy_prompt(previous))
        return parse_response(response)
