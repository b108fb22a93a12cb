"""Stage 3: Pain Point Analysis. Extract user problems from Reddit discussions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from nichescout.parsing import parse_response
from nichescout.stages.base import AbstractStage, StageContext, register_stage

if TYPE_CHECKING:
    from nichescout.clients.reddit import RedditThread

_MAX_THREADS = 25
_MAX_SELFTEXT_CHARS = 1500

_ANALYSIS_PROMPT = """\
I'm analyzing Reddit conversations to identify common pain points and problems within a specific market. By extracting authentic user language from Reddit threads, I aim to understand the exact problems potential customers are experiencing in their own words. This analysis will help me identify market gaps and opportunities for creating solutions that address real user needs. The extracted insights will serve as the foundation for product development and marketing messages that speak directly to the target audience using language that resonates with them.

Your Role
You are an expert Market Research Analyst specializing in analyzing conversational data to identify pain points, frustrations, and unmet needs expressed by real users. Your expertise is in distilling lengthy Reddit threads into clear, actionable insights while preserving the authentic language users employ to describe their problems.

Your Mission
Carefully analyze provided Reddit conversations and comments
Identify distinct pain points, problems, and frustrations mentioned by users
Extract and organize these pain points into clear categories
For each pain point, include all direct quotes from users that best illustrate this specific problem
Extract EVERY valuable pain point - thoroughness is crucial

Analysis Criteria
INCLUDE:
Specific problems users are experiencing (e.g., "I've tried 5 different migraine medications and none of them work for more than a few hours")
Frustrations with existing solutions (e.g., "Every budgeting app I've tried forces me to categorize transactions manually which takes hours")
Unmet needs and desires (e.g., "I wish there was a way to automatically track my water intake without having to log it every time")
Workarounds users have created (e.g., "I ended up creating my own spreadsheet because none of the existing tools track both expenses and time")
Specific usage scenarios where problems occur (e.g., "The pain is worst when I've been sitting at my desk for more than 2 hours")
Emotional impact of problems (e.g., "The constant back pain has made it impossible to play with my kids, which is devastating")

DO NOT INCLUDE:
General discussion not related to problems or pain points
Simple questions asking for advice without describing a problem
Generic complaints without specific details
Positive experiences or success stories (unless they contrast with a problem)
Discussions about news, politics, or other topics unrelated to personal experiences

Output Format
Pain Point Analysis Summary: Begin with a brief overview of the major pain points identified across the data
Categorized Pain Points: Organize findings into clear thematic categories (e.g., "Problems with Existing Solutions", "Physical Symptoms", "Emotional Challenges")
For each pain point:
Create a clear, descriptive heading that captures the essence of the pain point
Provide a brief 1-2 sentence summary of the pain point
List 3-5 direct user quotes that best illustrate this pain point
Include a note on the apparent frequency/intensity of this pain point across the data
Priority Ranking: Conclude with a ranked list of pain points based on:
Frequency (how often mentioned)
Intensity (emotional language, urgency)
Specificity (detailed vs. vague)
Potential solvability (could a product or service address this?)

Paste your Reddit data below:
{query}
"""


def format_threads(threads: list[RedditThread]) -> str:
    """Render threads as plain text for the analysis prompt."""
    lines: list[str] = []
    for thread in threads[:_MAX_THREADS]:
        lines.append(
            f"### r/{thread['subreddit']}: {thread['title']} "
            f"(score {thread['score']}, {thread['num_comments']} comments)"
        )
        body = thread["selftext"][:_MAX_SELFTEXT_CHARS]
        if body:
            lines.append(body)
        lines.append("")
    return "\n".join(lines).rstrip()


def build_analysis_prompt(query: str, threads: list[RedditThread] | None = None) -> str:
    prompt = _ANALYSIS_PROMPT.format(query=query)
    if threads:
        prompt += "\n" + format_threads(threads) + "\n"
    return prompt


@register_stage
class PainPointAnalysisStage(AbstractStage):
    name = "pain_point_analysis"
    stage_number = 3
    result_key = "analysis"
    use_high_quality_model = True

    async def run(self, ctx: StageContext, previous: Any) -> Any:
        if not isinstance(previous, dict) or not isinstance(previous.get("query"), str):
            raise ValueError("Pain point analysis requires a research result with a query")
        threads = previous.get("threads")
        prompt = build_analysis_prompt(
            previous["query"],
            threads if isinstance(threads, list) else None,
        )
        response = await self.complete(ctx, prompt)
        return parse_response(response)
