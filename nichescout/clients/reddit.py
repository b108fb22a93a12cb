"""Client for Reddit's public search endpoint.

Used to pull first-person discussions about a niche for the pain-point
analysis stage. No credentials are required, but Reddit throttles anonymous
clients aggressively, so requests are spaced by a minimum interval.

Transient upstream problems (network errors, 429, 5xx) are never raised:
the client serves deterministic mock threads instead, flagged with
``isMockData``, so a research run is not blocked on Reddit availability.
"""

from __future__ import annotations

import asyncio
import time
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import httpx
import structlog
from typing_extensions import NotRequired, TypedDict

from nichescout.metrics import research_fallbacks_total
from nichescout.retry import RetryExhaustedError, async_with_retry

if TYPE_CHECKING:
    from nichescout.config import Settings

logger = structlog.get_logger()

_PAIN_POINT_TERMS: tuple[str, ...] = (
    "struggle",
    "problem",
    "issue",
    "challenge",
    "difficulty",
    "frustration",
    "pain point",
    "barrier",
    "obstacle",
    "concern",
    "worry",
    "complaint",
)

_EXPERIENCE_TERMS: tuple[str, ...] = (
    "my experience",
    "I found",
    "I learned",
    "I realized",
    "in my opinion",
    "IMO",
    "what I wish",
    "what I regret",
    "my advice",
    "lessons learned",
)

_MAX_QUERY_TERMS = 10


class RedditThread(TypedDict):
    id: str
    title: str
    selftext: str
    score: int
    num_comments: int
    created_utc: float
    subreddit: str
    permalink: str
    url: str
    author: str
    isMockData: NotRequired[bool]


def build_search_query(market: str) -> str:
    """Combine the market with pain-point phrasing, restricted to reddit.com."""
    terms = [*_PAIN_POINT_TERMS, *_EXPERIENCE_TERMS][:_MAX_QUERY_TERMS]
    term_query = " OR ".join(f'"{term}"' for term in terms)
    return f"({market}) AND ({term_query}) site:reddit.com"


def _as_int(value: object) -> int:
    return int(value) if isinstance(value, (int, float)) else 0


def _parse_thread(data: dict[str, object], index: int) -> RedditThread:
    created_raw = data.get("created_utc")
    created_utc = (
        float(created_raw)
        if isinstance(created_raw, (int, float))
        else datetime.now(UTC).timestamp()
    )
    return RedditThread(
        id=str(data.get("id") or f"generated_{index}"),
        title=str(data["title"]).strip(),
        selftext=str(data.get("selftext") or "").strip(),
        score=_as_int(data.get("score")),
        num_comments=_as_int(data.get("num_comments")),
        created_utc=created_utc,
        subreddit=str(data.get("subreddit") or "unknown"),
        permalink=str(data.get("permalink") or ""),
        url=str(data.get("url") or ""),
        author=str(data.get("author") or "unknown"),
    )


def parse_listing(payload: object) -> list[RedditThread]:
    """Extract threads from a Reddit listing, dropping entries without a usable title."""
    if not isinstance(payload, dict):
        logger.warning("reddit_listing_not_an_object")
        return []
    data = payload.get("data")
    children = data.get("children") if isinstance(data, dict) else None
    if not isinstance(children, list):
        logger.warning("reddit_listing_missing_children")
        return []

    threads: list[RedditThread] = []
    for index, child in enumerate(children):
        child_data = child.get("data") if isinstance(child, dict) else None
        if not isinstance(child_data, dict):
            continue
        title = child_data.get("title")
        if not isinstance(title, str) or not title.strip():
            continue
        threads.append(_parse_thread(child_data, index))
    return threads


class RedditClient:
    """Reddit search client with request spacing and mock-data fallback."""

    def __init__(
        self,
        base_url: str = "https://www.reddit.com",
        user_agent: str = "MarketResearchBot/1.0 (Contact: research@example.com)",
        min_request_interval: float = 2.0,
        timeout: float = 10.0,
        search_limit: int = 50,
        max_retries: int = 1,
        retry_base_delay: float = 1.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.min_request_interval = min_request_interval
        self.timeout = httpx.Timeout(timeout)
        self.search_limit = search_limit
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay
        self.request_count = 0
        self.fallback_count = 0
        self._last_request_time = 0.0
        self._rate_lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> RedditClient:
        return cls(
            base_url=settings.reddit_base_url,
            user_agent=settings.reddit_user_agent,
            min_request_interval=settings.reddit_min_request_interval,
            timeout=settings.reddit_timeout,
            search_limit=settings.reddit_search_limit,
            max_retries=settings.pipeline_max_retries,
            retry_base_delay=settings.retry_base_delay,
        )

    async def _enforce_rate_limit(self) -> None:
        async with self._rate_lock:
            elapsed = time.monotonic() - self._last_request_time
            if elapsed < self.min_request_interval:
                delay = self.min_request_interval - elapsed
                logger.debug("reddit_rate_limit_wait", delay_s=round(delay, 2))
                await asyncio.sleep(delay)
            self._last_request_time = time.monotonic()

    async def _fetch(self, query: str) -> object:
        await self._enforce_rate_limit()
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.get(
                f"{self.base_url}/search.json",
                params={
                    "q": query,
                    "sort": "relevance",
                    "limit": self.search_limit,
                    "type": "link",
                    "t": "year",
                },
                headers={"User-Agent": self.user_agent, "Accept": "application/json"},
            )
            resp.raise_for_status()
            return resp.json()

    async def search_market_discussions(self, market: str) -> list[RedditThread]:
        """Search Reddit for first-person discussions about *market*.

        Raises:
            ValueError: *market* is empty or blank.

        Returns:
            Parsed threads, or mock threads when Reddit is unreachable,
            throttling us, or erroring.
        """
        if not isinstance(market, str) or not market.strip():
            raise ValueError("Market parameter is required and must be a non-empty string")
        market = market.strip()
        self.request_count += 1
        query = build_search_query(market)
        logger.info("reddit_search", market=market, request=self.request_count)

        try:
            payload = await async_with_retry(
                lambda: self._fetch(query),
                max_retries=self.max_retries,
                base_delay=self.retry_base_delay,
                retryable=(httpx.TransportError,),
                label="reddit_search",
            )
        except (httpx.TransportError, RetryExhaustedError) as exc:
            return self._fallback(market, "network", exc)
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            if status == 429:
                reason = "rate_limited"
            elif status >= 500:
                reason = "server_error"
            else:
                reason = "http_error"
            return self._fallback(market, reason, exc)
        except httpx.HTTPError as exc:
            return self._fallback(market, "http_error", exc)
        except ValueError as exc:
            return self._fallback(market, "invalid_response", exc)

        threads = parse_listing(payload)
        logger.info("reddit_search_complete", market=market, threads=len(threads))
        return threads

    def health_status(self) -> dict[str, object]:
        return {
            "service": "reddit",
            "request_count": self.request_count,
            "fallback_count": self.fallback_count,
            "last_request_time": self._last_request_time,
            "min_request_interval": self.min_request_interval,
        }

    # ------------------------------------------------------------------
    # Mock data
    # ------------------------------------------------------------------

    def _fallback(self, market: str, reason: str, exc: Exception) -> list[RedditThread]:
        self.fallback_count += 1
        research_fallbacks_total.labels(reason=reason).inc()
        logger.warning("reddit_search_fallback", market=market, reason=reason, error=str(exc))
        return mock_threads(market)


_MOCK_TEMPLATES: list[tuple[str, str, int, int, str]] = [
    (
        "My biggest struggle with {market}",
        "I've been dealing with issues in {market} for years. The main problems I face "
        "are lack of reliable solutions and high costs. The current options are either "
        "too expensive or don't work well.",
        156,
        23,
        "discussion",
    ),
    (
        "What I learned about {market} the hard way",
        "After years of experience in {market}, I realized that most solutions don't "
        "address the core problems: complexity, cost, and a lack of user-friendly options.",
        89,
        17,
        "advice",
    ),
    (
        "My experience with {market} - what I wish I knew",
        "Nobody warned me about the hidden challenges in {market}. The biggest "
        "frustrations are time-consuming processes and lack of transparency.",
        134,
        31,
        "tips",
    ),
    (
        "Why {market} solutions keep failing me",
        "I've tried multiple approaches to {market} and keep hitting the same issues. "
        "Too complicated to set up, too expensive for what they offer, or they just "
        "don't work as advertised. Has anyone found something that actually works?",
        78,
        19,
        "help",
    ),
    (
        "The hidden costs of {market} nobody talks about",
        "When I first got into {market}, I thought the advertised price was all I'd pay. "
        "Hidden fees and add-ons pile up quickly.",
        203,
        45,
        "personalfinance",
    ),
    (
        "{market} is more complex than I expected",
        "I thought {market} would be straightforward, but the learning curve is steep. "
        "The terminology is confusing and reliable resources are hard to find.",
        112,
        28,
        "learningcurve",
    ),
]

_DAY_SECONDS = 24 * 60 * 60


def mock_threads(market: str) -> list[RedditThread]:
    """Deterministic stand-in threads for *market* (only timestamps vary)."""
    now = datetime.now(UTC).timestamp()
    threads: list[RedditThread] = []
    for index, (title, body, score, comments, subreddit) in enumerate(_MOCK_TEMPLATES):
        threads.append(
            RedditThread(
                id=f"mock_{index}",
                title=title.format(market=market),
                selftext=body.format(market=market),
                score=score,
                num_comments=comments,
                created_utc=now - (index + 1) * _DAY_SECONDS,
                subreddit=subreddit,
                permalink=f"/r/{subreddit}/comments/mock_{index}",
                url=f"https://reddit.com/r/{subreddit}/comments/mock_{index}",
                author=f"user_{100 + index}",
                isMockData=True,
            )
        )
    return threads
