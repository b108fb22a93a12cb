"""Tests for the Reddit research client.

Uses respx to mock httpx transport-layer calls, verifying:
- Listing parsing from a JSON fixture
- Mock fallback on HTTP 429, HTTP 500 and connection errors
- Input validation and query construction
"""

from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest
import respx

from nichescout.clients.reddit import RedditClient, build_search_query, mock_threads, parse_listing

FIXTURES = Path(__file__).parent / "fixtures"


def _load_fixture(name: str) -> dict[str, object]:
    return json.loads((FIXTURES / name).read_text())  # type: ignore[no-any-return]


def _client() -> RedditClient:
    return RedditClient(min_request_interval=0.0, max_retries=0, retry_base_delay=0.01)


def _search_route() -> respx.Route:
    return respx.route(method="GET", host="www.reddit.com", path="/search.json")


class TestBuildSearchQuery:
    def test_restricts_to_reddit(self):
        query = build_search_query("Postpartum fitness")
        assert query.startswith("(Postpartum fitness) AND (")
        assert query.endswith(" site:reddit.com")

    def test_uses_ten_terms(self):
        query = build_search_query("X")
        assert query.count(" OR ") == 9
        assert '"struggle"' in query


class TestParseListing:
    def test_parses_fixture(self):
        threads = parse_listing(_load_fixture("reddit_search.json"))
        assert [t["title"] for t in threads] == [
            "My biggest struggle with postpartum fitness",
            "What I wish I knew about diastasis recti",
        ]
        first = threads[0]
        assert first["id"] == "1abcde"
        assert first["score"] == 412
        assert first["num_comments"] == 87
        assert first["subreddit"] == "beyondthebump"
        assert "isMockData" not in first

    def test_missing_fields_get_defaults(self):
        threads = parse_listing(_load_fixture("reddit_search.json"))
        sparse = threads[1]
        assert sparse["id"] == "generated_2"
        assert sparse["selftext"] == ""
        assert sparse["author"] == "unknown"
        assert sparse["created_utc"] > 0

    @pytest.mark.parametrize("payload", [None, [], {"data": {}}, {"data": {"children": "x"}}])
    def test_malformed_listing_is_empty(self, payload: object):
        assert parse_listing(payload) == []


class TestMockThreads:
    def test_deterministic_and_flagged(self):
        first = mock_threads("Keto baking")
        second = mock_threads("Keto baking")
        assert len(first) == 6
        assert [t["id"] for t in first] == [f"mock_{i}" for i in range(6)]
        assert [t["title"] for t in first] == [t["title"] for t in second]
        assert all(t["isMockData"] for t in first)
        assert "Keto baking" in first[0]["title"]
        assert first[0]["created_utc"] > first[-1]["created_utc"]


class TestRedditClient:
    @pytest.mark.asyncio
    @respx.mock
    async def test_search_parses_response(self):
        route = _search_route().mock(
            return_value=httpx.Response(200, json=_load_fixture("reddit_search.json"))
        )

        client = _client()
        threads = await client.search_market_discussions("  Postpartum fitness ")

        assert len(threads) == 2
        assert not any(t.get("isMockData") for t in threads)
        request = route.calls.last.request
        assert request.url.params["q"] == build_search_query("Postpartum fitness")
        assert request.url.params["t"] == "year"
        assert request.url.params["limit"] == "50"
        assert request.headers["User-Agent"].startswith("MarketResearchBot/1.0")
        assert client.request_count == 1
        assert client.fallback_count == 0

    @pytest.mark.asyncio
    @respx.mock
    @pytest.mark.parametrize("status", [429, 500, 503, 403])
    async def test_http_errors_fall_back_to_mock(self, status: int):
        _search_route().mock(return_value=httpx.Response(status, text="nope"))

        client = _client()
        threads = await client.search_market_discussions("Keto baking")

        assert len(threads) == 6
        assert all(t["isMockData"] for t in threads)
        assert client.fallback_count == 1

    @pytest.mark.asyncio
    @respx.mock
    async def test_connection_error_falls_back_to_mock(self):
        _search_route().mock(side_effect=httpx.ConnectError("unreachable"))

        threads = await _client().search_market_discussions("Keto baking")

        assert all(t["isMockData"] for t in threads)

    @pytest.mark.asyncio
    @respx.mock
    async def test_connection_error_is_retried(self):
        route = _search_route().mock(
            side_effect=[
                httpx.ConnectError("flaky"),
                httpx.Response(200, json=_load_fixture("reddit_search.json")),
            ]
        )
        client = RedditClient(min_request_interval=0.0, max_retries=1, retry_base_delay=0.01)

        threads = await client.search_market_discussions("Postpartum fitness")

        assert route.call_count == 2
        assert len(threads) == 2
        assert client.fallback_count == 0

    @pytest.mark.asyncio
    @respx.mock
    async def test_invalid_json_falls_back_to_mock(self):
        _search_route().mock(return_value=httpx.Response(200, text="<html>blocked</html>"))

        threads = await _client().search_market_discussions("Keto baking")

        assert all(t["isMockData"] for t in threads)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("market", ["", "   "])
    async def test_blank_market_rejected(self, market: str):
        with pytest.raises(ValueError, match="Market parameter is required"):
            await _client().search_market_discussions(market)

    def test_health_status(self):
        status = _client().health_status()
        assert status["service"] == "reddit"
        assert status["request_count"] == 0
        assert status["fallback_count"] == 0
