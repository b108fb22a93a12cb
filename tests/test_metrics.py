"""Tests for Prometheus instrumentation of the pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest
import respx
from prometheus_client import REGISTRY
from stubs import DISCOVERY_JSON, RESEARCH_QUERY, ScriptedLLM

from nichescout.clients.reddit import RedditClient
from nichescout.errors import TransportError
from nichescout.metrics import stage_duration_seconds, stage_executions_total
from nichescout.pipeline import AgentPipeline

if TYPE_CHECKING:
    from nichescout.config import Settings


def _sample(name: str, labels: dict[str, str]) -> float:
    return REGISTRY.get_sample_value(name, labels) or 0.0


class TestMetricDefinitions:
    def test_stage_duration_histogram(self):
        assert stage_duration_seconds._name == "nichescout_stage_duration_seconds"
        assert "stage_name" in stage_duration_seconds._labelnames

    def test_stage_executions_counter(self):
        # Counter._name strips _total
        assert stage_executions_total._name == "nichescout_stage_executions"
        assert stage_executions_total._labelnames == ("stage_name", "status")


class TestInstrumentation:
    @pytest.mark.asyncio
    async def test_successful_run_counts_stages(
        self, settings: Settings, scripted_llm: ScriptedLLM
    ):
        labels = {"stage_name": "strategy", "status": "success"}
        before = _sample("nichescout_stage_executions_total", labels)
        runs_before = _sample("nichescout_pipeline_runs_total", {"status": "success"})

        await AgentPipeline(scripted_llm, settings).run()

        assert _sample("nichescout_stage_executions_total", labels) == before + 1
        assert _sample("nichescout_pipeline_runs_total", {"status": "success"}) == runs_before + 1

    @pytest.mark.asyncio
    async def test_failed_stage_counted_as_error(self, settings: Settings):
        labels = {"stage_name": "pain_point_analysis", "status": "error"}
        before = _sample("nichescout_stage_executions_total", labels)
        llm = ScriptedLLM([DISCOVERY_JSON, RESEARCH_QUERY, TransportError("down")])

        await AgentPipeline(llm, settings).run_collecting_errors()

        assert _sample("nichescout_stage_executions_total", labels) == before + 1

    @pytest.mark.asyncio
    @respx.mock
    async def test_reddit_fallback_counted(self):
        respx.route(method="GET", host="www.reddit.com", path="/search.json").mock(
            return_value=httpx.Response(429)
        )
        before = _sample("nichescout_research_fallbacks_total", {"reason": "rate_limited"})

        await RedditClient(min_request_interval=0.0, max_retries=0).search_market_discussions("X")

        after = _sample("nichescout_research_fallbacks_total", {"reason": "rate_limited"})
        assert after == before + 1
