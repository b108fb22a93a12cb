"""Prometheus metric definitions for the research pipeline."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

# --- Stage execution ---

stage_duration_seconds = Histogram(
    "nichescout_stage_duration_seconds",
    "Time spent executing a pipeline stage",
    labelnames=["stage_name"],
    buckets=(0.5, 1, 2, 5, 10, 30, 60, 120, 300),
)

stage_executions_total = Counter(
    "nichescout_stage_executions_total",
    "Total pipeline stage executions",
    labelnames=["stage_name", "status"],
)

pipeline_runs_total = Counter(
    "nichescout_pipeline_runs_total",
    "Total pipeline runs by outcome",
    labelnames=["status"],
)

# --- Retry ---

retry_attempts_total = Counter(
    "nichescout_retry_attempts_total",
    "Total retry attempts",
    labelnames=["fn_name"],
)

retry_exhausted_total = Counter(
    "nichescout_retry_exhausted_total",
    "Total times retries were exhausted",
    labelnames=["fn_name"],
)

# --- LLM ---

llm_requests_total = Counter(
    "nichescout_llm_requests_total",
    "Total text-completion requests",
    labelnames=["model", "status"],
)

llm_tokens_total = Counter(
    "nichescout_llm_tokens_total",
    "Total LLM tokens consumed",
    labelnames=["model", "token_type"],
)

# --- Research data ---

research_fallbacks_total = Counter(
    "nichescout_research_fallbacks_total",
    "Times the Reddit client served mock threads instead of live data",
    labelnames=["reason"],
)
