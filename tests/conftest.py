"""Shared test fixtures."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from pydantic_ai import models
from stubs import (
    ANALYSIS_TEXT,
    DISCOVERY_JSON,
    RESEARCH_QUERY,
    STRATEGY_JSON,
    CountingStore,
    ScriptedLLM,
)

from nichescout.config import Settings
from nichescout.db import KeyValueStore

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

# Safety net: block all real LLM API calls during tests.
# TestModel and FunctionModel are exempt from this check.
models.ALLOW_MODEL_REQUESTS = False


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        gemini_api_key="test-key",
        reddit_enabled=False,
        reddit_min_request_interval=0.0,
        pipeline_max_retries=0,
        retry_base_delay=0.01,
        data_dir=tmp_path / "data",
        log_level="DEBUG",
        log_format="console",
        _env_file=None,
    )


@pytest.fixture()
def store(tmp_path: Path) -> Iterator[KeyValueStore]:
    store = KeyValueStore(tmp_path / "test.db")
    store.init_schema()
    yield store
    store.close()


@pytest.fixture()
def counting_store(store: KeyValueStore) -> CountingStore:
    return CountingStore(store)


@pytest.fixture()
def scripted_llm() -> ScriptedLLM:
    """The four canned stage responses of a normal run."""
    return ScriptedLLM([DISCOVERY_JSON, RESEARCH_QUERY, ANALYSIS_TEXT, STRATEGY_JSON])
