"""Tests for JSON export of pipeline results."""

from __future__ import annotations

import json
from datetime import date
from typing import TYPE_CHECKING

import pytest
from stubs import ScriptedLLM

from nichescout.export import export_filename, export_result
from nichescout.pipeline import AgentPipeline

if TYPE_CHECKING:
    from pathlib import Path

    from nichescout.config import Settings


class TestExport:
    def test_filename_is_dated(self):
        assert export_filename(date(2024, 3, 9)) == "market-research-results-2024-03-09.json"

    @pytest.mark.asyncio
    async def test_export_deep_equals_result(
        self, settings: Settings, scripted_llm: ScriptedLLM, tmp_path: Path
    ):
        result = await AgentPipeline(scripted_llm, settings).run()

        path = export_result(result, tmp_path / "out", today=date(2024, 3, 9))

        assert path.name == "market-research-results-2024-03-09.json"
        assert json.loads(path.read_text(encoding="utf-8")) == result.to_dict()

    def test_indented_two_spaces(self, tmp_path: Path):
        from nichescout.models import PipelineResult

        result = PipelineResult.model_validate({"research": {"query": "q"}})
        text = export_result(result, tmp_path, today=date(2024, 1, 1)).read_text(encoding="utf-8")
        assert text.startswith('{\n  "research": {\n    "query": "q"')
