"""Tests for result and market models."""

from __future__ import annotations

import pytest

from nichescout.models import ChosenMarket, PipelineResult, StageFailure, extract_niche


class TestExtractNiche:
    @pytest.mark.parametrize(
        "discovery",
        [
            None,
            "opaque text from the model",
            {},
            {"chosenMarket": "Health"},
            {"chosenMarket": {}},
            {"chosenMarket": {"niche": ""}},
            {"chosenMarket": {"niche": "   "}},
            {"chosenMarket": {"niche": 7}},
        ],
    )
    def test_unusable_discovery(self, discovery: object):
        assert extract_niche(discovery) is None

    def test_returns_niche(self):
        assert extract_niche({"chosenMarket": {"niche": "X"}, "categories": []}) == "X"


class TestChosenMarket:
    def test_reads_camel_case(self):
        market = ChosenMarket.from_discovery(
            {
                "chosenMarket": {
                    "coreMarket": "Health",
                    "category": "Fitness",
                    "subcategory": "Home workouts",
                    "niche": "Postpartum fitness",
                    "subNiche": "Desk-bound new parents",
                    "reasoning": "Underserved",
                }
            }
        )
        assert market is not None
        assert market.core_market == "Health"
        assert market.sub_niche == "Desk-bound new parents"

    def test_partial_fields_default_empty(self):
        market = ChosenMarket.from_discovery({"chosenMarket": {"niche": "X"}})
        assert market is not None
        assert market.category == ""

    def test_none_for_text(self):
        assert ChosenMarket.from_discovery("plain text") is None


class TestPipelineResult:
    def test_absent_stages_omitted(self):
        result = PipelineResult.model_validate({"marketDiscovery": {"chosenMarket": {"niche": "X"}}})
        assert result.to_dict() == {"marketDiscovery": {"chosenMarket": {"niche": "X"}}}
        assert result.has("marketDiscovery")
        assert not result.has("research")

    def test_null_stage_output_is_present(self):
        result = PipelineResult.model_validate({"analysis": None})
        assert result.has("analysis")
        assert result.to_dict() == {"analysis": None}

    def test_errors_serialized_with_aliases(self):
        result = PipelineResult.model_validate(
            {
                "research": {"query": "q"},
                "errors": [
                    StageFailure(agent="strategy", kind="quota", user_message="limit", attempts=2)
                ],
            }
        )
        assert result.to_dict()["errors"] == [
            {"agent": "strategy", "kind": "quota", "userMessage": "limit", "attempts": 2}
        ]

    def test_json_round_trip(self):
        result = PipelineResult.model_validate(
            {
                "marketDiscovery": "opaque",
                "research": {"query": "q"},
                "analysis": "text",
                "strategy": {"solutions": [{"name": "Y"}]},
            }
        )
        assert PipelineResult.from_json(result.to_json()) == result

    def test_derived_views(self):
        result = PipelineResult.model_validate(
            {
                "marketDiscovery": {
                    "chosenMarket": {"niche": "X"},
                    "categories": [
                        {"main": "Fitness", "subcategories": ["Yoga"]},
                        {"bogus": True},
                    ],
                },
                "strategy": {"solutions": [{"name": "Y"}, {"description": "nameless"}]},
            }
        )
        assert result.niche == "X"
        assert [c.main for c in result.categories] == ["Fitness"]
        assert result.solution_names == ["Y"]
