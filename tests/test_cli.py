"""Tests for the click CLI."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest
from click.testing import CliRunner
from stubs import DISCOVERY_JSON, RESEARCH_QUERY, ScriptedLLM

from nichescout.cli import cli
from nichescout.errors import QuotaExceededError
from nichescout.service import ResearchService

if TYPE_CHECKING:
    from pathlib import Path

    from nichescout.config import Settings
    from nichescout.db import KeyValueStore


@pytest.fixture(autouse=True)
def _no_logging_setup(monkeypatch: pytest.MonkeyPatch) -> None:
    # Cached structlog loggers would otherwise bind to CliRunner's temporary streams.
    monkeypatch.setattr("nichescout.cli.configure_logging", lambda **_kwargs: None)


@pytest.fixture()
def service(store: KeyValueStore, settings: Settings, scripted_llm: ScriptedLLM) -> ResearchService:
    return ResearchService(store, settings, llm=scripted_llm)


def _invoke(service: ResearchService, *args: str, input: str | None = None):  # noqa: A002
    return CliRunner().invoke(
        cli,
        list(args),
        obj={"settings": service.settings, "service": service},
        input=input,
    )


class TestRunCommand:
    def test_run_prints_summary(self, service: ResearchService):
        result = _invoke(service, "run")
        assert result.exit_code == 0, result.output
        assert "Niche: X" in result.output
        assert "Search query: site:reddit.com X" in result.output
        assert "  - Y" in result.output

    def test_run_json(self, service: ResearchService):
        result = _invoke(service, "run", "--json")
        assert result.exit_code == 0
        assert '"analysis": "Pain point summary..."' in result.output

    def test_run_with_export(self, service: ResearchService, tmp_path: Path):
        result = _invoke(service, "run", "--export", str(tmp_path / "exports"))
        assert result.exit_code == 0
        files = list((tmp_path / "exports").glob("market-research-results-*.json"))
        assert len(files) == 1

    def test_run_save_requires_login(self, service: ResearchService):
        result = _invoke(service, "run", "--save")
        assert result.exit_code == 0
        assert "Not signed in" in result.output
        assert service.list_ideas() == []

    def test_run_save_when_signed_in(self, service: ResearchService):
        service.auth.login("test@example.com", "password")
        result = _invoke(service, "run", "--save")
        assert result.exit_code == 0
        assert [i.name for i in service.list_ideas()] == ["Y"]

    def test_quota_error_exits_nonzero(self, store: KeyValueStore, settings: Settings):
        llm = ScriptedLLM([DISCOVERY_JSON, RESEARCH_QUERY, QuotaExceededError("429")])
        result = _invoke(ResearchService(store, settings, llm=llm), "run")
        assert result.exit_code == 1
        assert "API Quota Exceeded" in result.output


class TestExportCommand:
    def test_export_without_result(self, service: ResearchService, tmp_path: Path):
        result = _invoke(service, "export", "--dir", str(tmp_path))
        assert result.exit_code == 1

    def test_export_last_result(self, service: ResearchService, tmp_path: Path):
        _invoke(service, "run")
        result = _invoke(service, "export", "--dir", str(tmp_path))
        assert result.exit_code == 0
        (path,) = tmp_path.glob("market-research-results-*.json")
        assert json.loads(path.read_text(encoding="utf-8")) == service.last_result().to_dict()


class TestIdeasCommands:
    def test_ls_signed_out(self, service: ResearchService):
        result = _invoke(service, "ideas", "ls")
        assert "Not signed in." in result.output

    def test_save_ls_rm(self, service: ResearchService):
        service.auth.login("test@example.com", "password")

        assert _invoke(service, "ideas", "save", "my idea").exit_code == 0
        listed = _invoke(service, "ideas", "ls")
        assert "1. my idea" in listed.output

        assert _invoke(service, "ideas", "rm", "my idea").exit_code == 0
        assert "No saved ideas." in _invoke(service, "ideas", "ls").output

    def test_rm_unknown(self, service: ResearchService):
        service.auth.login("test@example.com", "password")
        assert _invoke(service, "ideas", "rm", "missing").exit_code == 1


class TestNichesCommands:
    def test_add_and_list(self, service: ResearchService):
        assert _invoke(service, "niches", "add", "Keto Baking").exit_code == 0
        result = _invoke(service, "niches", "ls")
        assert "Keto Baking" in result.output


class TestAuthCommands:
    def test_login_whoami_logout(self, service: ResearchService):
        login = _invoke(
            service, "login", "--email", "test@example.com", "--password", "password"
        )
        assert login.exit_code == 0
        assert "Signed in as Test User" in login.output

        whoami = _invoke(service, "whoami")
        assert '"email": "test@example.com"' in whoami.output

        _invoke(service, "logout")
        assert "Not signed in." in _invoke(service, "whoami").output

    def test_login_prompts(self, service: ResearchService):
        result = _invoke(service, "login", input="test@example.com\npassword\n")
        assert result.exit_code == 0

    def test_bad_login(self, service: ResearchService):
        result = _invoke(service, "login", "--email", "a@b.c", "--password", "x")
        assert result.exit_code == 1


class TestCheckCommand:
    def test_check(self, service: ResearchService):
        result = _invoke(service, "check")
        assert result.exit_code == 0
        assert "Gemini" in result.output
        assert "gemini-2.5-pro" in result.output
