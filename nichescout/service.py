"""Wires the pipeline to storage, identity and the idea bank.

The CLI and the API both go through :class:`ResearchService`, so a run
started from either one shares the same session, exclusions and saved ideas.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from nichescout.auth import SessionAuth
from nichescout.exclusions import NicheExclusionStore, build_exclusion_set
from nichescout.idea_bank import IdeaBank
from nichescout.models.result import PipelineResult
from nichescout.pipeline import AgentPipeline, run_with_retry

if TYPE_CHECKING:
    from nichescout.config import Settings
    from nichescout.models.idea import SavedIdea
    from nichescout.models.user import UserIdentity
    from nichescout.pipeline import CancellationToken
    from nichescout.protocols import (
        IdentityPort,
        KeyValuePort,
        ResearchSourcePort,
        TextCompletionPort,
    )

logger = structlog.get_logger()

LAST_RESULT_KEY = "last_result"


def build_llm(settings: Settings) -> TextCompletionPort:
    from nichescout.llm import GeminiClient

    return GeminiClient(settings)


def build_research_source(settings: Settings) -> ResearchSourcePort | None:
    """Reddit client if enabled, else None (the pipeline then runs prompt-only)."""
    if not settings.reddit_enabled:
        return None
    from nichescout.clients.reddit import RedditClient

    return RedditClient.from_settings(settings)


class NoLastResultError(LookupError):
    """No pipeline result has been stored yet."""


class ResearchService:
    def __init__(
        self,
        store: KeyValuePort,
        settings: Settings,
        llm: TextCompletionPort | None = None,
        research_source: ResearchSourcePort | None = None,
        identity: IdentityPort | None = None,
    ) -> None:
        self.store = store
        self.settings = settings
        self._llm = llm
        self.research_source = research_source
        self.ideas = IdeaBank(store)
        self.exclusions = NicheExclusionStore(store)
        self.auth = SessionAuth(store, settings)
        # Sign-in goes through ``auth``; ideas are scoped by ``identity``
        self.identity: IdentityPort = identity if identity is not None else self.auth

    @classmethod
    def from_settings(cls, store: KeyValuePort, settings: Settings) -> ResearchService:
        return cls(store, settings, research_source=build_research_source(settings))

    @property
    def llm(self) -> TextCompletionPort:
        if self._llm is None:
            self._llm = build_llm(self.settings)
        return self._llm

    def current_user(self) -> UserIdentity | None:
        return self.identity.get_current_user()

    def _user_id(self) -> str | None:
        user = self.current_user()
        return user.id if user is not None else None

    def excluded_niches(self) -> set[str]:
        return build_exclusion_set(self.ideas.list(self._user_id()), self.exclusions)

    async def run(
        self,
        *,
        collect_errors: bool = False,
        cancel_token: CancellationToken | None = None,
    ) -> PipelineResult:
        """Run the pipeline against the current exclusions and remember the result.

        The chosen niche is added to the exclusion list so the next run
        looks elsewhere.
        """
        pipeline = AgentPipeline(self.llm, self.settings, research_source=self.research_source)
        result = await run_with_retry(
            pipeline,
            self.excluded_niches(),
            max_retries=self.settings.pipeline_max_retries,
            base_delay=self.settings.retry_base_delay,
            collect_errors=collect_errors,
            cancel_token=cancel_token,
        )
        niche = result.niche
        if niche:
            self.exclusions.add(niche)
        self.store.set(LAST_RESULT_KEY, result.to_json(indent=None))
        return result

    def last_result(self) -> PipelineResult | None:
        raw = self.store.get(LAST_RESULT_KEY)
        if raw is None:
            return None
        try:
            return PipelineResult.from_json(raw)
        except (ValueError, ValidationError):
            logger.warning("Discarding unreadable last result")
            self.store.delete(LAST_RESULT_KEY)
            return None

    def list_ideas(self) -> list[SavedIdea]:
        return self.ideas.list(self._user_id())

    def save_idea(self, content: str) -> list[SavedIdea]:
        return self.ideas.save(self._user_id(), content)

    def save_last_result(self) -> list[SavedIdea]:
        """Save the most recent result to the current user's idea bank.

        Raises:
            NoLastResultError: Nothing has been run yet.
        """
        result = self.last_result()
        if result is None:
            raise NoLastResultError("No pipeline result to save; run the pipeline first")
        return self.save_idea(result.to_json(indent=None))

    def remove_idea(self, name: str) -> list[SavedIdea]:
        return self.ideas.remove(self._user_id(), name)
