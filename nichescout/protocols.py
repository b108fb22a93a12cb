"""Port interfaces (Protocols) for the capabilities the pipeline consumes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from nichescout.clients.reddit import RedditThread
    from nichescout.models.user import UserIdentity


@runtime_checkable
class TextCompletionPort(Protocol):
    """Send a prompt, receive generated text."""

    async def generate_content(self, prompt: str, use_high_quality_model: bool = False) -> str: ...


@runtime_checkable
class ResearchSourcePort(Protocol):
    """Market discussion search. Degrades to fallback data instead of raising on
    transient upstream failures."""

    async def search_market_discussions(self, market: str) -> list[RedditThread]: ...


@runtime_checkable
class IdentityPort(Protocol):
    def get_current_user(self) -> UserIdentity | None: ...


@runtime_checkable
class KeyValuePort(Protocol):
    """Whole-document string storage keyed by name."""

    def get(self, key: str) -> str | None: ...
    def set(self, key: str, value: str) -> None: ...
    def delete(self, key: str) -> None: ...
