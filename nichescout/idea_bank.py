"""Per-user collection of saved pipeline results.

Storage layout: one JSON list of ``{"name", "content"}`` objects per user,
under ``ideas_<user_id>``. ``content`` is the deduplication key and ``name``
the removal key; both are always populated.

``save`` and ``remove`` are read-modify-write cycles with no locking. Two
concurrent writers for the same user race and the last write wins.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import structlog

from nichescout.errors import StorageUnavailableError
from nichescout.models.idea import SavedIdea, truncate_name
from nichescout.models.market import extract_niche
from nichescout.parsing import parse_response

if TYPE_CHECKING:
    from nichescout.protocols import KeyValuePort

logger = structlog.get_logger()


def ideas_key(user_id: str) -> str:
    return f"ideas_{user_id}"


def derive_idea_name(content: str) -> str:
    """Display label for *content*.

    First strategy solution name if present, else ``Idea for: <niche>``,
    else the content itself; always clamped to 100 characters.
    """
    name = content
    decoded = parse_response(content)
    if isinstance(decoded, dict):
        strategy = decoded.get("strategy")
        solutions = strategy.get("solutions") if isinstance(strategy, dict) else None
        first = solutions[0] if isinstance(solutions, list) and solutions else None
        if isinstance(first, dict) and isinstance(first.get("name"), str) and first["name"]:
            name = first["name"]
        else:
            niche = extract_niche(decoded.get("marketDiscovery"))
            if niche:
                name = f"Idea for: {niche}"
    return truncate_name(name)


def _normalize(entry: Any) -> dict[str, str] | None:
    if isinstance(entry, str):
        return {"name": entry, "content": entry} if entry else None
    if isinstance(entry, dict):
        name = entry.get("name")
        content = entry.get("content")
        if isinstance(name, str) and name and isinstance(content, str) and content:
            return {"name": name, "content": content}
    return None


class IdeaBank:
    """Deduplicated, insertion-ordered saved ideas, scoped per user."""

    def __init__(self, store: KeyValuePort) -> None:
        self._store = store

    def _write(self, user_id: str, entries: list[dict[str, str]]) -> None:
        self._store.set(ideas_key(user_id), json.dumps(entries, ensure_ascii=False))

    def _load(self, user_id: str) -> list[dict[str, str]]:
        """Read, validate and heal the stored collection. Never raises."""
        key = ideas_key(user_id)
        try:
            raw = self._store.get(key)
        except StorageUnavailableError as exc:
            logger.warning("Idea bank unreadable", user_id=user_id, error=str(exc))
            return []
        if raw is None:
            return []

        decoded = parse_response(raw)
        if not isinstance(decoded, list):
            logger.warning("Resetting corrupt idea bank", user_id=user_id)
            self._heal(user_id, [])
            return []

        cleaned = [e for e in (_normalize(entry) for entry in decoded) if e is not None]
        if cleaned != decoded:
            logger.info(
                "Healed idea bank",
                user_id=user_id,
                stored=len(decoded),
                kept=len(cleaned),
            )
            self._heal(user_id, cleaned)
        return cleaned

    def _heal(self, user_id: str, entries: list[dict[str, str]]) -> None:
        try:
            self._write(user_id, entries)
        except StorageUnavailableError as exc:
            logger.warning("Could not write healed idea bank", user_id=user_id, error=str(exc))

    def list(self, user_id: str | None) -> list[SavedIdea]:
        if user_id is None:
            return []
        return [SavedIdea(**e) for e in self._load(user_id)]

    def save(self, user_id: str | None, content: str) -> list[SavedIdea]:
        """Append *content* unless an idea with identical content already exists.

        Blank or whitespace-only content is ignored: nothing is written and the
        current collection is returned.

        Raises:
            StorageUnavailableError: The updated collection could not be written.
        """
        if user_id is None:
            return []
        entries = self._load(user_id)
        if not content.strip():
            logger.info("Ignoring blank idea", user_id=user_id)
            return [SavedIdea(**e) for e in entries]
        if any(e["content"] == content for e in entries):
            return [SavedIdea(**e) for e in entries]

        name = derive_idea_name(content)
        entries.append({"name": name, "content": content})
        self._write(user_id, entries)
        logger.info("Idea saved", user_id=user_id, name=name, total=len(entries))
        return [SavedIdea(**e) for e in entries]

    def remove(self, user_id: str | None, name: str) -> list[SavedIdea]:
        """Drop every idea whose name matches *name* exactly."""
        if user_id is None:
            return []
        entries = self._load(user_id)
        kept = [e for e in entries if e["name"] != name]
        if len(kept) != len(entries):
            self._write(user_id, kept)
            logger.info("Idea removed", user_id=user_id, name=name)
        return [SavedIdea(**e) for e in kept]
