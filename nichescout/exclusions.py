"""Persisted list of niches already explored, used to steer discovery elsewhere."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import structlog

from nichescout.models.market import extract_niche
from nichescout.parsing import parse_response

if TYPE_CHECKING:
    from collections.abc import Iterable

    from nichescout.models.idea import SavedIdea
    from nichescout.protocols import KeyValuePort

logger = structlog.get_logger()

CHOSEN_NICHES_KEY = "chosen_niches"


class NicheExclusionStore:
    """Append-only set of niches, stored as a JSON list under one global key.

    The backing list may in principle hold duplicates (older data, other
    writers); readers de-duplicate by value.
    """

    def __init__(self, store: KeyValuePort, key: str = CHOSEN_NICHES_KEY) -> None:
        self._store = store
        self._key = key

    def _read_list(self) -> list[str]:
        raw = self._store.get(self._key)
        if raw is None:
            return []
        decoded = parse_response(raw)
        if not isinstance(decoded, list):
            logger.warning("Ignoring corrupt exclusion list", key=self._key)
            return []
        return [n for n in decoded if isinstance(n, str) and n.strip()]

    def get_excluded(self) -> set[str]:
        return set(self._read_list())

    def add(self, niche: str) -> set[str]:
        """Record *niche*; a value already present leaves storage untouched."""
        niches = self._read_list()
        if not niche.strip() or niche in niches:
            return set(niches)
        niches.append(niche)
        self._store.set(self._key, json.dumps(niches, ensure_ascii=False))
        logger.info("Niche excluded", niche=niche, total=len(set(niches)))
        return set(niches)


def niches_from_ideas(ideas: Iterable[SavedIdea]) -> set[str]:
    """Niches of every saved idea whose content is a serialized pipeline result."""
    niches: set[str] = set()
    for idea in ideas:
        decoded = parse_response(idea.content)
        if not isinstance(decoded, dict):
            continue
        niche = extract_niche(decoded.get("marketDiscovery"))
        if niche:
            niches.add(niche)
    return niches


def build_exclusion_set(ideas: Iterable[SavedIdea], store: NicheExclusionStore) -> set[str]:
    """Union of saved-idea niches and the persisted exclusion list."""
    return niches_from_ideas(ideas) | store.get_excluded()
