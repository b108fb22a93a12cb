"""Models for the per-user idea bank."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

MAX_NAME_LENGTH = 100
_ELLIPSIS = "..."


class SavedIdea(BaseModel):
    """A saved pipeline result.

    ``content`` is the canonical serialized payload and the deduplication key;
    ``name`` is the display label and the removal key.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    content: str = Field(min_length=1)


def truncate_name(name: str) -> str:
    """Clamp a display name to ``MAX_NAME_LENGTH`` characters, ellipsis-terminated."""
    if len(name) <= MAX_NAME_LENGTH:
        return name
    return name[: MAX_NAME_LENGTH - len(_ELLIPSIS)] + _ELLIPSIS
