"""Abstract base class for pipeline stages and the stage context."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from nichescout.config import Settings
    from nichescout.protocols import ResearchSourcePort, TextCompletionPort

logger = structlog.get_logger()


@dataclass(frozen=True, slots=True)
class StageContext:
    """Bundles everything a stage needs to execute."""

    llm: TextCompletionPort
    settings: Settings
    excluded_niches: frozenset[str] = frozenset()
    research_source: ResearchSourcePort | None = None
    run_id: str = ""


class AbstractStage(ABC):
    """One prompt template bound to one model tier.

    ``run`` receives the previous stage's output (None for the first stage)
    and returns this stage's output, stored under ``result_key``.
    """

    name: str = ""
    stage_number: int = -1
    result_key: str = ""
    use_high_quality_model: bool = True

    @abstractmethod
    async def run(self, ctx: StageContext, previous: Any) -> Any: ...

    async def complete(self, ctx: StageContext, prompt: str) -> str:
        return await ctx.llm.generate_content(
            prompt, use_high_quality_model=self.use_high_quality_model
        )


# Global stage registry
_stage_registry: dict[int, AbstractStage] = {}


def register_stage(cls: type[AbstractStage]) -> type[AbstractStage]:
    """Decorator that registers a stage class by its stage_number."""
    instance = cls()
    if instance.stage_number < 0:
        raise ValueError(f"Stage {cls.__name__} must define stage_number >= 0")
    if instance.stage_number in _stage_registry:
        existing = _stage_registry[instance.stage_number]
        raise ValueError(
            f"Stage number {instance.stage_number} already registered by "
            f"{existing.__class__.__name__}"
        )
    _stage_registry[instance.stage_number] = instance
    logger.debug("Registered stage %d: %s", instance.stage_number, instance.name)
    return cls


def get_stage_registry() -> dict[int, AbstractStage]:
    """Return the global stage registry (stage_number -> instance)."""
    return _stage_registry


def default_stages() -> list[AbstractStage]:
    """Registered stages in execution order."""
    import nichescout.stages  # noqa: F401

    return [_stage_registry[n] for n in sorted(_stage_registry)]
