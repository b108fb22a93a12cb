"""Pipeline orchestrator: runs the four research stages in order.

Each stage's output feeds the next stage's prompt. The pipeline keeps no
state between runs; exclusions come in as an argument and persistence is
the caller's job.
"""

from __future__ import annotations

import time as time_mod
import uuid
from typing import TYPE_CHECKING, Any

import structlog

from nichescout.errors import NicheScoutError, PipelineCancelledError, StageExecutionError
from nichescout.metrics import pipeline_runs_total, stage_duration_seconds, stage_executions_total
from nichescout.models.failure import StageFailure
from nichescout.models.result import PipelineResult
from nichescout.retry import RetryExhaustedError, async_with_retry
from nichescout.stages.base import AbstractStage, StageContext, default_stages

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from nichescout.config import Settings
    from nichescout.protocols import ResearchSourcePort, TextCompletionPort

logger = structlog.get_logger()


class CancellationToken:
    """Cooperative cancellation, checked between stages.

    A stage already in flight runs to completion; the run stops before the
    next one starts.
    """

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def raise_if_cancelled(self, next_stage: str) -> None:
        if self._cancelled:
            raise PipelineCancelledError(
                f"Pipeline cancelled before stage '{next_stage}'",
                user_message="The research run was cancelled.",
            )


def _stage_failure(stage: AbstractStage, exc: Exception) -> StageFailure:
    wrapped = StageExecutionError(stage.name, exc)
    return StageFailure(
        agent=stage.name,
        kind=wrapped.kind,
        user_message=wrapped.user_message,
        attempts=wrapped.attempts,
    )


class AgentPipeline:
    """Market discovery, research, pain point analysis, then strategy."""

    def __init__(
        self,
        llm: TextCompletionPort,
        settings: Settings,
        research_source: ResearchSourcePort | None = None,
        stages: Sequence[AbstractStage] | None = None,
    ) -> None:
        self.llm = llm
        self.settings = settings
        self.research_source = research_source
        self.stages = list(stages) if stages is not None else default_stages()

    async def run(
        self,
        excluded_niches: Iterable[str] = (),
        cancel_token: CancellationToken | None = None,
    ) -> PipelineResult:
        """Run every stage; the first failure aborts the run.

        Raises:
            StageExecutionError: A stage failed. No partial result is returned.
            PipelineCancelledError: *cancel_token* was cancelled mid-run.
        """
        return await self._execute(excluded_niches, cancel_token, collect_errors=False)

    async def run_collecting_errors(
        self,
        excluded_niches: Iterable[str] = (),
        cancel_token: CancellationToken | None = None,
    ) -> PipelineResult:
        """Run every stage, recording failures instead of raising.

        A failed first stage is recorded and later stages fall back to the
        default niche. A failure in any later stage is recorded and ends the
        run, since every following prompt embeds that stage's output.
        """
        return await self._execute(excluded_niches, cancel_token, collect_errors=True)

    async def _execute(
        self,
        excluded_niches: Iterable[str],
        cancel_token: CancellationToken | None,
        *,
        collect_errors: bool,
    ) -> PipelineResult:
        run_id = uuid.uuid4().hex[:12]
        ctx = StageContext(
            llm=self.llm,
            settings=self.settings,
            excluded_niches=frozenset(excluded_niches),
            research_source=self.research_source,
            run_id=run_id,
        )

        with structlog.contextvars.bound_contextvars(run_id=run_id):
            logger.info(
                "Pipeline started",
                stages=len(self.stages),
                excluded=len(ctx.excluded_niches),
                collect_errors=collect_errors,
            )
            outputs: dict[str, Any] = {}
            errors: list[StageFailure] = []
            previous: Any = None

            for index, stage in enumerate(self.stages):
                if cancel_token is not None:
                    try:
                        cancel_token.raise_if_cancelled(stage.name)
                    except PipelineCancelledError:
                        pipeline_runs_total.labels(status="cancelled").inc()
                        logger.info("Pipeline cancelled", next_stage=stage.name)
                        raise

                logger.info("Running stage", stage=stage.name, stage_num=stage.stage_number)
                t0 = time_mod.monotonic()
                try:
                    output = await stage.run(ctx, previous)
                except Exception as exc:
                    stage_executions_total.labels(stage_name=stage.name, status="error").inc()
                    logger.error("Stage failed", stage=stage.name, error=str(exc))
                    if not collect_errors:
                        pipeline_runs_total.labels(status="failed").inc()
                        raise StageExecutionError(stage.name, exc) from exc
                    errors.append(_stage_failure(stage, exc))
                    if index == 0:
                        previous = None
                        continue
                    break

                stage_duration_seconds.labels(stage_name=stage.name).observe(
                    time_mod.monotonic() - t0
                )
                stage_executions_total.labels(stage_name=stage.name, status="success").inc()
                outputs[stage.result_key] = output
                previous = output

            status = "partial" if errors else "success"
            pipeline_runs_total.labels(status=status).inc()
            logger.info(
                "Pipeline finished",
                status=status,
                completed=list(outputs),
                failed=[e.agent for e in errors],
            )

        if errors:
            outputs["errors"] = errors
        return PipelineResult.model_validate(outputs)


async def run_with_retry(
    pipeline: AgentPipeline,
    excluded_niches: Iterable[str] = (),
    *,
    max_retries: int = 0,
    base_delay: float = 1.0,
    collect_errors: bool = False,
    cancel_token: CancellationToken | None = None,
) -> PipelineResult:
    """Re-run the whole pipeline on stage failure, up to *max_retries* extra times.

    On exhaustion the last StageExecutionError is raised with ``attempts`` set.
    Cancellation is never retried.
    """
    excluded = frozenset(excluded_niches)

    async def _attempt() -> PipelineResult:
        if collect_errors:
            return await pipeline.run_collecting_errors(excluded, cancel_token)
        return await pipeline.run(excluded, cancel_token)

    try:
        return await async_with_retry(
            _attempt,
            max_retries=max_retries,
            base_delay=base_delay,
            retryable=(StageExecutionError,),
            label="pipeline",
        )
    except RetryExhaustedError as exc:
        failure = exc.__cause__
        if not isinstance(failure, NicheScoutError):
            raise
        failure.attempts = exc.attempts
        raise failure  # noqa: B904
