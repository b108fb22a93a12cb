"""Text-completion client for Google Gemini, via PydanticAI.

Streams by default to keep the connection busy on long generations
(the analysis and strategy prompts routinely produce several thousand tokens).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import structlog
from pydantic_ai.exceptions import ModelHTTPError
from pydantic_ai.models.google import GoogleModelSettings

from nichescout.config import Settings
from nichescout.errors import NicheScoutError, QuotaExceededError, TransportError
from nichescout.metrics import llm_requests_total, llm_tokens_total

if TYPE_CHECKING:
    from pydantic_ai import Agent
    from pydantic_ai.models import Model
    from pydantic_ai.usage import RunUsage

logger = structlog.get_logger()

_QUOTA_STATUS = 429


async def _run_streamed(
    agent: Agent[None, str],
    prompt: str,
    model_settings: GoogleModelSettings,
) -> tuple[str, RunUsage]:
    """Run a PydanticAI agent in streaming mode and return the final text."""
    async with agent.run_stream(prompt, model_settings=model_settings) as stream:
        async for _chunk in stream.stream_output():
            pass
        output: str = await stream.get_output()
        return output, stream.usage()


def translate_error(exc: Exception, model_name: str) -> NicheScoutError | None:
    """Map a provider/transport exception onto the pipeline's error kinds.

    Returns None for exceptions that are not upstream failures, which the
    caller should let propagate unchanged.
    """
    if isinstance(exc, ModelHTTPError):
        if exc.status_code == _QUOTA_STATUS:
            return QuotaExceededError(
                f"{model_name} quota exceeded: {exc.body}",
                user_message="The AI service has reached its usage limit.",
            )
        return TransportError(
            f"{model_name} returned HTTP {exc.status_code}",
            user_message=f"The AI service returned an error (HTTP {exc.status_code}).",
        )
    if isinstance(exc, httpx.HTTPError):
        return TransportError(
            f"{model_name} request failed: {exc}",
            user_message="Could not reach the AI service. Check your network connection.",
        )
    return None


class GeminiClient:
    """Two-tier Gemini client: a fast model and a higher-quality model."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or Settings()
        self._fast_model: Model | None = None
        self._quality_model: Model | None = None

    def _build_model(self, model_name: str) -> Model:
        from pydantic_ai.models.google import GoogleModel
        from pydantic_ai.providers.google import GoogleProvider

        provider = GoogleProvider(api_key=self.settings.gemini_api_key)
        return GoogleModel(model_name, provider=provider)

    @property
    def fast_model(self) -> Model:
        if self._fast_model is None:
            self._fast_model = self._build_model(self.settings.llm_fast_model)
        return self._fast_model

    @property
    def quality_model(self) -> Model:
        if self._quality_model is None:
            self._quality_model = self._build_model(self.settings.llm_quality_model)
        return self._quality_model

    def model_name(self, use_high_quality_model: bool) -> str:
        if use_high_quality_model:
            return self.settings.llm_quality_model
        return self.settings.llm_fast_model

    def _build_model_settings(self) -> GoogleModelSettings:
        return GoogleModelSettings(
            temperature=self.settings.llm_temperature,
            top_p=self.settings.llm_top_p,
            max_tokens=self.settings.llm_max_tokens,
        )

    def _record_usage(self, model_name: str, usage: RunUsage) -> None:
        logger.info(
            "LLM response",
            model=model_name,
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
            total_tokens=usage.total_tokens,
        )
        llm_tokens_total.labels(model=model_name, token_type="request").inc(
            usage.input_tokens or 0
        )
        llm_tokens_total.labels(model=model_name, token_type="response").inc(
            usage.output_tokens or 0
        )

    async def generate_content(self, prompt: str, use_high_quality_model: bool = False) -> str:
        """Send *prompt* as a single fresh chat turn and return the generated text.

        Raises:
            QuotaExceededError: Upstream answered HTTP 429.
            TransportError: Any other HTTP or network failure.
        """
        from pydantic_ai import Agent

        model_name = self.model_name(use_high_quality_model)
        model = self.quality_model if use_high_quality_model else self.fast_model
        agent: Agent[None, str] = Agent(model, output_type=str)

        logger.debug(
            "LLM request",
            model=model_name,
            prompt_chars=len(prompt),
            streaming=True,
        )

        try:
            output, usage = await _run_streamed(agent, prompt, self._build_model_settings())
        except Exception as exc:
            translated = translate_error(exc, model_name)
            if translated is None:
                llm_requests_total.labels(model=model_name, status="error").inc()
                raise
            llm_requests_total.labels(model=model_name, status=translated.kind).inc()
            logger.warning(
                "LLM request failed",
                model=model_name,
                kind=translated.kind,
                error=str(exc),
            )
            raise translated from exc

        llm_requests_total.labels(model=model_name, status="success").inc()
        self._record_usage(model_name, usage)
        return output

    @property
    def is_available(self) -> bool:
        return bool(self.settings.gemini_api_key)
