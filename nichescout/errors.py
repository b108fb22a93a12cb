"""Error kinds raised by the pipeline and its collaborators."""

from __future__ import annotations

from nichescout.models.failure import FailureReport


class NicheScoutError(Exception):
    """Base error carrying a machine-readable kind and a user-facing message."""

    kind: str = "error"
    is_quota_error: bool = False

    def __init__(
        self,
        message: str,
        *,
        user_message: str | None = None,
        attempts: int | None = None,
    ) -> None:
        super().__init__(message)
        self.user_message = user_message or message
        self.attempts = attempts


class TransportError(NicheScoutError):
    """Network unreachable, DNS failure, or a non-quota HTTP error from upstream."""

    kind = "transport"


class QuotaExceededError(NicheScoutError):
    """Upstream usage or rate limit hit. Transient; worth surfacing to the user."""

    kind = "quota"
    is_quota_error = True


class StorageUnavailableError(NicheScoutError):
    """The key/value store could not be written."""

    kind = "storage"


class PipelineCancelledError(NicheScoutError):
    kind = "cancelled"


class StageExecutionError(NicheScoutError):
    """A stage failed; ``kind`` and quota marker are inherited from the cause."""

    def __init__(self, stage: str, cause: Exception) -> None:
        self.stage = stage
        self.cause = cause
        if isinstance(cause, NicheScoutError):
            self.kind = cause.kind
            self.is_quota_error = cause.is_quota_error
            user_message = cause.user_message
            attempts = cause.attempts
        else:
            self.kind = "stage"
            user_message = f"The {stage.replace('_', ' ')} agent failed: {cause}"
            attempts = None
        super().__init__(
            f"Stage '{stage}' failed: {cause}",
            user_message=user_message,
            attempts=attempts,
        )


def describe_failure(exc: BaseException, attempts: int | None = None) -> FailureReport:
    """Render an exception as a titled message with a suggestion for the user."""
    attempts = attempts if attempts is not None else getattr(exc, "attempts", None)

    if getattr(exc, "is_quota_error", False):
        return FailureReport(
            type="quota",
            kind="quota",
            title="API Quota Exceeded",
            message=(
                "The AI service has reached its usage limit. This usually resolves "
                "automatically within a few minutes."
            ),
            suggestion=(
                "Please wait a moment and try again. Consider upgrading your API plan "
                "for higher limits."
            ),
            attempts=attempts,
        )

    if isinstance(exc, NicheScoutError):
        return FailureReport(
            type="general",
            kind=exc.kind,
            title="Workflow Error",
            message=exc.user_message,
            suggestion="Please try again. If the problem persists, contact support.",
            attempts=attempts,
        )

    return FailureReport(
        type="unknown",
        kind="unknown",
        title="Unknown Error",
        message=str(exc) or "An unexpected error occurred",
        suggestion="Please try again or contact support if the issue persists.",
        attempts=attempts,
    )
