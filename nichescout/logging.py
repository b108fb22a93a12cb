"""Structured logging configuration using structlog.

Logs go to stderr so ``nichescout run --json`` can pipe its result from
stdout. Every pipeline run binds ``run_id`` through ``structlog.contextvars``,
so stage, LLM and Reddit events of one run can be grouped.
"""

from __future__ import annotations

import logging
import sys
from typing import IO

import structlog

# Per-request chatter from the HTTP and model client libraries
_CHATTY_LOGGERS = ("httpx", "httpcore", "google_genai", "uvicorn.access")


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=False)


def configure_logging(
    log_level: str = "INFO",
    log_format: str = "console",
    *,
    stream: IO[str] | None = None,
) -> None:
    """Configure structlog and route stdlib logging through the same renderer.

    Args:
        log_level: Minimum level name. Unknown names fall back to INFO.
        log_format: "console" or "json".
        stream: Destination; stderr when omitted.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    out = stream if stream is not None else sys.stderr
    renderer = _renderer(log_format)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=out),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *shared_processors,
            renderer,
        ],
    )
    handler = logging.StreamHandler(out)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    # Only surface client request lines when debugging
    quiet_level = level if level <= logging.DEBUG else max(level, logging.WARNING)
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)
