"""Write a pipeline result to a dated JSON file."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from nichescout.models.result import PipelineResult

logger = structlog.get_logger()


def export_filename(today: date | None = None) -> str:
    day = today or date.today()
    return f"market-research-results-{day.isoformat()}.json"


def export_result(
    result: PipelineResult,
    directory: str | Path = ".",
    today: date | None = None,
) -> Path:
    """Write *result* as indented JSON; an existing file for the same day is overwritten."""
    target_dir = Path(directory)
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / export_filename(today)
    path.write_text(result.to_json(indent=2) + "\n", encoding="utf-8")
    logger.info("Result exported", path=str(path))
    return path
