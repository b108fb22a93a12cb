"""Structured failure records surfaced to callers of the pipeline."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class StageFailure(BaseModel):
    """One failed stage, reported in a partial result's ``errors`` list."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    agent: str = Field(description="Stage name, e.g. 'pain_point_analysis'")
    kind: str = Field(description="Error kind: quota, transport, storage, stage, ...")
    user_message: str = Field(alias="userMessage")
    attempts: int | None = None


class FailureReport(BaseModel):
    """Human-facing rendering of a pipeline failure."""

    model_config = ConfigDict(frozen=True)

    type: Literal["quota", "general", "unknown"]
    kind: str
    title: str
    message: str
    suggestion: str
    attempts: int | None = None
