"""Tolerant decoding of model responses."""

from __future__ import annotations

import json
from typing import Any


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-standard JSON constant: {name}")


def parse_response(raw: str) -> Any:
    """Decode *raw* as strict JSON, or return it unchanged.

    Strict means what ``JSON.parse`` accepts: ``NaN`` and ``Infinity`` are
    rejected. On any failure the original text is returned byte-for-byte;
    this function never raises.
    """
    try:
        return json.loads(raw, parse_constant=_reject_constant)
    except (ValueError, TypeError, RecursionError):
        return raw
