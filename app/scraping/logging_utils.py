"""
Structured logging helpers for the analysis pipeline.
"""

from __future__ import annotations

import json
import logging
from typing import Any

MAX_FIELD_LENGTH = 300


def _compact(value: Any) -> Any:
    if isinstance(value, str) and len(value) > MAX_FIELD_LENGTH:
        return value[:MAX_FIELD_LENGTH] + "..."
    return value


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Emit one structured log line as compact JSON.

    Long string fields (error messages, page snippets) are truncated.
    """

    if not logger.isEnabledFor(level):
        return
    payload = {"event": event, **{key: _compact(value) for key, value in fields.items()}}
    logger.log(level, json.dumps(payload, default=str, sort_keys=True))
