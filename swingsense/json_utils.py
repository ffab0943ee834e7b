"""JSON helpers shared by the diagnostic sinks and the replay CLI.

Analysis code hands numpy scalars/arrays and occasionally non-finite floats
to the writers; everything goes through :func:`sanitize_for_json` first so
the output is plain JSON (``allow_nan=False``).
"""

from __future__ import annotations

import json
import logging
import math
from typing import Any

__all__ = ["dumps_compact", "loads_record", "sanitize_for_json"]

LOGGER = logging.getLogger(__name__)


def sanitize_for_json(value: Any) -> Any:
    """Return *value* with numpy types unwrapped and NaN/Inf replaced by ``None``."""
    if hasattr(value, "tolist") and hasattr(value, "ndim"):
        value = value.tolist()
    elif hasattr(value, "item") and not isinstance(value, (dict, list, tuple, str)):
        value = value.item()
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, dict):
        return {str(k): sanitize_for_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [sanitize_for_json(item) for item in value]
    return value


def dumps_compact(value: Any) -> str:
    """Serialise one record as a single compact JSON line (no newline)."""
    return json.dumps(
        sanitize_for_json(value),
        ensure_ascii=False,
        allow_nan=False,
        separators=(",", ":"),
    )


def loads_record(line: str, *, context: str) -> dict[str, Any] | None:
    """Parse one JSONL line into a dict, or ``None`` for blank/corrupt/non-object lines.

    Corrupt lines are logged with *context* and skipped rather than raised.
    """
    text = line.strip()
    if not text:
        return None
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        LOGGER.warning("Skipping corrupt JSON line in %s: %s", context, exc)
        return None
    if not isinstance(payload, dict):
        LOGGER.warning("Skipping non-object JSON line in %s", context)
        return None
    return payload
