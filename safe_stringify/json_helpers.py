"""JSON/text helpers for bounded logging output."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .config import SanitizerOptions
from .encoding import stringify

TRUNCATION_SUFFIX = "...<truncated>"


def to_bounded_json(
    payload: Any,
    max_len: int = 8000,
    options: SanitizerOptions | Mapping[str, Any] | None = None,
) -> str:
    """Serialize arbitrary values into bounded JSON text for logging.

    The payload is sanitized first, so cycles and faulting attributes never
    reach the encoder. Output longer than ``max_len`` is cut and suffixed;
    ``max_len=0`` disables the limit.
    """
    raw = stringify(payload, options=options)
    if max_len and len(raw) > max_len:
        return raw[:max_len] + TRUNCATION_SUFFIX
    return raw
