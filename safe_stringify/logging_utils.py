"""Logging setup helpers for safe_stringify.

Both formatters render the ``extra=`` attributes of a log record through the
sanitizing traversal, so telemetry payloads with cycles, faulting attributes
or secrets can be attached to log calls directly.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from .config import LoggingConfig, SanitizerOptions
from .json_helpers import to_bounded_json
from .traversal import prepare_for_serialization

_STANDARD_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName"}


def record_extras(record: logging.LogRecord) -> dict[str, Any]:
    """Return the attributes a caller attached to ``record`` via ``extra=``."""
    return {key: value for key, value in record.__dict__.items() if key not in _STANDARD_RECORD_ATTRS}


class JsonLogFormatter(logging.Formatter):
    """Format log records as JSON lines."""

    def __init__(self, options: SanitizerOptions | Mapping[str, Any] | None = None) -> None:
        super().__init__()
        self._options = SanitizerOptions.coerce(options)

    def format(self, record: logging.LogRecord) -> str:
        """Render one log record as JSON."""
        payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        extras = record_extras(record)
        if extras:
            payload["extra"] = prepare_for_serialization(extras, self._options)
        return json.dumps(payload, ensure_ascii=False)


class TextLogFormatter(logging.Formatter):
    """Classic text lines with sanitized extras appended as bounded JSON."""

    def __init__(
        self,
        options: SanitizerOptions | Mapping[str, Any] | None = None,
        max_extra_chars: int = 8000,
    ) -> None:
        super().__init__("%(asctime)s %(levelname)s %(name)s: %(message)s")
        self._options = SanitizerOptions.coerce(options)
        self._max_extra_chars = max_extra_chars

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = record_extras(record)
        if not extras:
            return line
        return f"{line} extra={to_bounded_json(extras, self._max_extra_chars, self._options)}"


def setup_logging(cfg: LoggingConfig, options: SanitizerOptions | None = None) -> None:
    """Configure the root logger from runtime configuration."""
    level = getattr(logging, cfg.level.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(level)

    handler = logging.StreamHandler()
    if cfg.json_logs:
        handler.setFormatter(JsonLogFormatter(options))
    else:
        handler.setFormatter(TextLogFormatter(options, max_extra_chars=cfg.max_extra_chars))

    root.handlers.clear()
    root.addHandler(handler)
