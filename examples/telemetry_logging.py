"""Attach a hostile telemetry payload to log calls and print it safely.

Run with ``python examples/telemetry_logging.py``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from safe_stringify.config import LoggingConfig, SanitizerOptions
from safe_stringify.encoding import stringify
from safe_stringify.logging_utils import setup_logging

LOG = logging.getLogger("telemetry")


@dataclass
class Session:
    user: str
    token: str
    events: list[dict[str, Any]] = field(default_factory=list)


class FlakyDevice:
    """Mimics a platform object whose attribute access can fail."""

    def __init__(self) -> None:
        self.model = "sensor-3"

    @property
    def battery(self) -> int:
        raise OSError("device disconnected")

    def __json__(self) -> dict[str, Any]:
        return {"model": self.model, "battery": self.battery}


def main() -> None:
    options = SanitizerOptions(redactedKeys=["token"], redactedPaths=["session"])
    setup_logging(LoggingConfig(level="INFO", json=True), options)

    session = Session(user="ada", token="s3cr3t")
    session.events.append({"type": "login", "session": session})
    LOG.info("session started", extra={"session": session, "device": FlakyDevice()})

    print(stringify({"session": session}, None, 2, options))


if __name__ == "__main__":
    main()
