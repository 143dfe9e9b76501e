"""Where deepthink's log records go and how they look.

Read once from the environment when the CLI starts:

    DEEPTHINK_LOG_FORMATTER    structlog (default) | stdlib
    DEEPTHINK_LOG_DESTINATION  stderr (default) | jsonl
    DEEPTHINK_LOG_LEVEL        WARNING by default; --verbose forces DEBUG
    DEEPTHINK_LOG_FORMAT       json (default) | console
    DEEPTHINK_LOG_PATH         JSONL file, default <tmpdir>/deepthink.jsonl
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

FORMATTERS = ("structlog", "stdlib")
DESTINATIONS = ("stderr", "jsonl")


@dataclass(frozen=True)
class ObservabilityConfig:
    formatter: str = "structlog"
    destination: str = "stderr"
    level: str = "WARNING"
    renderer: str = "json"
    path: str | None = None

    @classmethod
    def from_env(cls) -> ObservabilityConfig:
        env = os.environ
        return cls(
            formatter=env.get("DEEPTHINK_LOG_FORMATTER", cls.formatter),
            destination=env.get("DEEPTHINK_LOG_DESTINATION", cls.destination),
            level=env.get("DEEPTHINK_LOG_LEVEL", cls.level),
            renderer=env.get("DEEPTHINK_LOG_FORMAT", cls.renderer),
            path=env.get("DEEPTHINK_LOG_PATH"),
        )

    @property
    def jsonl_file(self) -> Path:
        if self.path:
            return Path(self.path).expanduser()
        return Path(tempfile.gettempdir()) / "deepthink.jsonl"

    def validate(self) -> None:
        """Raise ValueError naming the bad setting and the accepted values."""
        if self.formatter not in FORMATTERS:
            raise ValueError(
                f"Unknown log formatter: {self.formatter!r}. Available: {', '.join(FORMATTERS)}"
            )
        if self.destination not in DESTINATIONS:
            raise ValueError(
                f"Unknown log destination: {self.destination!r}. "
                f"Available: {', '.join(DESTINATIONS)}"
            )
