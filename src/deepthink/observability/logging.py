"""Structured logging for the engine and the CLI.

Engine modules log with key=value fields::

    logger = get_logger(__name__)
    logger.debug("centrality.converged", measure="pagerank", iterations=12)

setup_logging() puts one handler on the root logger. With the structlog
formatter, plain ``logging.getLogger(__name__)`` records are rendered by the
same processor chain, so the whole package comes out as one JSON stream.
The stdlib formatter gives the same fields without structlog in the path.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any

import structlog

from deepthink.observability.config import ObservabilityConfig

# Marks the handler setup_logging() owns; pytest's caplog handler is left alone.
_MANAGED = "_deepthink_managed"

_use_structlog = False


class _FieldsLogger:
    """Stdlib logger taking structlog-style keyword fields.

    The fields ride on the record as ``fields`` and are merged back in by
    either formatter.
    """

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    @property
    def name(self) -> str:
        return self._logger.name

    def _log(self, level: int, event: str, fields: dict[str, Any]) -> None:
        if self._logger.isEnabledFor(level):
            self._logger.log(level, event, extra={"fields": fields}, stacklevel=3)

    def debug(self, event: str, **fields: Any) -> None:
        self._log(logging.DEBUG, event, fields)

    def info(self, event: str, **fields: Any) -> None:
        self._log(logging.INFO, event, fields)

    def warning(self, event: str, **fields: Any) -> None:
        self._log(logging.WARNING, event, fields)

    def error(self, event: str, **fields: Any) -> None:
        self._log(logging.ERROR, event, fields)


def _add_record_fields(logger: Any, method_name: str, event_dict: dict) -> dict:
    record = event_dict.get("_record")
    event_dict.update(getattr(record, "fields", None) or {})
    return event_dict


class _JsonLineFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        line: dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "event": record.getMessage(),
            **(getattr(record, "fields", None) or {}),
        }
        if record.exc_info:
            line["exception"] = self.formatException(record.exc_info)
        return json.dumps(line, default=str)


def _structlog_formatter(config: ObservabilityConfig) -> logging.Formatter:
    shared = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
    ]
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            *shared,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    renderer = (
        structlog.dev.ConsoleRenderer()
        if config.renderer == "console"
        else structlog.processors.JSONRenderer()
    )
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[structlog.stdlib.add_logger_name, *shared, _add_record_fields],
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
    )


def _stdlib_formatter(config: ObservabilityConfig) -> logging.Formatter:
    if config.renderer == "console":
        return logging.Formatter("%(asctime)s %(levelname)-8s %(name)s: %(message)s")
    return _JsonLineFormatter()


def setup_logging(config: ObservabilityConfig) -> None:
    """Route every deepthink record through one handler on the root logger.

    Calling it again swaps the handler. Raises ValueError for an unknown
    formatter or destination before touching any logger.
    """
    global _use_structlog
    config.validate()

    if config.formatter == "structlog":
        formatter = _structlog_formatter(config)
    else:
        formatter = _stdlib_formatter(config)

    if config.destination == "jsonl":
        path = config.jsonl_file
        path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    setattr(handler, _MANAGED, True)

    _detach()
    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(getattr(logging, config.level.upper(), logging.WARNING))
    _use_structlog = config.formatter == "structlog"


def get_logger(name: str = "") -> Any:
    """A logger accepting ``logger.debug("event", key=value)``.

    structlog's BoundLogger once setup_logging() chose structlog, the
    stdlib-backed _FieldsLogger otherwise.
    """
    if _use_structlog:
        return structlog.get_logger(name)
    return _FieldsLogger(logging.getLogger(name))


def shutdown_logging() -> None:
    """Close and detach the handler from setup_logging(), if any."""
    global _use_structlog
    _detach()
    _use_structlog = False


def _detach() -> None:
    root = logging.getLogger()
    for h in [h for h in root.handlers if getattr(h, _MANAGED, False)]:
        root.removeHandler(h)
        h.close()
