"""Logging setup: plain progress lines on stdout plus an optional JSON-lines file.

Progress lines share stdout with the host build tool directives and with the
inherited subprocess streams, so every handler here writes synchronously.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from typing import TextIO

JSONScalar = str | int | float | bool | None
JSONValue = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]

LOGGER_NAME: Final[str] = "crate_stager"
_HANDLER_MARKER: Final[str] = "_crate_stager_handler"

_STANDARD_LOG_RECORD_FIELDS: Final[frozenset[str]] = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "thread",
        "threadName",
        "taskName",
    }
)


class JsonLineFormatter(logging.Formatter):
    """Formatter that emits canonical JSON objects per log line."""

    def format(self, record: logging.LogRecord) -> str:
        event: dict[str, JSONValue] = {
            "timestamp": _iso8601z_from_epoch(record.created),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extras = _extract_extra_fields(record)
        if extras:
            event["fields"] = extras

        if record.exc_info is not None:
            event["exception"] = self.formatException(record.exc_info)

        return json.dumps(event, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def setup_logging(
    level: int | str = "INFO",
    *,
    stream: TextIO | None = None,
    log_file: Path | str | None = None,
) -> logging.Logger:
    """Configure the ``crate_stager`` logger and return it.

    Parameters
    ----------
    level:
        Minimum level for both handlers.
    stream:
        Destination of plain progress lines; defaults to ``sys.stdout``.
    log_file:
        Optional JSON-lines file receiving the same records.
    """

    logger = logging.getLogger(LOGGER_NAME)
    shutdown_logging()
    logger.setLevel(_parse_log_level(level))
    logger.propagate = False

    progress = logging.StreamHandler(sys.stdout if stream is None else stream)
    progress.setFormatter(logging.Formatter("%(message)s"))
    _mark(progress)
    logger.addHandler(progress)

    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(JsonLineFormatter())
        _mark(file_handler)
        logger.addHandler(file_handler)

    return logger


def shutdown_logging() -> None:
    """Detach and close handlers previously installed by :func:`setup_logging`."""

    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_MARKER, False):
            logger.removeHandler(handler)
            handler.flush()
            handler.close()
    logger.propagate = True


def _mark(handler: logging.Handler) -> None:
    setattr(handler, _HANDLER_MARKER, True)


def _parse_log_level(value: int | str) -> int:
    if isinstance(value, int):
        return value
    parsed = logging.getLevelName(value.strip().upper())
    if not isinstance(parsed, int):
        raise ValueError(f"unknown log level: {value!r}")
    return parsed


def _iso8601z_from_epoch(epoch_seconds: float) -> str:
    timestamp = datetime.fromtimestamp(epoch_seconds, tz=UTC)
    return timestamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _extract_extra_fields(record: logging.LogRecord) -> dict[str, JSONValue]:
    fields: dict[str, JSONValue] = {}
    for key, value in record.__dict__.items():
        if key in _STANDARD_LOG_RECORD_FIELDS or key.startswith("_"):
            continue
        fields[key] = _normalize_json_value(value)
    return fields


def _normalize_json_value(value: object) -> JSONValue:
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [_normalize_json_value(item) for item in value]
    if isinstance(value, dict):
        return {str(key): _normalize_json_value(item) for key, item in value.items()}
    return str(value)


__all__ = ["LOGGER_NAME", "JsonLineFormatter", "setup_logging", "shutdown_logging"]
