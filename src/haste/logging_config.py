"""Log output for transfer runs.

Worker threads log concurrently, so every line carries the thread name and
any ``with_context`` fields (``worker=...``) next to the message. Text output
is one ``key=value`` line per record; ``LOG_JSON=1`` switches to one JSON
object per record.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any


_RESERVED_RECORD_FIELDS = set(logging.makeLogRecord({}).__dict__.keys()) | {"message", "asctime"}
_QUIET_LIBRARIES = ("urllib3", "requests")


def _parse_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _record_timestamp(record: logging.LogRecord) -> str:
    return datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(timespec="milliseconds")


def _context_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RESERVED_RECORD_FIELDS and not key.startswith("_")
    }


class _TransferFormatter(logging.Formatter):
    def __init__(self, service: str) -> None:
        super().__init__()
        self.service = service

    def fields(self, record: logging.LogRecord) -> dict[str, Any]:
        return {
            "timestamp": _record_timestamp(record),
            "level": record.levelname,
            "thread": record.threadName,
            "logger": record.name,
            "service": self.service,
            "message": record.getMessage(),
        }


class JsonFormatter(_TransferFormatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = self.fields(record)
        context = _context_fields(record)
        if context:
            payload["context"] = context
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, separators=(",", ":"))


class TextFormatter(_TransferFormatter):
    def format(self, record: logging.LogRecord) -> str:
        fields = self.fields(record)
        line = (
            f"{fields['timestamp']} {fields['level']} [{fields['thread']}] {fields['logger']} "
            f"service={fields['service']} message={fields['message']}"
        )
        context = _context_fields(record)
        if context:
            line = f"{line} " + " ".join(f"{key}={value!r}" for key, value in sorted(context.items()))
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def configure_logging(level: str | None = None, service: str = "haste") -> None:
    """Install a single stderr handler on the root logger.

    stdout is left to ``haste list``. HTTP library loggers are held at
    WARNING or above so per-request connection chatter from W workers does
    not drown the transfer lines.
    """
    env_level = level or os.getenv("LOG_LEVEL", "INFO")
    resolved_level = getattr(logging, env_level.upper(), logging.INFO)
    use_json = _parse_bool(os.getenv("LOG_JSON"), default=False)

    handler = logging.StreamHandler(stream=sys.stderr)
    handler.setFormatter(JsonFormatter(service=service) if use_json else TextFormatter(service=service))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(resolved_level)
    for name in _QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(max(resolved_level, logging.WARNING))
    logging.captureWarnings(True)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def with_context(logger: logging.Logger, **context: Any) -> logging.LoggerAdapter:
    """Adapter that stamps ``context`` onto every record, e.g. ``worker=3``."""
    return logging.LoggerAdapter(logger, extra=context)
