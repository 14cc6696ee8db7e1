"""Logging setup with structured output and redaction of sensitive fields."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from typing import Any

from sitemap_builder.config import Settings

SENSITIVE_FIELD_MARKERS = (
    "authorization",
    "cookie",
    "token",
    "secret",
    "api_key",
    "api-key",
    "apikey",
)


class SensitiveDataFilter(logging.Filter):
    """Redact sensitive fields in log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, dict):
            record.msg = _redact_payload(record.msg)

        if isinstance(record.args, dict):
            record.args = _redact_payload(record.args)

        return True


def _redact_payload(payload: dict[str, Any]) -> dict[str, Any]:
    redacted_payload: dict[str, Any] = {}
    for key, value in payload.items():
        if _is_sensitive_key(key):
            redacted_payload[key] = "[REDACTED]"
            continue

        if isinstance(value, dict):
            redacted_payload[key] = _redact_payload(value)
            continue

        redacted_payload[key] = value

    return redacted_payload


def _is_sensitive_key(key: str) -> bool:
    key_lower = key.lower()
    return any(marker in key_lower for marker in SENSITIVE_FIELD_MARKERS)


class JsonLogFormatter(logging.Formatter):
    """Format logs as one JSON object per line.

    Dict messages (`{"event": ..., ...}`) are flattened into the payload with
    `event` promoted to `message`.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": _format_timestamp(record.created),
            "level": record.levelname,
            "logger": record.name,
        }

        if isinstance(record.msg, dict):
            event_payload = dict(record.msg)
            payload["message"] = event_payload.pop("event", None)
            for key, value in event_payload.items():
                payload.setdefault(key, value)
        else:
            payload["message"] = record.getMessage()

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


def _format_timestamp(created: float) -> str:
    return datetime.fromtimestamp(created, tz=UTC).isoformat()


def setup_logging(settings: Settings) -> None:
    """Configure application logging from runtime settings."""

    handler = _build_handler(settings)
    formatter = _build_formatter(settings)
    redaction_filter = SensitiveDataFilter()

    handler.setFormatter(formatter)
    handler.addFilter(redaction_filter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL, logging.INFO))
    root_logger.addHandler(handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.captureWarnings(True)


def _build_handler(settings: Settings) -> logging.Handler:
    if settings.LOG_FILE is None:
        return logging.StreamHandler()

    settings.LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        filename=settings.LOG_FILE,
        maxBytes=settings.LOG_FILE_MAX_BYTES,
        backupCount=settings.LOG_FILE_BACKUP_COUNT,
        encoding="utf-8",
    )


def _build_formatter(settings: Settings) -> logging.Formatter:
    if settings.LOG_FORMAT == "json":
        return JsonLogFormatter()

    return logging.Formatter(
        fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )
