"""Tests for structured logging configuration."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import httpx
import pytest

from sitemap_builder.config import Settings
from sitemap_builder.services.remote_fetchers import JsonFetcher
from sitemap_builder.utils.logging import (
    JsonLogFormatter,
    SensitiveDataFilter,
    setup_logging,
)


def _record(message: object) -> logging.LogRecord:
    return logging.LogRecord(
        name="sitemap_builder.generator",
        level=logging.ERROR,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=None,
        exc_info=None,
    )


def test_json_formatter_flattens_event_payloads() -> None:
    record = _record({"event": "sitemap_group_failures", "error_count": 2})

    payload = json.loads(JsonLogFormatter().format(record))

    assert payload["message"] == "sitemap_group_failures"
    assert payload["error_count"] == 2
    assert payload["level"] == "ERROR"
    assert payload["logger"] == "sitemap_builder.generator"


def test_json_formatter_keeps_plain_messages() -> None:
    payload = json.loads(JsonLogFormatter().format(_record("plain text")))

    assert payload["message"] == "plain text"


def test_sensitive_data_filter_redacts_nested_keys() -> None:
    record = _record(
        {
            "event": "graphql_request",
            "headers": {"Authorization": "Bearer abc", "Accept": "json"},
            "api_key": "k",
        }
    )

    assert SensitiveDataFilter().filter(record) is True
    assert record.msg == {
        "event": "graphql_request",
        "headers": {"Authorization": "[REDACTED]", "Accept": "json"},
        "api_key": "[REDACTED]",
    }


def test_setup_logging_writes_json_to_rotating_file(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "sitemaps.log"
    settings = Settings(  # type: ignore[call-arg]
        _env_file=None,
        SITEMAP_BASE_URL="https://myapp.com",
        LOG_FORMAT="json",
        LOG_FILE=log_file,
        LOG_LEVEL="INFO",
    )
    root_logger = logging.getLogger()
    original_handlers = list(root_logger.handlers)
    original_level = root_logger.level

    try:
        setup_logging(settings)
        logging.getLogger("sitemap_builder.generator").info(
            {"event": "sitemap_generation_completed", "sitemap_count": 3}
        )
        for handler in root_logger.handlers:
            handler.flush()
    finally:
        for handler in list(root_logger.handlers):
            handler.close()
            root_logger.removeHandler(handler)
        for handler in original_handlers:
            root_logger.addHandler(handler)
        root_logger.setLevel(original_level)

    lines = log_file.read_text(encoding="utf-8").splitlines()
    payload = json.loads(lines[-1])
    assert payload["message"] == "sitemap_generation_completed"
    assert payload["sitemap_count"] == 3


@pytest.mark.asyncio
async def test_rejected_request_headers_are_redacted_in_log_file(
    tmp_path: Path,
) -> None:
    log_file = tmp_path / "sitemaps.log"
    settings = Settings(  # type: ignore[call-arg]
        _env_file=None,
        SITEMAP_BASE_URL="https://myapp.com",
        LOG_FORMAT="json",
        LOG_FILE=log_file,
        LOG_LEVEL="INFO",
    )

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=401, json={"detail": "unauthorized"})

    root_logger = logging.getLogger()
    original_handlers = list(root_logger.handlers)
    original_level = root_logger.level

    try:
        setup_logging(settings)
        async with httpx.AsyncClient(
            transport=httpx.MockTransport(handler)
        ) as client:
            fetcher = JsonFetcher(
                {"Authorization": "Bearer abc", "X-Api-Key": "k", "Accept": "json"},
                http_client=client,
            )
            assert await fetcher("https://cms.example.com/pages.json") is None
        for log_handler in root_logger.handlers:
            log_handler.flush()
    finally:
        for log_handler in list(root_logger.handlers):
            log_handler.close()
            root_logger.removeHandler(log_handler)
        for log_handler in original_handlers:
            root_logger.addHandler(log_handler)
        root_logger.setLevel(original_level)

    payloads = [
        json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()
    ]
    status_events = [
        payload
        for payload in payloads
        if payload["message"] == "remote_fetch_http_status"
    ]
    assert len(status_events) == 1
    assert status_events[0]["http_status"] == 401
    assert status_events[0]["request_headers"] == {
        "Content-Type": "application/json",
        "Authorization": "[REDACTED]",
        "X-Api-Key": "[REDACTED]",
        "Accept": "json",
    }
    assert "Bearer abc" not in log_file.read_text(encoding="utf-8")
