"""GraphQL and JSON HTTP helpers that return None instead of raising."""

from __future__ import annotations

from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
import logging
from typing import Any, Final
from urllib.parse import urlsplit

import httpx

DEFAULT_TIMEOUT_SECONDS: Final[float] = 30.0
JSON_CONTENT_TYPE_HEADERS: Final[dict[str, str]] = {
    "Content-Type": "application/json",
}

_logger = logging.getLogger("sitemap_builder.remote_fetchers")


def _sanitize_url(url: str) -> str:
    split_url = urlsplit(url)
    host = split_url.netloc.rsplit("@", maxsplit=1)[-1]
    path = split_url.path or "/"
    return f"{host}{path}".strip() or "endpoint"


def _merge_headers(configured: Mapping[str, str] | None) -> dict[str, str]:
    return {**JSON_CONTENT_TYPE_HEADERS, **(configured or {})}


class _RemoteFetcherBase:
    def __init__(
        self,
        *,
        headers: Mapping[str, str] | None = None,
        http_client: httpx.AsyncClient | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be greater than zero")

        self._headers = dict(headers or {})
        self._http_client = http_client
        self._timeout_seconds = timeout_seconds

    @asynccontextmanager
    async def _http_client_context(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._http_client is not None:
            yield self._http_client
            return

        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self._timeout_seconds),
        ) as http_client:
            yield http_client

    async def _send(
        self,
        *,
        method: str,
        url: str,
        json_body: dict[str, Any] | None = None,
    ) -> httpx.Response | None:
        try:
            async with self._http_client_context() as http_client:
                return await http_client.request(
                    method,
                    url,
                    headers=_merge_headers(self._headers),
                    json=json_body,
                    timeout=httpx.Timeout(self._timeout_seconds),
                )
        except httpx.TimeoutException as exc:
            _logger.warning(
                {
                    "event": "remote_fetch_timeout",
                    "method": method,
                    "url_sanitized": _sanitize_url(url),
                    "exception_class": exc.__class__.__name__,
                }
            )
        except httpx.HTTPError as exc:
            _logger.warning(
                {
                    "event": "remote_fetch_transport_error",
                    "method": method,
                    "url_sanitized": _sanitize_url(url),
                    "exception_class": exc.__class__.__name__,
                }
            )
        return None


def _decode_json(response: httpx.Response, *, url: str) -> tuple[bool, Any]:
    try:
        return True, response.json()
    except ValueError as exc:
        _logger.warning(
            {
                "event": "remote_fetch_invalid_json",
                "url_sanitized": _sanitize_url(url),
                "http_status": response.status_code,
                "exception_class": exc.__class__.__name__,
            }
        )
        return False, None


def _is_success(
    response: httpx.Response, *, url: str, headers: Mapping[str, str]
) -> bool:
    if response.is_success:
        return True

    _logger.warning(
        {
            "event": "remote_fetch_http_status",
            "url_sanitized": _sanitize_url(url),
            "http_status": response.status_code,
            "content_type": response.headers.get("content-type"),
            "request_headers": _merge_headers(headers),
        }
    )
    return False


class GraphQLFetcher(_RemoteFetcherBase):
    """Execute GraphQL queries against one endpoint.

    Calling the fetcher returns the response's `data` member, or `None` when
    the request fails at the transport or HTTP level or the payload carries a
    non-empty `errors` array.
    """

    def __init__(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        super().__init__(
            headers=headers,
            http_client=http_client,
            timeout_seconds=timeout_seconds,
        )
        self.url = url

    async def __call__(
        self,
        query: str,
        variables: Mapping[str, Any] | None = None,
    ) -> Any | None:
        body: dict[str, Any] = {"query": query}
        if variables is not None:
            body["variables"] = dict(variables)

        response = await self._send(method="POST", url=self.url, json_body=body)
        if response is None or not _is_success(
            response, url=self.url, headers=self._headers
        ):
            return None

        decoded, payload = _decode_json(response, url=self.url)
        if not decoded or not isinstance(payload, dict):
            return None

        errors = payload.get("errors")
        if errors:
            _logger.warning(
                {
                    "event": "graphql_response_errors",
                    "url_sanitized": _sanitize_url(self.url),
                    "error_count": len(errors) if isinstance(errors, list) else 1,
                }
            )
            return None

        return payload.get("data")


class JsonFetcher(_RemoteFetcherBase):
    """GET a URL and return its decoded JSON body, or `None` on any failure."""

    def __init__(
        self,
        headers: Mapping[str, str] | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        super().__init__(
            headers=headers,
            http_client=http_client,
            timeout_seconds=timeout_seconds,
        )

    async def __call__(self, url: str) -> Any | None:
        response = await self._send(method="GET", url=url)
        if response is None or not _is_success(
            response, url=url, headers=self._headers
        ):
            return None

        decoded, payload = _decode_json(response, url=url)
        if not decoded:
            return None
        return payload


__all__ = ["DEFAULT_TIMEOUT_SECONDS", "GraphQLFetcher", "JsonFetcher"]
