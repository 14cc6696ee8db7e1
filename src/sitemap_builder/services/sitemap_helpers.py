"""Provider factories and URL helpers for building sitemap groups."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Sequence
import re
import unicodedata

from sitemap_builder.schemas.sitemap import SitemapEntry
from sitemap_builder.services.sitemap_generator import SitemapProviderResult
from sitemap_builder.services.sitemap_sources import PaginatedPage

_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]+")


def create_static_provider(
    name: str, urls: Sequence[SitemapEntry]
) -> Callable[[], SitemapProviderResult]:
    def provider() -> SitemapProviderResult:
        return SitemapProviderResult(name=name, urls=list(urls))

    return provider


def create_async_provider(
    name: str, fetcher: Callable[[], Awaitable[Sequence[SitemapEntry]]]
) -> Callable[[], Awaitable[SitemapProviderResult]]:
    async def provider() -> SitemapProviderResult:
        urls = await fetcher()
        return SitemapProviderResult(name=name, urls=list(urls))

    return provider


def create_paginated_provider(
    name: str,
    fetch_page: Callable[[int], Awaitable[PaginatedPage]],
    *,
    start_page: int = 1,
) -> Callable[[], Awaitable[SitemapProviderResult]]:
    """Build a provider that calls `fetch_page` until it reports no more pages."""

    async def provider() -> SitemapProviderResult:
        all_urls: list[SitemapEntry] = []
        page = start_page
        has_more = True

        while has_more:
            result = await fetch_page(page)
            all_urls.extend(result.urls)
            has_more = result.has_more
            page += 1

        return SitemapProviderResult(name=name, urls=all_urls)

    return provider


def combine_urls(base_url: str, paths: Iterable[str]) -> list[str]:
    """Join each path onto `base_url` with exactly one slash between them."""

    trimmed_base = base_url.rstrip("/")
    combined: list[str] = []
    for path in paths:
        normalized_path = path if path.startswith("/") else f"/{path}"
        combined.append(f"{trimmed_base}{normalized_path}")
    return combined


def slugify(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text.strip().lower())
    without_marks = "".join(
        character for character in decomposed if not unicodedata.combining(character)
    )
    return _NON_ALPHANUMERIC.sub("-", without_marks).strip("-")


__all__ = [
    "combine_urls",
    "create_async_provider",
    "create_paginated_provider",
    "create_static_provider",
    "slugify",
]
