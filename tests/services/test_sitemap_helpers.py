"""Tests for provider factories and URL helpers."""

from __future__ import annotations

import pytest

from sitemap_builder.services.sitemap_helpers import (
    combine_urls,
    create_async_provider,
    create_paginated_provider,
    create_static_provider,
    slugify,
)
from sitemap_builder.services.sitemap_sources import PaginatedPage


def test_static_provider_returns_named_result() -> None:
    provider = create_static_provider("pages", ["https://example.com"])

    result = provider()

    assert result.name == "pages"
    assert list(result.urls) == ["https://example.com"]


@pytest.mark.asyncio
async def test_async_provider_awaits_fetcher() -> None:
    async def fetch() -> list[str]:
        return ["https://example.com/a"]

    result = await create_async_provider("posts", fetch)()

    assert result.name == "posts"
    assert list(result.urls) == ["https://example.com/a"]


@pytest.mark.asyncio
async def test_paginated_provider_collects_pages_from_start_page() -> None:
    requested_pages: list[int] = []

    async def fetch_page(page: int) -> PaginatedPage:
        requested_pages.append(page)
        return PaginatedPage(urls=[f"https://example.com/{page}"], has_more=page < 2)

    result = await create_paginated_provider("items", fetch_page, start_page=0)()

    assert requested_pages == [0, 1, 2]
    assert list(result.urls) == [
        "https://example.com/0",
        "https://example.com/1",
        "https://example.com/2",
    ]


def test_combine_urls_normalizes_slashes() -> None:
    assert combine_urls("https://example.com///", ["/about", "contact"]) == [
        "https://example.com/about",
        "https://example.com/contact",
    ]


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("  Hello World  ", "hello-world"),
        ("São Paulo", "sao-paulo"),
        ("Crème brûlée!", "creme-brulee"),
        ("--already--slugged--", "already-slugged"),
        ("C++ & Rust", "c-rust"),
    ],
)
def test_slugify(text: str, expected: str) -> None:
    assert slugify(text) == expected
