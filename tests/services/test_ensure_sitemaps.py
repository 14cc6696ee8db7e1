"""Tests for the source-driven sitemap entry point."""

from __future__ import annotations

import json
from pathlib import Path

import httpx
from lxml import etree  # type: ignore[import-untyped]
import pytest

from sitemap_builder.services.ensure_sitemaps import (
    EnsureSitemapsConfig,
    SitemapGroupDefinition,
    ensure_sitemaps,
)
from sitemap_builder.services.sitemap_sources import (
    CompositeSource,
    GraphQLPaginatedSource,
    GraphQLSource,
    JsonFileSource,
    PaginatedPage,
    StaticUrlsSource,
)

NAMESPACE = "http://www.sitemaps.org/schemas/sitemap/0.9"


def _locs(path: Path) -> list[str]:
    root = etree.fromstring(path.read_bytes())
    return [element.text for element in root.iter(f"{{{NAMESPACE}}}loc")]


@pytest.mark.asyncio
async def test_ensure_sitemaps_resolves_sources_through_graphql_client(
    tmp_path: Path,
) -> None:
    graphql_requests: list[dict[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        graphql_requests.append(body)
        if "cities" in body["query"]:
            return httpx.Response(
                status_code=200,
                json={"data": {"cities": ["lisbon", "porto"]}},
            )

        page = body["variables"]["page"]
        return httpx.Response(
            status_code=200,
            json={
                "data": {
                    "professionals": [f"pro-{page}"],
                    "hasNextPage": page < 3,
                }
            },
        )

    data_path = tmp_path / "static-pages.json"
    data_path.write_text(json.dumps(["about", "contact"]), encoding="utf-8")

    config = EnsureSitemapsConfig(
        base_url="https://myapp.com",
        output_dir=tmp_path / "public",
        graphql_url="https://api.myapp.com/graphql",
        graphql_headers={"Authorization": "Bearer token"},
        groups=[
            SitemapGroupDefinition(
                name="professionals",
                source=GraphQLPaginatedSource(
                    query="query($page: Int!, $size: Int!) { professionals }",
                    page_size=1,
                    build_variables=lambda page, size: {"page": page, "size": size},
                    map_page=lambda data: PaginatedPage(
                        urls=[
                            f"https://myapp.com/professional/{slug}"
                            for slug in data["professionals"]
                        ],
                        has_more=data["hasNextPage"],
                    ),
                ),
                page_size=2,
            ),
            SitemapGroupDefinition(
                name="cities",
                source=GraphQLSource(
                    query="{ cities }",
                    map_to_urls=lambda data: [
                        f"https://myapp.com/city/{city}" for city in data["cities"]
                    ],
                ),
            ),
            SitemapGroupDefinition(
                name="static",
                source=CompositeSource(
                    sources=[
                        StaticUrlsSource(urls=["https://myapp.com"]),
                        JsonFileSource(
                            path=data_path,
                            map_to_urls=lambda data: [
                                f"https://myapp.com/{slug}" for slug in data
                            ],
                        ),
                    ],
                    combine=lambda results: [url for urls in results for url in urls],
                ),
            ),
        ],
    )

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        result = await ensure_sitemaps(config, http_client=client)

    assert [sitemap.path for sitemap in result.sitemaps] == [
        "seo/professionals-1.xml",
        "seo/professionals-2.xml",
        "seo/cities.xml",
        "seo/static.xml",
    ]
    assert len(graphql_requests) == 4

    public_dir = tmp_path / "public"
    assert _locs(public_dir / "seo" / "professionals-1.xml") == [
        "https://myapp.com/professional/pro-1",
        "https://myapp.com/professional/pro-2",
    ]
    assert _locs(public_dir / "seo" / "static.xml") == [
        "https://myapp.com",
        "https://myapp.com/about",
        "https://myapp.com/contact",
    ]
    assert _locs(public_dir / "sitemap.xml")[-1] == "https://myapp.com/seo/static.xml"
    assert (public_dir / "robots.txt").exists()


@pytest.mark.asyncio
async def test_graphql_groups_are_empty_without_graphql_url(tmp_path: Path) -> None:
    config = EnsureSitemapsConfig(
        base_url="https://myapp.com",
        output_dir=tmp_path,
        groups=[
            SitemapGroupDefinition(
                name="posts",
                source=GraphQLSource(
                    query="{ posts }",
                    map_to_urls=lambda data: pytest.fail("no fetcher configured"),
                ),
            ),
            SitemapGroupDefinition(
                name="home", source=StaticUrlsSource(urls=["https://myapp.com"])
            ),
        ],
        robots=False,
    )

    result = await ensure_sitemaps(config)

    assert [sitemap.name for sitemap in result.sitemaps] == ["home.xml"]
    assert result.robots_path is None


@pytest.mark.asyncio
async def test_malformed_json_file_is_reported_not_raised(tmp_path: Path) -> None:
    broken_path = tmp_path / "broken.json"
    broken_path.write_text("{", encoding="utf-8")

    config = EnsureSitemapsConfig(
        base_url="https://myapp.com",
        output_dir=tmp_path / "out",
        groups=[
            SitemapGroupDefinition(
                name="pages",
                source=JsonFileSource(path=broken_path, map_to_urls=list),
            ),
            SitemapGroupDefinition(
                name="home", source=StaticUrlsSource(urls=["https://myapp.com"])
            ),
        ],
    )

    result = await ensure_sitemaps(config)

    assert [sitemap.name for sitemap in result.sitemaps] == [
        "home.xml",
        "__errors.xml",
    ]
    assert result.errors[0].group_name == "pages"
    error_locs = _locs(tmp_path / "out" / "seo" / "__errors.xml")
    assert error_locs[1].startswith(
        "https://myapp.com/__seo_shell_sitemap_error/pages%3A"
    )


@pytest.mark.parametrize("name", ["", "../etc", "a/b", "__errors", "has space"])
def test_group_definition_rejects_unsafe_names(name: str) -> None:
    with pytest.raises(ValueError, match="safe file name"):
        SitemapGroupDefinition(name=name, source=StaticUrlsSource(urls=[]))


def test_group_definition_rejects_non_positive_page_size() -> None:
    with pytest.raises(ValueError, match="page_size"):
        SitemapGroupDefinition(
            name="pages", source=StaticUrlsSource(urls=[]), page_size=0
        )
