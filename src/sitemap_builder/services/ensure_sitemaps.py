"""Source-driven entry point that wires group definitions into the generator."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
import logging
from pathlib import Path

import httpx

from sitemap_builder.services.filesystem import FileSystem
from sitemap_builder.services.remote_fetchers import (
    DEFAULT_TIMEOUT_SECONDS,
    GraphQLFetcher,
)
from sitemap_builder.services.sitemap_generator import (
    DEFAULT_PAGE_SIZE,
    DEFAULT_SITEMAP_INDEX_PATH,
    DEFAULT_SITEMAP_SUBDIR,
    SAFE_FILE_NAME_STEM,
    SitemapGeneratorConfig,
    SitemapGeneratorResult,
    SitemapGroupConfig,
    SitemapProvider,
    SitemapProviderResult,
    generate_sitemaps,
)
from sitemap_builder.services.sitemap_sources import (
    GraphQLFetcherCallable,
    SitemapSource,
    resolve_source,
)


@dataclass(slots=True, frozen=True)
class SitemapGroupDefinition:
    """A named source; the name doubles as the output file stem."""

    name: str
    source: SitemapSource
    page_size: int | None = None

    def __post_init__(self) -> None:
        if not SAFE_FILE_NAME_STEM.fullmatch(self.name):
            raise ValueError(
                f"Sitemap group name {self.name!r} must be a safe file name stem"
            )

        if self.page_size is not None and self.page_size < 1:
            raise ValueError("page_size must be at least 1")


@dataclass(slots=True, frozen=True)
class EnsureSitemapsConfig:
    base_url: str
    output_dir: Path | str
    groups: Sequence[SitemapGroupDefinition] = field(default_factory=list)
    graphql_url: str | None = None
    graphql_headers: Mapping[str, str] | None = None
    stale_time_ms: int | None = None
    sitemap_subdir: str = DEFAULT_SITEMAP_SUBDIR
    sitemap_index_path: str = DEFAULT_SITEMAP_INDEX_PATH
    default_page_size: int = DEFAULT_PAGE_SIZE
    robots: bool = True
    http_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS


def _build_provider(
    group: SitemapGroupDefinition,
    graphql_fetcher: GraphQLFetcherCallable | None,
    file_system: FileSystem | None,
) -> SitemapProvider:
    async def provider() -> SitemapProviderResult:
        urls = await resolve_source(
            group.source, graphql_fetcher, file_system=file_system
        )
        return SitemapProviderResult(name=group.name, urls=urls)

    return provider


async def ensure_sitemaps(
    config: EnsureSitemapsConfig,
    *,
    http_client: httpx.AsyncClient | None = None,
    file_system: FileSystem | None = None,
    logger: logging.Logger | None = None,
) -> SitemapGeneratorResult:
    """Resolve every group's source and generate sitemaps from the results.

    A GraphQL fetcher is only built when `graphql_url` is configured; without
    one, GraphQL-backed sources resolve to no URLs.
    """

    graphql_fetcher = (
        GraphQLFetcher(
            config.graphql_url,
            config.graphql_headers,
            http_client=http_client,
            timeout_seconds=config.http_timeout_seconds,
        )
        if config.graphql_url
        else None
    )

    sitemap_groups = [
        SitemapGroupConfig(
            name=group.name,
            provider=_build_provider(group, graphql_fetcher, file_system),
            page_size=group.page_size,
        )
        for group in config.groups
    ]

    return await generate_sitemaps(
        SitemapGeneratorConfig(
            base_url=config.base_url,
            output_dir=config.output_dir,
            sitemap_groups=sitemap_groups,
            robots=config.robots,
            default_page_size=config.default_page_size,
            sitemap_index_path=config.sitemap_index_path,
            sitemap_subdir=config.sitemap_subdir,
            stale_time_ms=config.stale_time_ms,
        ),
        file_system=file_system,
        logger=logger,
    )


__all__ = ["EnsureSitemapsConfig", "SitemapGroupDefinition", "ensure_sitemaps"]
