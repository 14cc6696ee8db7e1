"""Service layer for sitemap generation."""

from sitemap_builder import __version__
from sitemap_builder.services.filesystem import FileSystem, LocalFileSystem
from sitemap_builder.services.remote_fetchers import GraphQLFetcher, JsonFetcher
from sitemap_builder.services.robots import build_robots_txt
from sitemap_builder.services.sitemap_xml import (
    build_sitemap_index_xml,
    build_url_set_xml,
    escape_xml,
)
from sitemap_builder.services.sitemap_sources import (
    AsyncFetcherSource,
    CompositeSource,
    GraphQLPaginatedSource,
    GraphQLSource,
    JsonFileSource,
    PaginatedPage,
    SitemapSource,
    StaticUrlsSource,
    resolve_source,
)
from sitemap_builder.services.sitemap_generator import (
    GeneratedSitemap,
    SitemapGeneratorConfig,
    SitemapGeneratorResult,
    SitemapGroupConfig,
    SitemapGroupError,
    SitemapProvider,
    SitemapProviderResult,
    chunk_entries,
    generate_sitemaps,
)
from sitemap_builder.services.sitemap_helpers import (
    combine_urls,
    create_async_provider,
    create_paginated_provider,
    create_static_provider,
    slugify,
)
from sitemap_builder.services.ensure_sitemaps import (
    EnsureSitemapsConfig,
    SitemapGroupDefinition,
    ensure_sitemaps,
)

__all__ = [
    "__version__",
    "AsyncFetcherSource",
    "CompositeSource",
    "EnsureSitemapsConfig",
    "FileSystem",
    "GeneratedSitemap",
    "GraphQLFetcher",
    "GraphQLPaginatedSource",
    "GraphQLSource",
    "JsonFetcher",
    "JsonFileSource",
    "LocalFileSystem",
    "PaginatedPage",
    "SitemapGeneratorConfig",
    "SitemapGeneratorResult",
    "SitemapGroupConfig",
    "SitemapGroupDefinition",
    "SitemapGroupError",
    "SitemapProvider",
    "SitemapProviderResult",
    "SitemapSource",
    "StaticUrlsSource",
    "build_robots_txt",
    "build_sitemap_index_xml",
    "build_url_set_xml",
    "chunk_entries",
    "combine_urls",
    "create_async_provider",
    "create_paginated_provider",
    "create_static_provider",
    "ensure_sitemaps",
    "escape_xml",
    "generate_sitemaps",
    "resolve_source",
    "slugify",
]
