"""URL source variants and their resolution into sitemap entries."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field
import inspect
import json
import logging
from pathlib import Path
from typing import Any, Literal, TypeAlias

from sitemap_builder.schemas.sitemap import SitemapEntry
from sitemap_builder.services.filesystem import FileSystem, LocalFileSystem

GraphQLFetcherCallable: TypeAlias = Callable[
    [str, Mapping[str, Any] | None], Awaitable[Any | None]
]

logger = logging.getLogger("sitemap_builder.sources")


@dataclass(slots=True, frozen=True)
class PaginatedPage:
    """One page of a paginated GraphQL source."""

    urls: list[SitemapEntry]
    has_more: bool


@dataclass(slots=True, frozen=True)
class StaticUrlsSource:
    urls: Sequence[SitemapEntry]
    type: Literal["static"] = field(default="static", init=False)


@dataclass(slots=True, frozen=True)
class JsonFileSource:
    """Local JSON file mapped to URLs; a missing file yields no URLs."""

    path: Path | str
    map_to_urls: Callable[[Any], Sequence[SitemapEntry]]
    type: Literal["jsonFile"] = field(default="jsonFile", init=False)


@dataclass(slots=True, frozen=True)
class GraphQLSource:
    query: str
    map_to_urls: Callable[[Any], Sequence[SitemapEntry]]
    variables: Mapping[str, Any] | None = None
    type: Literal["graphql"] = field(default="graphql", init=False)


@dataclass(slots=True, frozen=True)
class GraphQLPaginatedSource:
    """GraphQL query repeated page by page until `map_page` reports no more.

    Termination is driven by the caller: a `map_page` that always reports
    `has_more` loops forever unless `max_pages` is set.
    """

    query: str
    page_size: int
    build_variables: Callable[[int, int], Mapping[str, Any]]
    map_page: Callable[[Any], PaginatedPage | tuple[Sequence[SitemapEntry], bool]]
    max_pages: int | None = None
    type: Literal["graphqlPaginated"] = field(default="graphqlPaginated", init=False)

    def __post_init__(self) -> None:
        if self.page_size < 1:
            raise ValueError("page_size must be at least 1")

        if self.max_pages is not None and self.max_pages < 1:
            raise ValueError("max_pages must be at least 1")


@dataclass(slots=True, frozen=True)
class AsyncFetcherSource:
    fetcher: Callable[[], Awaitable[Sequence[SitemapEntry]] | Sequence[SitemapEntry]]
    type: Literal["asyncFetcher"] = field(default="asyncFetcher", init=False)


@dataclass(slots=True, frozen=True)
class CompositeSource:
    """Nested sources resolved concurrently and merged by `combine`."""

    sources: Sequence[SitemapSource]
    combine: Callable[[list[list[SitemapEntry]]], Sequence[SitemapEntry]]
    type: Literal["composite"] = field(default="composite", init=False)


SitemapSource: TypeAlias = (
    StaticUrlsSource
    | JsonFileSource
    | GraphQLSource
    | GraphQLPaginatedSource
    | AsyncFetcherSource
    | CompositeSource
)


def _coerce_page(raw_page: Any) -> PaginatedPage:
    if isinstance(raw_page, PaginatedPage):
        return raw_page

    if isinstance(raw_page, Mapping):
        has_more = raw_page.get("has_more", raw_page.get("hasMore", False))
        return PaginatedPage(urls=list(raw_page["urls"]), has_more=bool(has_more))

    urls, has_more = raw_page
    return PaginatedPage(urls=list(urls), has_more=bool(has_more))


async def _resolve_json_file(
    source: JsonFileSource, file_system: FileSystem
) -> list[SitemapEntry]:
    path = Path(source.path)
    if not file_system.exists(path):
        logger.debug({"event": "json_source_missing", "path": str(path)})
        return []

    # Decode errors propagate to the generator's group boundary
    data = json.loads(file_system.read_file(path).decode("utf-8"))
    return list(source.map_to_urls(data))


async def _resolve_graphql(
    source: GraphQLSource, graphql_fetcher: GraphQLFetcherCallable | None
) -> list[SitemapEntry]:
    if graphql_fetcher is None:
        return []

    data = await graphql_fetcher(source.query, source.variables)
    if data is None:
        return []

    return list(source.map_to_urls(data))


async def _resolve_graphql_paginated(
    source: GraphQLPaginatedSource, graphql_fetcher: GraphQLFetcherCallable | None
) -> list[SitemapEntry]:
    if graphql_fetcher is None:
        return []

    all_urls: list[SitemapEntry] = []
    page = 1
    has_more = True

    while has_more:
        if source.max_pages is not None and page > source.max_pages:
            logger.warning(
                {
                    "event": "paginated_source_page_limit_reached",
                    "max_pages": source.max_pages,
                    "url_count": len(all_urls),
                }
            )
            break

        variables = source.build_variables(page, source.page_size)
        data = await graphql_fetcher(source.query, variables)
        if data is None:
            logger.info(
                {
                    "event": "paginated_source_truncated",
                    "page": page,
                    "url_count": len(all_urls),
                }
            )
            break

        result = _coerce_page(source.map_page(data))
        all_urls.extend(result.urls)
        has_more = result.has_more
        page += 1

    return all_urls


async def _resolve_async_fetcher(source: AsyncFetcherSource) -> list[SitemapEntry]:
    result = source.fetcher()
    if inspect.isawaitable(result):
        result = await result
    return list(result)


async def _resolve_composite(
    source: CompositeSource,
    graphql_fetcher: GraphQLFetcherCallable | None,
    file_system: FileSystem,
) -> list[SitemapEntry]:
    results = await asyncio.gather(
        *(
            resolve_source(nested, graphql_fetcher, file_system=file_system)
            for nested in source.sources
        )
    )
    return list(source.combine(list(results)))


async def resolve_source(
    source: SitemapSource,
    graphql_fetcher: GraphQLFetcherCallable | None = None,
    *,
    file_system: FileSystem | None = None,
) -> list[SitemapEntry]:
    """Resolve any source variant into a flat list of sitemap entries.

    Recoverable conditions (missing JSON file, no GraphQL fetcher, a `None`
    GraphQL response) yield an empty or truncated list. Exceptions raised by
    caller-supplied callables or by JSON decoding propagate.
    """

    resolved_file_system = file_system or LocalFileSystem()

    if isinstance(source, StaticUrlsSource):
        return list(source.urls)

    if isinstance(source, JsonFileSource):
        return await _resolve_json_file(source, resolved_file_system)

    if isinstance(source, GraphQLSource):
        return await _resolve_graphql(source, graphql_fetcher)

    if isinstance(source, GraphQLPaginatedSource):
        return await _resolve_graphql_paginated(source, graphql_fetcher)

    if isinstance(source, AsyncFetcherSource):
        return await _resolve_async_fetcher(source)

    if isinstance(source, CompositeSource):
        return await _resolve_composite(source, graphql_fetcher, resolved_file_system)

    logger.warning(
        {
            "event": "unknown_sitemap_source",
            "source_type": getattr(source, "type", type(source).__name__),
        }
    )
    return []


__all__ = [
    "AsyncFetcherSource",
    "CompositeSource",
    "GraphQLFetcherCallable",
    "GraphQLPaginatedSource",
    "GraphQLSource",
    "JsonFileSource",
    "PaginatedPage",
    "SitemapSource",
    "StaticUrlsSource",
    "resolve_source",
]
