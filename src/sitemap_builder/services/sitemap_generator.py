"""Write chunked sitemap files, a sitemap index and robots.txt to disk."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
import inspect
import logging
from pathlib import Path
import re
import time
from typing import Final, TypeAlias, TypeVar
from urllib.parse import quote

from sitemap_builder.schemas.robots import RobotsConfig
from sitemap_builder.schemas.sitemap import SitemapEntry, SitemapUrl, normalize_entry
from sitemap_builder.services.filesystem import FileSystem, LocalFileSystem
from sitemap_builder.services.robots import build_robots_txt
from sitemap_builder.services.sitemap_xml import (
    build_sitemap_index_xml,
    build_url_set_xml,
)

DEFAULT_PAGE_SIZE: Final[int] = 40_000
DEFAULT_SITEMAP_INDEX_PATH: Final[str] = "sitemap.xml"
DEFAULT_SITEMAP_SUBDIR: Final[str] = "seo"
ROBOTS_FILE_NAME: Final[str] = "robots.txt"
ERRORS_SITEMAP_NAME: Final[str] = "__errors"
ERROR_URL_SEGMENT: Final[str] = "__seo_shell_sitemap_error"
SAFE_FILE_NAME_STEM: Final[re.Pattern[str]] = re.compile(
    r"^[A-Za-z0-9][A-Za-z0-9._-]*$"
)

# Characters encodeURIComponent leaves untouched besides alphanumerics and "-_."
_URL_COMPONENT_SAFE: Final[str] = "!~*'()"

_logger = logging.getLogger("sitemap_builder.generator")

T = TypeVar("T")


@dataclass(slots=True, frozen=True)
class SitemapProviderResult:
    name: str
    urls: Sequence[SitemapEntry]


SitemapProvider: TypeAlias = Callable[
    [], SitemapProviderResult | Awaitable[SitemapProviderResult]
]


@dataclass(slots=True, frozen=True)
class SitemapGroupConfig:
    """A named provider whose URLs become one or more sitemap files."""

    name: str
    provider: SitemapProvider
    page_size: int | None = None


@dataclass(slots=True, frozen=True)
class SitemapGeneratorConfig:
    base_url: str
    output_dir: Path | str
    sitemap_groups: Sequence[SitemapGroupConfig] = field(default_factory=list)
    robots: RobotsConfig | bool = True
    default_page_size: int = DEFAULT_PAGE_SIZE
    sitemap_index_path: str = DEFAULT_SITEMAP_INDEX_PATH
    sitemap_subdir: str = DEFAULT_SITEMAP_SUBDIR
    stale_time_ms: int | None = None


@dataclass(slots=True, frozen=True)
class GeneratedSitemap:
    """A sitemap file written during a run."""

    name: str
    path: str
    url_count: int


@dataclass(slots=True, frozen=True)
class SitemapGroupError:
    group_name: str
    message: str


@dataclass(slots=True, frozen=True)
class SitemapGeneratorResult:
    """Manifest of what a generation run wrote."""

    sitemaps: list[GeneratedSitemap]
    sitemap_index_path: str | None
    robots_path: str | None
    skipped: bool
    errors: list[SitemapGroupError] = field(default_factory=list)


@dataclass(slots=True)
class _RunState:
    generated_sitemaps: list[GeneratedSitemap] = field(default_factory=list)
    sitemap_index_urls: list[str] = field(default_factory=list)
    errors: list[SitemapGroupError] = field(default_factory=list)


def chunk_entries(entries: Sequence[T], size: int) -> list[list[T]]:
    """Split entries into order-preserving chunks of at most `size` items."""

    if size < 1:
        raise ValueError("size must be at least 1")

    return [
        list(entries[start : start + size]) for start in range(0, len(entries), size)
    ]


def _validate_config(config: SitemapGeneratorConfig) -> None:
    if config.default_page_size < 1:
        raise ValueError("default_page_size must be at least 1")

    for group in config.sitemap_groups:
        if group.page_size is not None and group.page_size < 1:
            raise ValueError(f"page_size for group {group.name!r} must be at least 1")


def _is_fresh(
    *,
    file_system: FileSystem,
    path: Path,
    stale_time_ms: int,
    clock: Callable[[], float],
) -> bool:
    if not file_system.exists(path):
        return False

    age_ms = (clock() - file_system.stat_mtime(path)) * 1000
    return age_ms <= stale_time_ms


def _build_error_url(base_url: str, error: SitemapGroupError) -> str:
    encoded = quote(f"{error.group_name}:{error.message}", safe=_URL_COMPONENT_SAFE)
    return f"{base_url}/{ERROR_URL_SEGMENT}/{encoded}"


def _describe_exception(exc: Exception) -> str:
    return str(exc) or exc.__class__.__name__


def _check_file_name_stem(name: str) -> str:
    if name == ERRORS_SITEMAP_NAME or not SAFE_FILE_NAME_STEM.fullmatch(name):
        raise ValueError(f"Sitemap name {name!r} is not a safe file name stem")
    return name


async def _call_provider(provider: SitemapProvider) -> SitemapProviderResult:
    result = provider()
    if inspect.isawaitable(result):
        return await result
    return result


def _write_chunked_sitemaps(
    *,
    file_name_stem: str,
    entries: list[SitemapUrl],
    page_size: int,
    sitemap_dir: Path,
    sitemap_subdir: str,
    base_url: str,
    file_system: FileSystem,
    state: _RunState,
) -> None:
    chunks = chunk_entries(entries, page_size)

    for index, chunk in enumerate(chunks, start=1):
        file_name = (
            f"{file_name_stem}.xml"
            if len(chunks) == 1
            else f"{file_name_stem}-{index}.xml"
        )
        relative_path = f"{sitemap_subdir}/{file_name}"

        file_system.write_file(
            sitemap_dir / file_name, build_url_set_xml(chunk).encode("utf-8")
        )

        state.generated_sitemaps.append(
            GeneratedSitemap(name=file_name, path=relative_path, url_count=len(chunk))
        )
        state.sitemap_index_urls.append(f"{base_url}/{relative_path}")


def _resolve_robots_config(
    robots: RobotsConfig | bool, index_url: str | None
) -> RobotsConfig | None:
    if robots is False:
        return None

    if robots is True:
        return RobotsConfig(sitemap_url=index_url)

    if robots.sitemap_url is not None:
        return robots

    return robots.model_copy(update={"sitemap_url": index_url})


async def generate_sitemaps(
    config: SitemapGeneratorConfig,
    *,
    file_system: FileSystem | None = None,
    logger: logging.Logger | None = None,
    clock: Callable[[], float] | None = None,
) -> SitemapGeneratorResult:
    """Generate sitemap files for every group and write the index and robots.txt.

    Groups are processed sequentially in declaration order. A provider that
    raises does not abort the run: its error is recorded, surfaced as an entry
    in `__errors.xml`, and logged once after all groups have been processed.
    The index path always exists after a non-skipped run; when no group
    produced URLs a single-URL urlset is written there instead of an index.
    """

    _validate_config(config)

    fs = file_system or LocalFileSystem()
    run_logger = logger or _logger
    now = clock or time.time

    output_dir = Path(config.output_dir)
    sitemap_index_full_path = output_dir / config.sitemap_index_path
    robots_full_path = output_dir / ROBOTS_FILE_NAME

    if config.stale_time_ms is not None and _is_fresh(
        file_system=fs,
        path=sitemap_index_full_path,
        stale_time_ms=config.stale_time_ms,
        clock=now,
    ):
        run_logger.info(
            {
                "event": "sitemap_generation_skipped",
                "sitemap_index_path": config.sitemap_index_path,
                "stale_time_ms": config.stale_time_ms,
            }
        )
        return SitemapGeneratorResult(
            sitemaps=[],
            sitemap_index_path=config.sitemap_index_path,
            robots_path=ROBOTS_FILE_NAME if fs.exists(robots_full_path) else None,
            skipped=True,
        )

    base_url = config.base_url.rstrip("/")
    sitemap_dir = output_dir / config.sitemap_subdir
    fs.mkdir_all(sitemap_dir)
    fs.mkdir_all(sitemap_index_full_path.parent)

    state = _RunState()

    for group in config.sitemap_groups:
        page_size = group.page_size or config.default_page_size
        try:
            result = await _call_provider(group.provider)
            file_name_stem = _check_file_name_stem(result.name)
            entries = [normalize_entry(entry) for entry in result.urls]
        except Exception as exc:  # noqa: BLE001
            state.errors.append(
                SitemapGroupError(
                    group_name=group.name, message=_describe_exception(exc)
                )
            )
            continue

        if not entries:
            run_logger.debug({"event": "sitemap_group_empty", "group": group.name})
            continue

        _write_chunked_sitemaps(
            file_name_stem=file_name_stem,
            entries=entries,
            page_size=page_size,
            sitemap_dir=sitemap_dir,
            sitemap_subdir=config.sitemap_subdir,
            base_url=base_url,
            file_system=fs,
            state=state,
        )

    if state.errors:
        run_logger.error(
            {
                "event": "sitemap_group_failures",
                "error_count": len(state.errors),
                "errors": [
                    {"group": error.group_name, "message": error.message}
                    for error in state.errors
                ],
            }
        )
        error_entries = [SitemapUrl(loc=base_url)] + [
            SitemapUrl(loc=_build_error_url(base_url, error)) for error in state.errors
        ]
        _write_chunked_sitemaps(
            file_name_stem=ERRORS_SITEMAP_NAME,
            entries=error_entries,
            page_size=len(error_entries),
            sitemap_dir=sitemap_dir,
            sitemap_subdir=config.sitemap_subdir,
            base_url=base_url,
            file_system=fs,
            state=state,
        )

    if state.sitemap_index_urls:
        index_document = build_sitemap_index_xml(state.sitemap_index_urls)
    else:
        index_document = build_url_set_xml([base_url])
    fs.write_file(sitemap_index_full_path, index_document.encode("utf-8"))

    robots_path: str | None = None
    index_url = (
        f"{base_url}/{config.sitemap_index_path}"
        if state.sitemap_index_urls
        else None
    )
    robots_config = _resolve_robots_config(config.robots, index_url)
    if robots_config is not None:
        fs.write_file(robots_full_path, build_robots_txt(robots_config).encode("utf-8"))
        robots_path = ROBOTS_FILE_NAME

    run_logger.info(
        {
            "event": "sitemap_generation_completed",
            "sitemap_count": len(state.generated_sitemaps),
            "url_count": sum(item.url_count for item in state.generated_sitemaps),
            "failed_groups": len(state.errors),
        }
    )

    return SitemapGeneratorResult(
        sitemaps=state.generated_sitemaps,
        sitemap_index_path=config.sitemap_index_path,
        robots_path=robots_path,
        skipped=False,
        errors=state.errors,
    )


__all__ = [
    "DEFAULT_PAGE_SIZE",
    "DEFAULT_SITEMAP_INDEX_PATH",
    "DEFAULT_SITEMAP_SUBDIR",
    "ERRORS_SITEMAP_NAME",
    "ERROR_URL_SEGMENT",
    "GeneratedSitemap",
    "ROBOTS_FILE_NAME",
    "SAFE_FILE_NAME_STEM",
    "SitemapGeneratorConfig",
    "SitemapGeneratorResult",
    "SitemapGroupConfig",
    "SitemapGroupError",
    "SitemapProvider",
    "SitemapProviderResult",
    "chunk_entries",
    "generate_sitemaps",
]
