"""Application settings loaded from environment variables."""

from __future__ import annotations

from collections.abc import Sequence
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sitemap_builder.services.ensure_sitemaps import (
    EnsureSitemapsConfig,
    SitemapGroupDefinition,
)


class Settings(BaseSettings):
    """Runtime configuration sourced from environment variables and .env."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    SITEMAP_BASE_URL: str
    SITEMAP_OUTPUT_DIR: Path = Path("public")
    SITEMAP_GRAPHQL_URL: str | None = None
    SITEMAP_GRAPHQL_HEADERS: dict[str, str] = Field(default_factory=dict)
    SITEMAP_STALE_TIME_MS: int | None = Field(default=None, ge=0)
    SITEMAP_SUBDIR: str = "seo"
    SITEMAP_INDEX_PATH: str = "sitemap.xml"
    SITEMAP_DEFAULT_PAGE_SIZE: int = Field(default=40_000, ge=1, le=50_000)
    SITEMAP_ROBOTS: bool = True
    HTTP_TIMEOUT_SECONDS: float = Field(default=30.0, gt=0)
    OUTBOUND_HTTP_USER_AGENT: str = "SitemapBuilder/0.1"
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: Literal["json", "text"] = "text"
    LOG_FILE: Path | None = None
    LOG_FILE_MAX_BYTES: int = Field(default=10_485_760, ge=1)
    LOG_FILE_BACKUP_COUNT: int = Field(default=5, ge=1)

    @field_validator(
        "LOG_FILE", "SITEMAP_GRAPHQL_URL", "SITEMAP_STALE_TIME_MS", mode="before"
    )
    @classmethod
    def parse_optional_blank(cls, value: object) -> object:
        if value in (None, ""):
            return None
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()  # type: ignore[call-arg]


def build_ensure_sitemaps_config(
    groups: Sequence[SitemapGroupDefinition],
    settings: Settings | None = None,
    *,
    force: bool = False,
) -> EnsureSitemapsConfig:
    """Assemble the engine configuration once from settings.

    `force` drops the staleness threshold so the run always regenerates.
    """

    resolved = settings or get_settings()
    graphql_headers = {
        "User-Agent": resolved.OUTBOUND_HTTP_USER_AGENT,
        **resolved.SITEMAP_GRAPHQL_HEADERS,
    }

    return EnsureSitemapsConfig(
        base_url=resolved.SITEMAP_BASE_URL,
        output_dir=resolved.SITEMAP_OUTPUT_DIR,
        groups=list(groups),
        graphql_url=resolved.SITEMAP_GRAPHQL_URL,
        graphql_headers=graphql_headers,
        stale_time_ms=None if force else resolved.SITEMAP_STALE_TIME_MS,
        sitemap_subdir=resolved.SITEMAP_SUBDIR,
        sitemap_index_path=resolved.SITEMAP_INDEX_PATH,
        default_page_size=resolved.SITEMAP_DEFAULT_PAGE_SIZE,
        robots=resolved.SITEMAP_ROBOTS,
        http_timeout_seconds=resolved.HTTP_TIMEOUT_SECONDS,
    )
