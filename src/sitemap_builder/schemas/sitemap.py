"""Pydantic schemas for sitemap URL entries."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, Field

ChangeFrequency = Literal[
    "always",
    "hourly",
    "daily",
    "weekly",
    "monthly",
    "yearly",
    "never",
]


class SitemapUrl(BaseModel):
    """A single `<url>` entry of a URL-set sitemap.

    `loc` is expected to be absolute already; joining paths onto a base URL is
    the caller's job (see `combine_urls`).
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    loc: str = Field(min_length=1)
    lastmod: str | None = None
    changefreq: ChangeFrequency | None = None
    priority: float | None = Field(default=None, ge=0.0, le=1.0)


SitemapEntry: TypeAlias = str | SitemapUrl


def normalize_entry(entry: SitemapEntry | Mapping[str, Any]) -> SitemapUrl:
    """Coerce a bare URL string or mapping into a `SitemapUrl`."""

    if isinstance(entry, SitemapUrl):
        return entry

    if isinstance(entry, str):
        return SitemapUrl(loc=entry)

    return SitemapUrl.model_validate(entry)


__all__ = ["ChangeFrequency", "SitemapEntry", "SitemapUrl", "normalize_entry"]
