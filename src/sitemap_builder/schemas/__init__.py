"""Pydantic schemas shared by the sitemap engine."""

from sitemap_builder.schemas.robots import RobotsConfig, RobotsRule
from sitemap_builder.schemas.sitemap import (
    ChangeFrequency,
    SitemapEntry,
    SitemapUrl,
    normalize_entry,
)

__all__ = [
    "ChangeFrequency",
    "RobotsConfig",
    "RobotsRule",
    "SitemapEntry",
    "SitemapUrl",
    "normalize_entry",
]
