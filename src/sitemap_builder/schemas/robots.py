"""Pydantic schemas for robots.txt rendering."""

from __future__ import annotations

from pydantic import BaseModel, Field


class RobotsRule(BaseModel):
    """One `User-agent` block with its allow and disallow paths."""

    user_agent: str = Field(min_length=1)
    allow: list[str] = Field(default_factory=list)
    disallow: list[str] = Field(default_factory=list)


class RobotsConfig(BaseModel):
    """Inputs for a robots.txt body."""

    rules: list[RobotsRule] = Field(default_factory=list)
    sitemap_url: str | None = None
    additional_sitemaps: list[str] = Field(default_factory=list)
    custom: str | None = None


__all__ = ["RobotsConfig", "RobotsRule"]
