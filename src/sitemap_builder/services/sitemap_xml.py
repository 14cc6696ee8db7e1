"""Sitemap protocol 0.9 document rendering."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Final

from sitemap_builder.schemas.sitemap import SitemapEntry, normalize_entry

SITEMAP_NAMESPACE: Final[str] = "http://www.sitemaps.org/schemas/sitemap/0.9"
XML_DECLARATION: Final[str] = '<?xml version="1.0" encoding="UTF-8"?>'

_XML_ESCAPES: Final[tuple[tuple[str, str], ...]] = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&apos;"),
)


def escape_xml(value: str) -> str:
    """Escape the five predefined XML entities."""

    escaped = value
    # & must go first so later replacements are not double-escaped
    for raw, entity in _XML_ESCAPES:
        escaped = escaped.replace(raw, entity)
    return escaped


def _url_to_xml(entry: SitemapEntry) -> str:
    url = normalize_entry(entry)
    parts = [f"<loc>{escape_xml(url.loc)}</loc>"]

    if url.lastmod:
        parts.append(f"<lastmod>{escape_xml(url.lastmod)}</lastmod>")

    if url.changefreq:
        parts.append(f"<changefreq>{escape_xml(url.changefreq)}</changefreq>")

    if url.priority is not None:
        parts.append(f"<priority>{url.priority:.1f}</priority>")

    return f"<url>{''.join(parts)}</url>"


def build_url_set_xml(entries: Iterable[SitemapEntry]) -> str:
    """Render a `<urlset>` document for the given entries."""

    body = "".join(_url_to_xml(entry) for entry in entries)
    return f'{XML_DECLARATION}<urlset xmlns="{SITEMAP_NAMESPACE}">{body}</urlset>'


def build_sitemap_index_xml(sitemap_urls: Iterable[str]) -> str:
    """Render a `<sitemapindex>` document referencing the given sitemap URLs."""

    body = "".join(
        f"<sitemap><loc>{escape_xml(url)}</loc></sitemap>" for url in sitemap_urls
    )
    return (
        f'{XML_DECLARATION}<sitemapindex xmlns="{SITEMAP_NAMESPACE}">'
        f"{body}</sitemapindex>"
    )


__all__ = [
    "SITEMAP_NAMESPACE",
    "XML_DECLARATION",
    "build_sitemap_index_xml",
    "build_url_set_xml",
    "escape_xml",
]
