"""Command-line entry point for build-time sitemap generation."""

from __future__ import annotations

import argparse
import asyncio
from collections.abc import Sequence
import importlib
import logging
import sys
from typing import Any

from pydantic import ValidationError

from sitemap_builder.config import Settings, build_ensure_sitemaps_config
from sitemap_builder.services.ensure_sitemaps import (
    SitemapGroupDefinition,
    ensure_sitemaps,
)
from sitemap_builder.utils.logging import setup_logging

logger = logging.getLogger("sitemap_builder.cli")


class SitemapConfigurationError(Exception):
    """Raised when the groups target cannot be loaded."""


def load_groups(target: str) -> list[SitemapGroupDefinition]:
    """Load group definitions from a `module:attribute` target.

    The attribute may be a sequence of definitions or a zero-argument callable
    returning one.
    """

    module_name, separator, attribute_name = target.partition(":")
    if not separator or not module_name or not attribute_name:
        raise SitemapConfigurationError(
            f"Groups target {target!r} must look like 'package.module:attribute'"
        )

    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise SitemapConfigurationError(
            f"Cannot import groups module {module_name!r}: {exc}"
        ) from exc

    try:
        value: Any = getattr(module, attribute_name)
    except AttributeError as exc:
        raise SitemapConfigurationError(
            f"Module {module_name!r} has no attribute {attribute_name!r}"
        ) from exc

    if callable(value):
        value = value()

    groups = list(value)
    for group in groups:
        if not isinstance(group, SitemapGroupDefinition):
            raise SitemapConfigurationError(
                f"Groups target {target!r} contains {type(group).__name__}, "
                "expected SitemapGroupDefinition"
            )
    return groups


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sitemap-builder",
        description="Generate static sitemap files and robots.txt.",
    )
    parser.add_argument(
        "--groups",
        required=True,
        help="Group definitions as 'package.module:attribute'",
    )
    parser.add_argument("--base-url", help="Overrides SITEMAP_BASE_URL")
    parser.add_argument("--output-dir", help="Overrides SITEMAP_OUTPUT_DIR")
    parser.add_argument(
        "--force",
        action="store_true",
        help="Regenerate even when the sitemap index is still fresh",
    )
    return parser


def _load_settings(args: argparse.Namespace) -> Settings:
    overrides: dict[str, Any] = {}
    if args.base_url:
        overrides["SITEMAP_BASE_URL"] = args.base_url
    if args.output_dir:
        overrides["SITEMAP_OUTPUT_DIR"] = args.output_dir
    return Settings(**overrides)


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        settings = _load_settings(args)
    except ValidationError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 1

    setup_logging(settings)

    try:
        groups = load_groups(args.groups)
        config = build_ensure_sitemaps_config(groups, settings, force=args.force)
    except (SitemapConfigurationError, ValueError) as exc:
        logger.error({"event": "sitemap_configuration_invalid", "reason": str(exc)})
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 1

    result = asyncio.run(ensure_sitemaps(config))

    if result.skipped:
        print(f"Sitemaps are fresh, skipped (index={result.sitemap_index_path})")
        return 0

    url_count = sum(sitemap.url_count for sitemap in result.sitemaps)
    print(
        (
            "Sitemaps generated "
            f"(files={len(result.sitemaps)}, urls={url_count}, "
            f"failed_groups={len(result.errors)}, "
            f"index={result.sitemap_index_path}, robots={result.robots_path})"
        )
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
