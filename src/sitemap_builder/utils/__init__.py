"""Utilities for shared application concerns."""

from sitemap_builder import __version__
from sitemap_builder.utils.logging import setup_logging

__all__ = ["__version__", "setup_logging"]
