"""Exceptions raised by sitemaps.

Missing pages, unknown providers and lastmod cache misses are ordinary
control flow and never surface as exceptions. These cover the cases that
are real faults: bad configuration or a broken storage backend.
"""


class SitemapsError(Exception):
    """Base class for sitemaps errors."""


class ConfigError(SitemapsError):
    """Raised when configuration values are invalid."""


class StoreError(SitemapsError):
    """Raised when a store cannot be opened or read."""
