"""Registry of sitemap providers."""

import logging
from typing import Iterator

from sitemaps.providers.base import SitemapProvider
from sitemaps.urls import is_valid_category

logger = logging.getLogger(__name__)


class SitemapRegistry:
    """Providers keyed by name, in registration order.

    Filled once at startup. Registering a name again replaces the earlier
    provider but keeps its position in the order.
    """

    def __init__(self) -> None:
        self._providers: dict[str, SitemapProvider] = {}

    def add(self, name: str, provider: SitemapProvider) -> None:
        """Register a provider under a name.

        The name is the category segment of sitemap URLs, so it must be
        routable and match the provider's own name.
        """
        if not is_valid_category(name):
            raise ValueError(f"Invalid sitemap provider name: {name!r}")
        if name != provider.name:
            raise ValueError(
                f"Provider {type(provider).__name__} is named {provider.name!r}, not {name!r}"
            )
        if name in self._providers:
            logger.info(f"Replacing sitemap provider: {name}")
        else:
            logger.info(f"Registered sitemap provider: {name}")
        self._providers[name] = provider

    def get(self, name: str) -> SitemapProvider | None:
        """Get a provider by name."""
        return self._providers.get(name)

    def all(self) -> list[tuple[str, SitemapProvider]]:
        """All (name, provider) pairs in registration order."""
        return list(self._providers.items())

    @property
    def providers(self) -> list[SitemapProvider]:
        """All registered providers."""
        return list(self._providers.values())

    def __contains__(self, name: object) -> bool:
        return name in self._providers

    def __len__(self) -> int:
        return len(self._providers)

    def __iter__(self) -> Iterator[SitemapProvider]:
        return iter(list(self._providers.values()))
