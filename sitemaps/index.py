"""Top-level sitemap index."""

from sitemaps.models import SitemapEntry
from sitemaps.registry import SitemapRegistry
from sitemaps.urls import SitemapUrls


class SitemapIndex:
    """Builds the index listing every page of every provider."""

    def __init__(self, registry: SitemapRegistry, urls: SitemapUrls):
        self.registry = registry
        self.urls = urls

    def build_index(self) -> list[SitemapEntry]:
        """Concatenate each provider's entries in registration order."""
        entries: list[SitemapEntry] = []
        for provider in self.registry:
            entries.extend(provider.get_sitemap_entries())
        return entries

    def get_index_url(self) -> str:
        return self.urls.index_url()
