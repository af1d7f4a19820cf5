"""sitemaps - paginated XML sitemaps for content-managed sites."""

from sitemaps.config import Config
from sitemaps.core import Sitemaps, SitemapResponse
from sitemaps.lastmod import LastmodCache, LastmodCacheEntry
from sitemaps.models import NO_SUB_TYPE, SitemapEntry, SubType
from sitemaps.providers import PostsProvider, SitemapProvider, TaxonomiesProvider, UsersProvider
from sitemaps.registry import SitemapRegistry
from sitemaps.scheduler import QueueScheduler, Scheduler, ThreadScheduler
from sitemaps.urls import SitemapRequest, SitemapUrls

__version__ = "0.1.0"

__all__ = [
    "Config",
    "Sitemaps",
    "SitemapResponse",
    "LastmodCache",
    "LastmodCacheEntry",
    "NO_SUB_TYPE",
    "SitemapEntry",
    "SubType",
    "SitemapProvider",
    "PostsProvider",
    "TaxonomiesProvider",
    "UsersProvider",
    "SitemapRegistry",
    "Scheduler",
    "QueueScheduler",
    "ThreadScheduler",
    "SitemapRequest",
    "SitemapUrls",
]
