"""Sitemap providers, one per content category."""

from sitemaps.providers.base import SitemapProvider
from sitemaps.providers.posts import PostsProvider
from sitemaps.providers.taxonomies import TaxonomiesProvider
from sitemaps.providers.users import UsersProvider

# Built-in providers by name, in default registration order.
BUILTIN_PROVIDERS: dict[str, type[SitemapProvider]] = {
    "posts": PostsProvider,
    "taxonomies": TaxonomiesProvider,
    "users": UsersProvider,
}

__all__ = [
    "SitemapProvider",
    "PostsProvider",
    "TaxonomiesProvider",
    "UsersProvider",
    "BUILTIN_PROVIDERS",
]
