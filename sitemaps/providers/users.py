"""Sitemap provider for author archives."""

from datetime import datetime

from sitemaps.models import ObjectType, SitemapEntry
from sitemaps.providers.base import SitemapProvider
from sitemaps.providers.posts import EXCLUDED_POST_TYPES
from sitemaps.store.base import ObjectQuery


class UsersProvider(SitemapProvider):
    """Authors with at least one published post in a public post type.

    Users have no sub-types and no modification time, so pages carry no
    lastmod and nothing is ever scheduled for them.

    URLs: /sitemap-users-{page}.xml
    """

    name = "users"
    object_type = ObjectType.USER

    def build_query(self, sub_type: str | None = None) -> ObjectQuery:
        public_post_types = tuple(
            s.name
            for s in self.source.list_sub_types(ObjectType.POST)
            if s.public and s.name not in EXCLUDED_POST_TYPES
        )
        return ObjectQuery(
            object_type=ObjectType.USER,
            subtypes=public_post_types,
            status="publish",
        )

    def get_url_list(self, page: int, sub_type: str | None = None) -> list[SitemapEntry]:
        # Sub-type does not apply to users
        return [
            SitemapEntry(location=entry.location)
            for entry in super().get_url_list(page, None)
        ]

    def max_num_pages(self, sub_type: str | None = None) -> int:
        return super().max_num_pages(None)

    def get_sitemap_lastmod(self, sub_type: str | None, page: int) -> datetime | None:
        return None

    def calculate_sitemap_lastmod(
        self,
        name: str,
        sub_type: str | None,
        page: int,
        entries: list[SitemapEntry] | None = None,
    ) -> None:
        return None
