"""Sitemap provider for posts, pages and custom post types."""

from sitemaps.models import ObjectType, SubType
from sitemaps.providers.base import SitemapProvider
from sitemaps.store.base import ObjectQuery

# Attachments have their own permalinks but are never listed in sitemaps.
EXCLUDED_POST_TYPES = frozenset({"attachment"})


class PostsProvider(SitemapProvider):
    """One sub-type per public post type.

    URLs: /sitemap-posts-{post_type}-{page}.xml
    """

    name = "posts"
    object_type = ObjectType.POST

    def build_query(self, sub_type: str | None) -> ObjectQuery:
        return ObjectQuery(
            object_type=ObjectType.POST,
            subtypes=(self.get_queried_type(sub_type),),
            status="publish",
        )

    def get_object_sub_types(self) -> list[SubType]:
        if self.sub_type:
            return super().get_object_sub_types()

        return [
            sub_type
            for sub_type in self.source.list_sub_types(ObjectType.POST)
            if sub_type.public and sub_type.name not in EXCLUDED_POST_TYPES
        ]
