"""Sitemap provider for taxonomy terms."""

from sitemaps.models import ObjectType, SubType
from sitemaps.providers.base import SitemapProvider
from sitemaps.store.base import ObjectQuery


class TaxonomiesProvider(SitemapProvider):
    """One sub-type per public taxonomy. Empty terms are left out.

    URLs: /sitemap-taxonomies-{taxonomy}-{page}.xml
    """

    name = "taxonomies"
    object_type = ObjectType.TERM

    def build_query(self, sub_type: str | None) -> ObjectQuery:
        return ObjectQuery(
            object_type=ObjectType.TERM,
            subtypes=(self.get_queried_type(sub_type),),
        )

    def get_object_sub_types(self) -> list[SubType]:
        if self.sub_type:
            return super().get_object_sub_types()

        return [
            sub_type
            for sub_type in self.source.list_sub_types(ObjectType.TERM)
            if sub_type.public
        ]
