"""Base class for sitemap providers.

A provider owns one content category ("posts", "taxonomies", "users") and
turns it into a set of bounded, URL-addressable sitemap pages:

- get_object_sub_types() - partitions of the category
- max_num_pages(sub_type) - ceil(count / max_urls)
- get_url_list(page, sub_type) - the URLs on one page
- get_sitemap_entries() - one index entry per page per sub-type

Pages are cut from objects ordered by ascending ID, so appending content
never moves an object to a different page.

Providers are shared by every request. Nothing request-specific is stored
on the instance: the sub-type is passed into each call.
"""

import logging
import math
from abc import ABC, abstractmethod
from datetime import datetime, timezone

from sitemaps.lastmod import LastmodCache
from sitemaps.models import NO_SUB_TYPE, ObjectType, SitemapEntry, SubType
from sitemaps.store.base import ObjectQuery, ObjectSource
from sitemaps.urls import SitemapUrls, is_valid_category

logger = logging.getLogger(__name__)


class SitemapProvider(ABC):
    """Interface and shared pagination for a sitemap category.

    Subclasses define the category name and how objects are counted and
    listed. Everything else (page maths, index entries, URLs, lastmod) is
    shared.

    Example:
        class BooksProvider(SitemapProvider):
            name = "books"
            object_type = ObjectType.POST

            def build_query(self, sub_type):
                return ObjectQuery(ObjectType.POST, ("book",))
    """

    name: str = ""
    object_type: ObjectType = ObjectType.POST

    def __init__(
        self,
        source: ObjectSource,
        urls: SitemapUrls,
        lastmod: LastmodCache | None = None,
        max_urls: int = 2000,
        sub_type: str | None = None,
    ):
        """Initialize provider.

        Args:
            source: Where objects are counted and listed.
            urls: URL composer for this site.
            lastmod: Lastmod cache; without one, index entries carry no lastmod.
            max_urls: Page size, at least 1.
            sub_type: Fixed sub-type, for providers that expose exactly one.
        """
        if not self.name:
            raise ValueError(f"{type(self).__name__} must define a name")
        if not is_valid_category(self.name):
            raise ValueError(
                f"Invalid sitemap provider name {self.name!r}: use lowercase letters only"
            )
        if max_urls < 1:
            raise ValueError(f"max_urls must be at least 1, got {max_urls}")

        self.source = source
        self.urls = urls
        self.lastmod = lastmod
        self.max_urls = max_urls
        self.sub_type = sub_type

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r} max_urls={self.max_urls}>"

    # Query building

    @abstractmethod
    def build_query(self, sub_type: str | None) -> ObjectQuery:
        """Query selecting the objects of a sub-type."""
        pass

    def get_queried_type(self, sub_type: str | None = None) -> str:
        """Resolve the effective type: explicit, then fixed, then the category."""
        return sub_type or self.sub_type or self.name

    # Pagination

    def max_num_pages(self, sub_type: str | None = None) -> int:
        """Number of pages for a sub-type. Zero when there is no content."""
        total = self.source.count_objects(self.build_query(sub_type))
        return math.ceil(total / self.max_urls)

    def get_url_list(self, page: int, sub_type: str | None = None) -> list[SitemapEntry]:
        """URLs on one page, ordered by object ID.

        Pages are 1-indexed. Pages out of range give an empty list, which
        callers treat as "not found".
        """
        if page < 1:
            return []

        objects = self.source.list_objects(
            self.build_query(sub_type),
            offset=(page - 1) * self.max_urls,
            limit=self.max_urls,
        )
        return [
            SitemapEntry(
                location=self.urls.absolute(obj.location),
                last_modified=obj.last_modified,
            )
            for obj in objects
        ]

    # Index entries

    def get_object_sub_types(self) -> list[SubType]:
        """Sub-types exposed by this provider.

        Defaults to the fixed sub-type, or a single NO_SUB_TYPE marker when
        there is none. An empty list means the provider contributes nothing.
        """
        if self.sub_type:
            return [SubType(name=self.sub_type)]
        return [NO_SUB_TYPE]

    def get_sitemap_entries(self) -> list[SitemapEntry]:
        """One index entry per page of every sub-type."""
        entries: list[SitemapEntry] = []

        for sub_type in self.get_object_sub_types():
            name = sub_type.name or None
            total = self.max_num_pages(name)

            for page in range(1, total + 1):
                entries.append(SitemapEntry(
                    location=self.get_sitemap_url(name, page),
                    last_modified=self.get_sitemap_lastmod(name, page),
                ))

        return entries

    def get_sitemap_url(self, sub_type: str | None, page: int | None) -> str:
        """URL of one of this provider's pages."""
        return self.urls.sitemap_url(self.name, sub_type, page)

    # Lastmod

    def get_sitemap_lastmod(self, sub_type: str | None, page: int) -> datetime | None:
        """Cached lastmod for a page. A miss schedules a recompute and returns None."""
        if self.lastmod is None:
            return None
        return self.lastmod.lookup(self.name, sub_type, page)

    def calculate_sitemap_lastmod(
        self,
        name: str,
        sub_type: str | None,
        page: int,
        entries: list[SitemapEntry] | None = None,
    ) -> None:
        """Recompute and store the lastmod of one page.

        Runs as a broadcast job, so calls for other providers are ignored.
        ``entries`` is the page as served, after URL list filters; without
        it the provider's own unfiltered list is used.
        """
        if name != self.name or self.lastmod is None:
            return

        if entries is None:
            entries = self.get_url_list(page, sub_type)
        times = [e.last_modified for e in entries if e.last_modified]
        latest = max(times, key=_sort_key) if times else None

        self.lastmod.set(self.name, sub_type, page, latest)
        logger.info(f"Calculated lastmod for {self.name}/{sub_type or '-'}/{page}: {latest}")


def _sort_key(dt: datetime) -> datetime:
    """Compare naive and aware datetimes together, treating naive as UTC."""
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


