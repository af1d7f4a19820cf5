"""Tests for sitemap providers: pagination, sub-types, URLs and lastmod."""

import math
from datetime import timedelta

import pytest

from sitemaps.lastmod import CALCULATE_LASTMOD_JOB, LastmodCache
from sitemaps.models import NO_SUB_TYPE, ObjectType, SubType
from sitemaps.providers import PostsProvider, SitemapProvider, TaxonomiesProvider, UsersProvider
from sitemaps.scheduler import QueueScheduler
from sitemaps.store import ObjectQuery
from sitemaps.urls import SitemapUrls

from conftest import BASE_TIME, HOME, CountingSource


def make_posts(counts, max_urls, sub_type=None, lastmod=None):
    return PostsProvider(
        CountingSource(counts),
        SitemapUrls(HOME),
        lastmod=lastmod,
        max_urls=max_urls,
        sub_type=sub_type,
    )


class TestPagination:

    @pytest.mark.parametrize("total,page_size", [
        (0, 1),
        (1, 1),
        (5, 2),
        (6, 2),
        (7, 3),
        (10, 10),
        (11, 10),
        (99, 7),
    ])
    def test_page_count_and_sizes(self, total, page_size):
        provider = make_posts({"post": total}, page_size, sub_type="post")

        pages = provider.max_num_pages()
        assert pages == math.ceil(total / page_size)

        sizes = [len(provider.get_url_list(page)) for page in range(1, pages + 1)]
        assert all(1 <= size <= page_size for size in sizes)
        assert sum(sizes) == total
        if pages:
            assert sizes[-1] == total - (pages - 1) * page_size

    @pytest.mark.parametrize("page", [-1, 0, 4, 100])
    def test_out_of_range_pages_are_empty(self, page):
        provider = make_posts({"post": 5}, 2, sub_type="post")
        assert provider.max_num_pages() == 3
        assert provider.get_url_list(page) == []

    def test_pages_do_not_overlap(self):
        provider = make_posts({"post": 25}, 4, sub_type="post")
        seen = []
        for page in range(1, provider.max_num_pages() + 1):
            seen.extend(e.location for e in provider.get_url_list(page))

        assert len(seen) == len(set(seen)) == 25
        assert seen[0] == f"{HOME}/post/1/"
        assert seen[-1] == f"{HOME}/post/25/"

    def test_appending_content_keeps_earlier_pages(self):
        source = CountingSource({"post": 10})
        provider = PostsProvider(source, SitemapUrls(HOME), max_urls=4, sub_type="post")
        before = [provider.get_url_list(page) for page in (1, 2)]

        source.counts["post"] = 14
        after = [provider.get_url_list(page) for page in (1, 2)]

        assert before == after
        assert provider.max_num_pages() == 4

    def test_large_site(self):
        provider = make_posts({"post": 250_000}, 50_000, sub_type="post")
        assert provider.max_num_pages() == 5
        assert len(provider.get_url_list(5)) == 50_000

    def test_large_site_exact_multiple(self):
        provider = make_posts({"post": 200_000}, 50_000, sub_type="post")
        assert provider.max_num_pages() == 4
        for page in range(1, 5):
            assert len(provider.get_url_list(page)) == 50_000
        assert provider.get_url_list(5) == []

    def test_invalid_page_size(self):
        with pytest.raises(ValueError):
            make_posts({"post": 1}, 0)


class TestSubTypes:

    def test_no_sub_type_gives_sentinel(self, populated_store, urls):
        users = UsersProvider(populated_store, urls)
        sub_types = users.get_object_sub_types()

        assert sub_types == [NO_SUB_TYPE]
        assert not sub_types[0]

    def test_fixed_sub_type(self):
        provider = make_posts({"post": 1, "page": 1}, 10, sub_type="page")
        assert provider.get_object_sub_types() == [SubType(name="page")]

    def test_posts_exclude_attachments_and_private_types(self, populated_store, urls):
        provider = PostsProvider(populated_store, urls)
        assert [s.name for s in provider.get_object_sub_types()] == ["post", "page"]

    def test_taxonomies_only_public(self, populated_store, urls):
        provider = TaxonomiesProvider(populated_store, urls)
        assert [s.name for s in provider.get_object_sub_types()] == ["category"]

    def test_queried_type_resolution(self):
        provider = make_posts({}, 10)
        assert provider.get_queried_type("page") == "page"
        assert provider.get_queried_type() == "posts"

        fixed = make_posts({}, 10, sub_type="post")
        assert fixed.get_queried_type() == "post"
        assert fixed.get_queried_type("page") == "page"


class TestSitemapUrls:

    def test_url_with_sub_type(self):
        provider = make_posts({"post": 1}, 10)
        assert provider.get_sitemap_url("post", 1) == f"{HOME}/sitemap-posts-post-1.xml"
        assert provider.get_sitemap_url("post", 12) == f"{HOME}/sitemap-posts-post-12.xml"

    def test_url_without_sub_type(self, populated_store, urls):
        users = UsersProvider(populated_store, urls)
        assert users.get_sitemap_url(None, 1) == f"{HOME}/sitemap-users-1.xml"
        assert users.get_sitemap_url(None, None) == f"{HOME}/sitemap-users.xml"

    def test_url_is_stable(self):
        provider = make_posts({"post": 1}, 10)
        urls = {provider.get_sitemap_url("post", 3) for _ in range(5)}
        assert urls == {f"{HOME}/sitemap-posts-post-3.xml"}

    def test_query_fallback(self):
        provider = PostsProvider(CountingSource({}), SitemapUrls(HOME, pretty=False))
        assert provider.get_sitemap_url("post", 2) == f"{HOME}/?sitemap=posts&sub_type=post&paged=2"


class TestSitemapEntries:

    def test_one_entry_per_page_per_sub_type(self):
        provider = make_posts({"post": 5, "page": 2}, 2)
        entries = provider.get_sitemap_entries()

        assert [e.location for e in entries] == [
            f"{HOME}/sitemap-posts-post-1.xml",
            f"{HOME}/sitemap-posts-post-2.xml",
            f"{HOME}/sitemap-posts-post-3.xml",
            f"{HOME}/sitemap-posts-page-1.xml",
        ]
        # No lastmod cache configured
        assert all(e.last_modified is None for e in entries)

    def test_empty_sub_type_contributes_nothing(self):
        provider = make_posts({"post": 0, "page": 1}, 2)
        assert [e.location for e in provider.get_sitemap_entries()] == [
            f"{HOME}/sitemap-posts-page-1.xml",
        ]

    def test_provider_without_sub_types(self, populated_store, urls):
        users = UsersProvider(populated_store, urls, max_urls=1)
        assert [e.location for e in users.get_sitemap_entries()] == [
            f"{HOME}/sitemap-users-1.xml",
            f"{HOME}/sitemap-users-2.xml",
        ]


class TestLastmod:

    @pytest.fixture
    def scheduler(self):
        return QueueScheduler(clock=lambda: 0.0)

    @pytest.fixture
    def cache(self, sqlite_store, scheduler):
        return LastmodCache(sqlite_store, scheduler, delay=500)

    @pytest.fixture
    def provider(self, cache, scheduler):
        provider = make_posts({"post": 10, "page": 7}, 3, lastmod=cache)
        scheduler.register(CALCULATE_LASTMOD_JOB, provider.calculate_sitemap_lastmod)
        return provider

    def test_miss_schedules_one_recompute(self, provider, scheduler):
        assert provider.get_sitemap_lastmod("page", 3) is None
        assert provider.get_sitemap_lastmod("page", 3) is None

        (job,) = scheduler.pending
        assert job.job_name == CALCULATE_LASTMOD_JOB
        assert job.args == ("posts", "page", 3)
        assert job.run_at == 500

    def test_recompute_stores_latest_timestamp(self, provider, scheduler):
        provider.get_sitemap_lastmod("page", 3)
        assert scheduler.run_pending(now=500) == 1

        # Page 3 of "page" holds object 7 only
        assert provider.get_sitemap_lastmod("page", 3) == BASE_TIME + timedelta(minutes=7)
        assert scheduler.pending == []

    def test_recompute_is_idempotent(self, provider, cache):
        provider.calculate_sitemap_lastmod("posts", "post", 2)
        first = cache.get("posts", "post", 2)
        provider.calculate_sitemap_lastmod("posts", "post", 2)
        second = cache.get("posts", "post", 2)

        assert first == second
        assert first.value == BASE_TIME + timedelta(minutes=6)

    def test_recompute_for_other_provider_is_ignored(self, provider, cache):
        provider.calculate_sitemap_lastmod("taxonomies", "post", 1)
        assert not cache.get("taxonomies", "post", 1).present
        assert not cache.get("posts", "post", 1).present

    def test_empty_page_stores_known_empty(self, provider, cache, scheduler):
        provider.calculate_sitemap_lastmod("posts", "post", 99)

        entry = cache.get("posts", "post", 99)
        assert entry.present
        assert entry.value is None

        # Known-empty is not rescheduled
        assert provider.get_sitemap_lastmod("post", 99) is None
        assert scheduler.pending == []

    def test_no_scheduling_inside_job(self, cache, scheduler):
        calls = []

        def job(name, sub_type, page):
            calls.append(cache.lookup(name, sub_type, page))

        scheduler.register("check_context", job)
        scheduler.schedule_once(0, "check_context", ("posts", "post", 1))
        scheduler.run_pending(now=0)

        assert calls == [None]
        assert scheduler.pending == []

    def test_entries_carry_cached_lastmod(self, provider, scheduler):
        provider.get_sitemap_entries()
        # 4 pages of posts + 3 pages of pages
        assert len(scheduler.pending) == 7

        scheduler.run_pending(now=float("inf"))
        entries = provider.get_sitemap_entries()

        assert entries[0].last_modified == BASE_TIME + timedelta(minutes=3)
        assert entries[3].last_modified == BASE_TIME + timedelta(minutes=10)
        assert scheduler.pending == []


class TestUsersProvider:

    def test_lists_authors_with_published_posts(self, populated_store, urls):
        users = UsersProvider(populated_store, urls)
        entries = users.get_url_list(1)

        assert [e.location for e in entries] == [
            f"{HOME}/author/alice/",
            f"{HOME}/author/bob/",
        ]
        assert all(e.last_modified is None for e in entries)

    def test_sub_type_is_ignored(self, populated_store, urls):
        users = UsersProvider(populated_store, urls)
        assert users.max_num_pages("post") == users.max_num_pages() == 1
        assert users.get_url_list(1, "post") == users.get_url_list(1)

    def test_never_schedules_lastmod(self, populated_store, urls):
        scheduler = QueueScheduler()
        cache = LastmodCache(populated_store, scheduler)
        users = UsersProvider(populated_store, urls, lastmod=cache)

        users.get_sitemap_entries()
        users.calculate_sitemap_lastmod("users", None, 1)

        assert scheduler.pending == []
        assert not cache.get("users", None, 1).present


class BooksProvider(SitemapProvider):
    name = "books"

    def build_query(self, sub_type):
        return ObjectQuery(ObjectType.POST, ("book",))


def test_custom_provider():
    provider = BooksProvider(CountingSource({"book": 3}), SitemapUrls(HOME), max_urls=2)

    assert provider.get_object_sub_types() == [NO_SUB_TYPE]
    assert provider.max_num_pages() == 2
    assert [e.location for e in provider.get_sitemap_entries()] == [
        f"{HOME}/sitemap-books-1.xml",
        f"{HOME}/sitemap-books-2.xml",
    ]


def test_provider_requires_name():
    class Nameless(SitemapProvider):
        def build_query(self, sub_type):
            return ObjectQuery(ObjectType.POST)

    with pytest.raises(ValueError):
        Nameless(CountingSource({}), SitemapUrls(HOME))
