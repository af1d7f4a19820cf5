"""Shared fixtures."""

import tempfile
from datetime import datetime, timedelta, timezone

import pytest

from sitemaps.config import Config
from sitemaps.core import Sitemaps
from sitemaps.models import ContentObject, ObjectType, Post, SubType, Term, User
from sitemaps.scheduler import QueueScheduler
from sitemaps.store import FileStore, ObjectQuery, ObjectSource, SQLiteStore
from sitemaps.urls import SitemapUrls

HOME = "https://example.com"
BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


class CountingSource(ObjectSource):
    """Object source with N synthetic objects per sub-type, IDs 1..N.

    Object i was modified i minutes after BASE_TIME.
    """

    def __init__(self, counts: dict[str, int]):
        self.counts = counts
        self.list_calls = 0

    def count_objects(self, query: ObjectQuery) -> int:
        return sum(self.counts.get(s, 0) for s in query.subtypes)

    def list_objects(self, query: ObjectQuery, offset: int, limit: int) -> list[ContentObject]:
        self.list_calls += 1
        (sub_type,) = query.subtypes
        total = self.counts.get(sub_type, 0)
        return [
            ContentObject(i, f"/{sub_type}/{i}/", BASE_TIME + timedelta(minutes=i))
            for i in range(offset + 1, min(total, offset + limit) + 1)
        ]

    def list_sub_types(self, object_type: ObjectType) -> list[SubType]:
        return [SubType(name=name) for name in self.counts]


@pytest.fixture
def urls():
    return SitemapUrls(HOME)


@pytest.fixture
def sqlite_store():
    """Create a temporary SQLite store."""
    with tempfile.TemporaryDirectory() as tmpdir:
        store = SQLiteStore(f"{tmpdir}/test.db")
        yield store
        store.close()


@pytest.fixture
def file_store():
    """Create a temporary file store."""
    with tempfile.TemporaryDirectory() as tmpdir:
        store = FileStore(tmpdir)
        yield store
        store.close()


@pytest.fixture(params=["sqlite", "file"])
def store(request, sqlite_store, file_store):
    """Parameterized fixture that runs tests against both stores."""
    if request.param == "sqlite":
        return sqlite_store
    return file_store


def populate(store) -> None:
    """A small site: two authors, posts, pages, an attachment, categories."""
    store.add_sub_type(ObjectType.POST, SubType("post", "Posts"))
    store.add_sub_type(ObjectType.POST, SubType("page", "Pages"))
    store.add_sub_type(ObjectType.POST, SubType("attachment", "Media"))
    store.add_sub_type(ObjectType.POST, SubType("revision", "Revisions", public=False))
    store.add_sub_type(ObjectType.TERM, SubType("category", "Categories"))
    store.add_sub_type(ObjectType.TERM, SubType("post_format", "Formats", public=False))

    store.add_user(User(id=1, nicename="alice"))
    store.add_user(User(id=2, nicename="bob"))
    store.add_user(User(id=3, nicename="carol"))

    for i in range(1, 6):
        store.add_post(Post(
            id=i,
            post_type="post",
            slug=f"hello-{i}",
            author_id=1,
            modified_at=BASE_TIME + timedelta(days=i),
        ))
    store.add_post(Post(id=6, post_type="post", slug="draft", author_id=3, status="draft",
                        modified_at=BASE_TIME + timedelta(days=30)))
    store.add_post(Post(id=7, post_type="page", slug="about", author_id=2,
                        modified_at=BASE_TIME + timedelta(days=2)))
    store.add_post(Post(id=8, post_type="attachment", slug="photo", author_id=3,
                        modified_at=BASE_TIME + timedelta(days=40)))

    store.add_term(Term(id=1, taxonomy="category", slug="news", count=3,
                        modified_at=BASE_TIME + timedelta(days=4)))
    store.add_term(Term(id=2, taxonomy="category", slug="empty", count=0))
    store.add_term(Term(id=3, taxonomy="category", slug="misc", count=1))


@pytest.fixture
def populated_store(store):
    populate(store)
    return store


@pytest.fixture
def scheduler():
    return QueueScheduler(clock=lambda: 1000.0)


@pytest.fixture
def config():
    return Config(home_url=HOME, max_urls=2)


@pytest.fixture
def sitemaps(config, sqlite_store, scheduler):
    """Initialized Sitemaps over a populated SQLite store, two URLs per page."""
    populate(sqlite_store)
    return Sitemaps(config, sqlite_store, scheduler).init()
