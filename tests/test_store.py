"""Tests for storage backends."""

import tempfile
from datetime import datetime, timezone

import pytest

from sitemaps.errors import StoreError
from sitemaps.models import ObjectType, Post, SubType, User
from sitemaps.store import FileStore, ObjectQuery, SQLiteStore, StoreType, create_store


class TestStore:
    """Tests that run against both store implementations."""

    def test_options_roundtrip(self, store):
        """Test setting, overwriting and deleting options."""
        assert store.get_option("missing") is None

        store.set_option("sitemaps_lastmod_posts_post_1", "2024-01-01T00:00:00+00:00")
        assert store.get_option("sitemaps_lastmod_posts_post_1") == "2024-01-01T00:00:00+00:00"

        store.set_option("sitemaps_lastmod_posts_post_1", "")
        assert store.get_option("sitemaps_lastmod_posts_post_1") == ""

        store.delete_option("sitemaps_lastmod_posts_post_1")
        assert store.get_option("sitemaps_lastmod_posts_post_1") is None

        # Deleting a missing key is fine
        store.delete_option("never_set")

    def test_list_options_by_prefix(self, store):
        store.set_option("a_1", "x")
        store.set_option("a_2", "y")
        store.set_option("b_1", "z")

        assert store.list_options("a_") == {"a_1": "x", "a_2": "y"}
        assert len(store.list_options()) == 3

    def test_sub_types_in_registration_order(self, populated_store):
        names = [s.name for s in populated_store.list_sub_types(ObjectType.POST)]
        assert names == ["post", "page", "attachment", "revision"]

        taxonomies = populated_store.list_sub_types(ObjectType.TERM)
        assert [t.name for t in taxonomies] == ["category", "post_format"]
        assert taxonomies[1].public is False

        assert populated_store.list_sub_types(ObjectType.USER) == []

    def test_readding_sub_type_replaces_it(self, store):
        store.add_sub_type(ObjectType.POST, SubType("book", "Books"))
        store.add_sub_type(ObjectType.POST, SubType("book", "Library", public=False))

        (book,) = store.list_sub_types(ObjectType.POST)
        assert book.label == "Library"
        assert book.public is False

    def test_count_and_list_posts(self, populated_store):
        query = ObjectQuery(ObjectType.POST, ("post",))

        # The draft is not counted
        assert populated_store.count_objects(query) == 5

        objects = populated_store.list_objects(query, offset=0, limit=10)
        assert [o.identifier for o in objects] == [1, 2, 3, 4, 5]
        assert objects[0].location == "/hello-1/"
        assert objects[0].last_modified == datetime(2024, 1, 2, tzinfo=timezone.utc)

    def test_list_posts_is_paginated_by_id(self, store):
        store.add_sub_type(ObjectType.POST, SubType("post"))
        # Insert out of order
        for post_id in (5, 3, 9, 1, 7):
            store.add_post(Post(id=post_id, post_type="post", slug=f"p{post_id}"))

        query = ObjectQuery(ObjectType.POST, ("post",))
        first = store.list_objects(query, offset=0, limit=2)
        second = store.list_objects(query, offset=2, limit=2)
        third = store.list_objects(query, offset=4, limit=2)

        assert [o.identifier for o in first] == [1, 3]
        assert [o.identifier for o in second] == [5, 7]
        assert [o.identifier for o in third] == [9]
        assert store.list_objects(query, offset=6, limit=2) == []

    def test_custom_post_type_path(self, store):
        store.add_post(Post(id=1, post_type="book", slug="dune"))
        (obj,) = store.list_objects(ObjectQuery(ObjectType.POST, ("book",)), 0, 10)
        assert obj.location == "/book/dune/"

    def test_terms_hide_empty(self, populated_store):
        query = ObjectQuery(ObjectType.TERM, ("category",))

        assert populated_store.count_objects(query) == 2
        objects = populated_store.list_objects(query, 0, 10)
        assert [o.location for o in objects] == ["/category/news/", "/category/misc/"]
        assert objects[1].last_modified is None

    def test_users_with_published_posts(self, populated_store):
        # carol only has a draft and an attachment
        query = ObjectQuery(ObjectType.USER, ("post", "page"))

        assert populated_store.count_objects(query) == 2
        objects = populated_store.list_objects(query, 0, 10)
        assert [o.location for o in objects] == ["/author/alice/", "/author/bob/"]
        assert all(o.last_modified is None for o in objects)

    def test_empty_subtypes_match_nothing(self, populated_store):
        query = ObjectQuery(ObjectType.USER, ())
        assert populated_store.count_objects(query) == 0
        assert populated_store.list_objects(query, 0, 10) == []

    def test_replace_post(self, store):
        store.add_post(Post(id=1, post_type="post", slug="old"))
        store.add_post(Post(id=1, post_type="post", slug="new"))

        query = ObjectQuery(ObjectType.POST, ("post",))
        assert store.count_objects(query) == 1
        assert store.list_objects(query, 0, 10)[0].location == "/new/"


def test_sqlite_persists_across_connections():
    with tempfile.TemporaryDirectory() as tmpdir:
        with SQLiteStore(f"{tmpdir}/test.db") as store:
            store.set_option("key", "value")
            store.add_user(User(id=1, nicename="alice"))

        with SQLiteStore(f"{tmpdir}/test.db") as store:
            assert store.get_option("key") == "value"


def test_file_store_persists_across_instances():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = FileStore(tmpdir)
        store.add_sub_type(ObjectType.POST, SubType("post"))
        store.add_post(Post(id=1, post_type="post", slug="hello"))
        store.set_option("key", "value")
        store.close()

        reopened = FileStore(tmpdir)
        assert reopened.get_option("key") == "value"
        assert [s.name for s in reopened.list_sub_types(ObjectType.POST)] == ["post"]
        assert reopened.count_objects(ObjectQuery(ObjectType.POST, ("post",))) == 1


def test_file_store_rejects_corrupt_files():
    with tempfile.TemporaryDirectory() as tmpdir:
        with open(f"{tmpdir}/options.json", "w") as f:
            f.write("{not json")

        with pytest.raises(StoreError):
            FileStore(tmpdir)


def test_create_store():
    with tempfile.TemporaryDirectory() as tmpdir:
        sqlite_store = create_store(StoreType.SQLITE, f"{tmpdir}/data.db")
        assert isinstance(sqlite_store, SQLiteStore)
        sqlite_store.close()

        file_store = create_store(StoreType.FILE, f"{tmpdir}/files")
        assert isinstance(file_store, FileStore)
        file_store.close()


def test_store_type_from_config_name():
    assert StoreType.parse("sqlite") is StoreType.SQLITE
    assert StoreType.parse("FILE") is StoreType.FILE
    assert StoreType.parse(StoreType.FILE) is StoreType.FILE

    with pytest.raises(ValueError, match="expected one of sqlite, file"):
        StoreType.parse("redis")
