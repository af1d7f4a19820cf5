"""Store module - persistence layer for sitemaps."""

from sitemaps.store.base import ObjectQuery, ObjectSource, OptionStore, Store
from sitemaps.store.sqlite import SQLiteStore
from sitemaps.store.file import FileStore
from sitemaps.store.factory import StoreType, create_store

__all__ = [
    "ObjectQuery",
    "ObjectSource",
    "OptionStore",
    "Store",
    "SQLiteStore",
    "FileStore",
    "StoreType",
    "create_store",
]
