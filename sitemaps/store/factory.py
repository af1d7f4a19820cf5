"""Backend selection for the sitemaps store."""

import logging
from enum import Enum

from sitemaps.store.base import Store

logger = logging.getLogger(__name__)


class StoreType(Enum):
    """Storage backends, by the name used in config files."""
    SQLITE = "sqlite"
    FILE = "file"

    @classmethod
    def parse(cls, value: "StoreType | str") -> "StoreType":
        """Accept an enum member or its config name."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            choices = ", ".join(t.value for t in cls)
            raise ValueError(f"Unknown store type: {value!r} (expected one of {choices})") from None


def create_store(store_type: StoreType | str, path: str) -> Store:
    """Open the content and option store for a site.

    ``path`` is the database file for SQLite and the data directory for
    the file backend. Both are created when missing.
    """
    # Backends import models and errors; keep them out of package import time
    from sitemaps.store.file import FileStore
    from sitemaps.store.sqlite import SQLiteStore

    store_type = StoreType.parse(store_type)
    match store_type:
        case StoreType.SQLITE:
            store: Store = SQLiteStore(path)
        case StoreType.FILE:
            store = FileStore(path)

    logger.debug(f"Opened {store_type.value} store at {path}")
    return store
