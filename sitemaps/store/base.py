"""Abstract base classes for storage backends.

Two capabilities are kept apart so the sitemap core can depend on exactly
what it uses:

- ObjectSource: counts and lists content objects, paginated and ordered.
- OptionStore: a flat key/value settings table (used for lastmod caching).

Store combines both and adds the write side used to populate content.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from sitemaps.models import ContentObject, ObjectType, Post, SubType, Term, User


@dataclass(frozen=True)
class ObjectQuery:
    """Filter for counting and listing content objects.

    For POST, ``subtypes`` are post types; for TERM they are taxonomies.
    For USER they are the post types an author must have published in.
    """
    object_type: ObjectType
    subtypes: tuple[str, ...] = ()
    status: str = "publish"


class ObjectSource(ABC):
    """Read-only access to content, as consumed by sitemap providers."""

    @abstractmethod
    def count_objects(self, query: ObjectQuery) -> int:
        """Count objects matching the query."""
        pass

    @abstractmethod
    def list_objects(self, query: ObjectQuery, offset: int, limit: int) -> list[ContentObject]:
        """List objects matching the query, ordered by identifier ascending."""
        pass

    @abstractmethod
    def list_sub_types(self, object_type: ObjectType) -> list[SubType]:
        """List registered sub-types (post types, taxonomies) for an object type."""
        pass


class OptionStore(ABC):
    """Key/value settings persistence."""

    @abstractmethod
    def get_option(self, key: str) -> str | None:
        """Get an option value, or None if the key was never set."""
        pass

    @abstractmethod
    def set_option(self, key: str, value: str) -> None:
        """Set an option value, overwriting any previous one."""
        pass

    @abstractmethod
    def delete_option(self, key: str) -> None:
        """Delete an option. Missing keys are ignored."""
        pass

    @abstractmethod
    def list_options(self, prefix: str = "") -> dict[str, str]:
        """List options whose key starts with prefix."""
        pass


class Store(ObjectSource, OptionStore):
    """Abstract persistence layer for content and settings."""

    # Content
    @abstractmethod
    def add_sub_type(self, object_type: ObjectType, sub_type: SubType) -> None:
        """Register a post type or taxonomy. Re-adding replaces it."""
        pass

    @abstractmethod
    def add_post(self, post: Post) -> None:
        """Insert or replace a post by ID."""
        pass

    @abstractmethod
    def add_term(self, term: Term) -> None:
        """Insert or replace a term by ID."""
        pass

    @abstractmethod
    def add_user(self, user: User) -> None:
        """Insert or replace a user by ID."""
        pass

    # Lifecycle
    @abstractmethod
    def close(self) -> None:
        """Close the store and release resources."""
        pass

    def __enter__(self) -> "Store":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
