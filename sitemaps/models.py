"""Core data models for sitemaps."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class ObjectType(Enum):
    """Kind of content object a provider enumerates."""
    POST = "post"
    TERM = "term"
    USER = "user"


@dataclass(frozen=True)
class SitemapEntry:
    """A single <url> or <sitemap> entry.

    Used both for content URLs inside a leaf sitemap and for the
    per-page entries that make up the index.
    """
    location: str
    last_modified: datetime | None = None


@dataclass(frozen=True)
class SubType:
    """A named partition of a category's content (a post type, a taxonomy)."""
    name: str
    label: str = ""
    public: bool = True

    def __bool__(self) -> bool:
        return bool(self.name)


# Marker for categories without partitioning. Iterating it yields exactly one
# pass with no sub-type segment, which keeps index building uniform.
NO_SUB_TYPE = SubType(name="")


@dataclass(frozen=True)
class ContentObject:
    """What an object source returns when listing content."""
    identifier: int
    location: str                 # Site-relative permalink path
    last_modified: datetime | None = None


@dataclass
class Post:
    """A content document."""
    id: int
    post_type: str
    slug: str
    path: str = ""
    author_id: int | None = None
    status: str = "publish"       # "publish", "draft", "private", ...
    modified_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if not self.path:
            if self.post_type in ("post", "page"):
                self.path = f"/{self.slug}/"
            else:
                self.path = f"/{self.post_type}/{self.slug}/"


@dataclass
class Term:
    """A taxonomy term."""
    id: int
    taxonomy: str
    slug: str
    path: str = ""
    count: int = 0                # Number of objects attached to the term
    modified_at: datetime | None = None

    def __post_init__(self) -> None:
        if not self.path:
            self.path = f"/{self.taxonomy}/{self.slug}/"


@dataclass
class User:
    """A site author."""
    id: int
    nicename: str
    display_name: str = ""
    path: str = ""

    def __post_init__(self) -> None:
        if not self.path:
            self.path = f"/author/{self.nicename}/"
        if not self.display_name:
            self.display_name = self.nicename
