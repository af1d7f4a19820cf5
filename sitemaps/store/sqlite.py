"""SQLite storage backend."""

import sqlite3
from datetime import datetime
from pathlib import Path

from sitemaps.models import ContentObject, ObjectType, Post, SubType, Term, User
from sitemaps.store.base import ObjectQuery, Store


SCHEMA = """
CREATE TABLE IF NOT EXISTS options (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS sub_types (
    object_type TEXT NOT NULL,
    name TEXT NOT NULL,
    label TEXT,
    public INTEGER DEFAULT 1,
    PRIMARY KEY (object_type, name)
);

CREATE TABLE IF NOT EXISTS posts (
    id INTEGER PRIMARY KEY,
    post_type TEXT NOT NULL,
    slug TEXT NOT NULL,
    path TEXT NOT NULL,
    author_id INTEGER REFERENCES users(id),
    status TEXT NOT NULL DEFAULT 'publish',
    modified_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_posts_type_status ON posts(post_type, status, id);
CREATE INDEX IF NOT EXISTS idx_posts_author ON posts(author_id);

CREATE TABLE IF NOT EXISTS terms (
    id INTEGER PRIMARY KEY,
    taxonomy TEXT NOT NULL,
    slug TEXT NOT NULL,
    path TEXT NOT NULL,
    count INTEGER DEFAULT 0,
    modified_at TEXT
);

CREATE INDEX IF NOT EXISTS idx_terms_taxonomy ON terms(taxonomy, id);

CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY,
    nicename TEXT NOT NULL UNIQUE,
    display_name TEXT NOT NULL,
    path TEXT NOT NULL
);
"""


def _datetime_to_str(dt: datetime) -> str:
    """Convert datetime to ISO format string."""
    return dt.isoformat()


def _str_to_datetime(s: str) -> datetime:
    """Parse ISO format string to datetime."""
    return datetime.fromisoformat(s)


def _placeholders(values: tuple) -> str:
    return ", ".join("?" for _ in values)


class SQLiteStore(Store):
    """SQLite-backed store."""

    def __init__(self, db_path: str):
        self.db_path = Path(db_path).expanduser()
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._init_schema()

    def _init_schema(self) -> None:
        """Create tables if they don't exist."""
        self._conn.executescript(SCHEMA)
        self._conn.commit()

    def _where(self, query: ObjectQuery) -> tuple[str, str, list]:
        """Build (select columns + from, where clause, params) for a query.

        An empty subtypes tuple matches nothing.
        """
        subtypes = query.subtypes or ("",)
        params: list = list(subtypes)

        match query.object_type:
            case ObjectType.POST:
                source = "SELECT id, path, modified_at FROM posts"
                where = f"WHERE post_type IN ({_placeholders(subtypes)}) AND status = ?"
                params.append(query.status)
            case ObjectType.TERM:
                source = "SELECT id, path, modified_at FROM terms"
                where = f"WHERE taxonomy IN ({_placeholders(subtypes)}) AND count > 0"
            case ObjectType.USER:
                source = "SELECT id, path, NULL AS modified_at FROM users"
                where = (
                    "WHERE EXISTS (SELECT 1 FROM posts WHERE posts.author_id = users.id "
                    f"AND posts.post_type IN ({_placeholders(subtypes)}) AND posts.status = ?)"
                )
                params.append(query.status)
            case _:
                raise ValueError(f"Unknown object type: {query.object_type}")

        return source, where, params

    # Object source

    def count_objects(self, query: ObjectQuery) -> int:
        """Count objects matching the query."""
        source, where, params = self._where(query)
        cursor = self._conn.execute(f"SELECT COUNT(*) FROM ({source} {where})", params)
        return cursor.fetchone()[0]

    def list_objects(self, query: ObjectQuery, offset: int, limit: int) -> list[ContentObject]:
        """List objects ordered by ID ascending."""
        source, where, params = self._where(query)
        cursor = self._conn.execute(
            f"{source} {where} ORDER BY id ASC LIMIT ? OFFSET ?",
            params + [limit, offset],
        )
        return [
            ContentObject(
                identifier=row["id"],
                location=row["path"],
                last_modified=_str_to_datetime(row["modified_at"]) if row["modified_at"] else None,
            )
            for row in cursor.fetchall()
        ]

    def list_sub_types(self, object_type: ObjectType) -> list[SubType]:
        """List registered sub-types in registration order."""
        cursor = self._conn.execute(
            "SELECT name, label, public FROM sub_types WHERE object_type = ? ORDER BY rowid",
            (object_type.value,),
        )
        return [
            SubType(name=row["name"], label=row["label"] or "", public=bool(row["public"]))
            for row in cursor.fetchall()
        ]

    # Options

    def get_option(self, key: str) -> str | None:
        """Get an option value."""
        cursor = self._conn.execute("SELECT value FROM options WHERE key = ?", (key,))
        row = cursor.fetchone()
        return row["value"] if row else None

    def set_option(self, key: str, value: str) -> None:
        """Set an option value."""
        self._conn.execute(
            "INSERT INTO options (key, value) VALUES (?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
            (key, value),
        )
        self._conn.commit()

    def delete_option(self, key: str) -> None:
        """Delete an option."""
        self._conn.execute("DELETE FROM options WHERE key = ?", (key,))
        self._conn.commit()

    def list_options(self, prefix: str = "") -> dict[str, str]:
        """List options by key prefix."""
        cursor = self._conn.execute(
            "SELECT key, value FROM options WHERE substr(key, 1, ?) = ? ORDER BY key",
            (len(prefix), prefix),
        )
        return {row["key"]: row["value"] for row in cursor.fetchall()}

    # Content

    def add_sub_type(self, object_type: ObjectType, sub_type: SubType) -> None:
        """Register a post type or taxonomy."""
        self._conn.execute(
            """
            INSERT INTO sub_types (object_type, name, label, public) VALUES (?, ?, ?, ?)
            ON CONFLICT(object_type, name) DO UPDATE SET
                label = excluded.label, public = excluded.public
            """,
            (object_type.value, sub_type.name, sub_type.label, int(sub_type.public)),
        )
        self._conn.commit()

    def add_post(self, post: Post) -> None:
        """Insert or replace a post."""
        self._conn.execute(
            """
            INSERT OR REPLACE INTO posts
                (id, post_type, slug, path, author_id, status, modified_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                post.id,
                post.post_type,
                post.slug,
                post.path,
                post.author_id,
                post.status,
                _datetime_to_str(post.modified_at),
            ),
        )
        self._conn.commit()

    def add_term(self, term: Term) -> None:
        """Insert or replace a term."""
        self._conn.execute(
            """
            INSERT OR REPLACE INTO terms (id, taxonomy, slug, path, count, modified_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                term.id,
                term.taxonomy,
                term.slug,
                term.path,
                term.count,
                _datetime_to_str(term.modified_at) if term.modified_at else None,
            ),
        )
        self._conn.commit()

    def add_user(self, user: User) -> None:
        """Insert or replace a user."""
        self._conn.execute(
            "INSERT OR REPLACE INTO users (id, nicename, display_name, path) VALUES (?, ?, ?, ?)",
            (user.id, user.nicename, user.display_name, user.path),
        )
        self._conn.commit()

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()
