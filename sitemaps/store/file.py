"""JSON file-based storage backend."""

import json
from datetime import datetime
from pathlib import Path
from typing import Any

from sitemaps.errors import StoreError
from sitemaps.models import ContentObject, ObjectType, Post, SubType, Term, User
from sitemaps.store.base import ObjectQuery, Store


def _datetime_to_str(dt: datetime) -> str:
    """Convert datetime to ISO format string."""
    return dt.isoformat()


def _str_to_datetime(s: str) -> datetime:
    """Parse ISO format string to datetime."""
    return datetime.fromisoformat(s)


def _post_to_dict(post: Post) -> dict[str, Any]:
    return {
        "id": post.id,
        "post_type": post.post_type,
        "slug": post.slug,
        "path": post.path,
        "author_id": post.author_id,
        "status": post.status,
        "modified_at": _datetime_to_str(post.modified_at),
    }


def _dict_to_post(d: dict[str, Any]) -> Post:
    return Post(
        id=d["id"],
        post_type=d["post_type"],
        slug=d["slug"],
        path=d.get("path", ""),
        author_id=d.get("author_id"),
        status=d.get("status", "publish"),
        modified_at=_str_to_datetime(d["modified_at"]),
    )


def _term_to_dict(term: Term) -> dict[str, Any]:
    return {
        "id": term.id,
        "taxonomy": term.taxonomy,
        "slug": term.slug,
        "path": term.path,
        "count": term.count,
        "modified_at": _datetime_to_str(term.modified_at) if term.modified_at else None,
    }


def _dict_to_term(d: dict[str, Any]) -> Term:
    return Term(
        id=d["id"],
        taxonomy=d["taxonomy"],
        slug=d["slug"],
        path=d.get("path", ""),
        count=d.get("count", 0),
        modified_at=_str_to_datetime(d["modified_at"]) if d.get("modified_at") else None,
    )


def _user_to_dict(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "nicename": user.nicename,
        "display_name": user.display_name,
        "path": user.path,
    }


def _dict_to_user(d: dict[str, Any]) -> User:
    return User(
        id=d["id"],
        nicename=d["nicename"],
        display_name=d.get("display_name", ""),
        path=d.get("path", ""),
    )


class FileStore(Store):
    """JSON file-backed store. Simple, inspectable, good for testing."""

    def __init__(self, data_dir: str):
        self.data_dir = Path(data_dir).expanduser()
        self.options_file = self.data_dir / "options.json"
        self.sub_types_file = self.data_dir / "sub_types.json"
        self.posts_file = self.data_dir / "posts.json"
        self.terms_file = self.data_dir / "terms.json"
        self.users_file = self.data_dir / "users.json"

        self._options: dict[str, str] = {}
        self._sub_types: dict[ObjectType, dict[str, SubType]] = {t: {} for t in ObjectType}
        self._posts: dict[int, Post] = {}
        self._terms: dict[int, Term] = {}
        self._users: dict[int, User] = {}
        self._load()

    def _read(self, path: Path) -> Any:
        try:
            return json.loads(path.read_text())
        except json.JSONDecodeError as e:
            raise StoreError(f"Corrupt data file {path}: {e}") from e

    def _load(self) -> None:
        """Load data from JSON files."""
        if self.options_file.exists():
            self._options = dict(self._read(self.options_file))

        if self.sub_types_file.exists():
            data = self._read(self.sub_types_file)
            for type_value, entries in data.items():
                self._sub_types[ObjectType(type_value)] = {
                    e["name"]: SubType(name=e["name"], label=e.get("label", ""), public=e.get("public", True))
                    for e in entries
                }

        if self.posts_file.exists():
            self._posts = {p["id"]: _dict_to_post(p) for p in self._read(self.posts_file)}

        if self.terms_file.exists():
            self._terms = {t["id"]: _dict_to_term(t) for t in self._read(self.terms_file)}

        if self.users_file.exists():
            self._users = {u["id"]: _dict_to_user(u) for u in self._read(self.users_file)}

    def _save(self) -> None:
        """Persist data to JSON files."""
        self.data_dir.mkdir(parents=True, exist_ok=True)

        self.options_file.write_text(json.dumps(self._options, indent=2, sort_keys=True))

        sub_types_data = {
            t.value: [
                {"name": s.name, "label": s.label, "public": s.public}
                for s in entries.values()
            ]
            for t, entries in self._sub_types.items()
        }
        self.sub_types_file.write_text(json.dumps(sub_types_data, indent=2))

        posts_data = [_post_to_dict(p) for p in self._posts.values()]
        self.posts_file.write_text(json.dumps(posts_data, indent=2))

        terms_data = [_term_to_dict(t) for t in self._terms.values()]
        self.terms_file.write_text(json.dumps(terms_data, indent=2))

        users_data = [_user_to_dict(u) for u in self._users.values()]
        self.users_file.write_text(json.dumps(users_data, indent=2))

    def _matching(self, query: ObjectQuery) -> list[ContentObject]:
        """All objects matching a query, ordered by ID."""
        subtypes = set(query.subtypes)

        match query.object_type:
            case ObjectType.POST:
                objects = [
                    ContentObject(p.id, p.path, p.modified_at)
                    for p in self._posts.values()
                    if p.post_type in subtypes and p.status == query.status
                ]
            case ObjectType.TERM:
                objects = [
                    ContentObject(t.id, t.path, t.modified_at)
                    for t in self._terms.values()
                    if t.taxonomy in subtypes and t.count > 0
                ]
            case ObjectType.USER:
                authors = {
                    p.author_id
                    for p in self._posts.values()
                    if p.post_type in subtypes and p.status == query.status
                }
                objects = [
                    ContentObject(u.id, u.path, None)
                    for u in self._users.values()
                    if u.id in authors
                ]
            case _:
                raise ValueError(f"Unknown object type: {query.object_type}")

        return sorted(objects, key=lambda o: o.identifier)

    # Object source

    def count_objects(self, query: ObjectQuery) -> int:
        return len(self._matching(query))

    def list_objects(self, query: ObjectQuery, offset: int, limit: int) -> list[ContentObject]:
        return self._matching(query)[offset:offset + limit]

    def list_sub_types(self, object_type: ObjectType) -> list[SubType]:
        return list(self._sub_types[object_type].values())

    # Options

    def get_option(self, key: str) -> str | None:
        return self._options.get(key)

    def set_option(self, key: str, value: str) -> None:
        self._options[key] = value
        self._save()

    def delete_option(self, key: str) -> None:
        if self._options.pop(key, None) is not None:
            self._save()

    def list_options(self, prefix: str = "") -> dict[str, str]:
        return {k: v for k, v in sorted(self._options.items()) if k.startswith(prefix)}

    # Content

    def add_sub_type(self, object_type: ObjectType, sub_type: SubType) -> None:
        self._sub_types[object_type][sub_type.name] = sub_type
        self._save()

    def add_post(self, post: Post) -> None:
        self._posts[post.id] = post
        self._save()

    def add_term(self, term: Term) -> None:
        self._terms[term.id] = term
        self._save()

    def add_user(self, user: User) -> None:
        self._users[user.id] = user
        self._save()

    def close(self) -> None:
        """Save and close."""
        self._save()
