"""Queries against the SQLite database holding users, feeds, follows and posts."""

from __future__ import annotations

import sqlite3
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone

from .models import Feed, FeedFollowRow, Post, User

_SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    name TEXT NOT NULL UNIQUE
);
CREATE TABLE IF NOT EXISTS feeds (
    id TEXT PRIMARY KEY,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    name TEXT NOT NULL,
    url TEXT NOT NULL UNIQUE,
    user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    last_fetched_at TEXT
);
CREATE TABLE IF NOT EXISTS feed_follows (
    id TEXT PRIMARY KEY,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    feed_id TEXT NOT NULL REFERENCES feeds(id) ON DELETE CASCADE,
    UNIQUE (user_id, feed_id)
);
CREATE TABLE IF NOT EXISTS posts (
    id TEXT PRIMARY KEY,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    published_at TEXT NOT NULL,
    title TEXT NOT NULL,
    url TEXT NOT NULL UNIQUE,
    description TEXT,
    feed_id TEXT NOT NULL REFERENCES feeds(id) ON DELETE CASCADE
);
"""

_USER_COLUMNS = "id, created_at, updated_at, name"
_FEED_COLUMNS = "id, created_at, updated_at, name, url, user_id, last_fetched_at"
_POST_COLUMNS = (
    "posts.id, posts.created_at, posts.updated_at, posts.published_at, "
    "posts.title, posts.url, posts.description, posts.feed_id"
)
_FOLLOW_ROW_SELECT = """
SELECT feed_follows.id, feed_follows.created_at, feed_follows.updated_at,
       feed_follows.user_id, feed_follows.feed_id,
       feeds.name AS feed_name, users.name AS user_name
FROM feed_follows
INNER JOIN users ON feed_follows.user_id = users.id
INNER JOIN feeds ON feed_follows.feed_id = feeds.id
"""


class NoRowsError(LookupError):
    """A query that must return one row returned none."""


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _store_time(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f+00:00")


def _load_time(text: str | None) -> datetime | None:
    return datetime.fromisoformat(text) if text is not None else None


def _user(row: sqlite3.Row) -> User:
    return User(
        id=uuid.UUID(row["id"]),
        created_at=_load_time(row["created_at"]),
        updated_at=_load_time(row["updated_at"]),
        name=row["name"],
    )


def _feed(row: sqlite3.Row) -> Feed:
    return Feed(
        id=uuid.UUID(row["id"]),
        created_at=_load_time(row["created_at"]),
        updated_at=_load_time(row["updated_at"]),
        name=row["name"],
        url=row["url"],
        user_id=uuid.UUID(row["user_id"]),
        last_fetched_at=_load_time(row["last_fetched_at"]),
    )


def _follow_row(row: sqlite3.Row) -> FeedFollowRow:
    return FeedFollowRow(
        id=uuid.UUID(row["id"]),
        created_at=_load_time(row["created_at"]),
        updated_at=_load_time(row["updated_at"]),
        user_id=uuid.UUID(row["user_id"]),
        feed_id=uuid.UUID(row["feed_id"]),
        feed_name=row["feed_name"],
        user_name=row["user_name"],
    )


def _post(row: sqlite3.Row) -> Post:
    return Post(
        id=uuid.UUID(row["id"]),
        created_at=_load_time(row["created_at"]),
        updated_at=_load_time(row["updated_at"]),
        published_at=_load_time(row["published_at"]),
        title=row["title"],
        url=row["url"],
        description=row["description"],
        feed_id=uuid.UUID(row["feed_id"]),
    )


class Queries:
    """Typed queries over one SQLite connection."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        connection.isolation_level = None
        connection.row_factory = sqlite3.Row
        connection.execute("PRAGMA foreign_keys = ON")
        self._conn = connection

    def __enter__(self) -> Queries:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def create_schema(self) -> None:
        """Create the tables if they do not exist yet."""
        self._conn.executescript(_SCHEMA)

    @contextmanager
    def transaction(self) -> Iterator[Queries]:
        """Run the enclosed queries as one transaction, rolling back on error."""
        self._conn.execute("BEGIN")
        try:
            yield self
        except BaseException:
            self._conn.execute("ROLLBACK")
            raise
        self._conn.execute("COMMIT")

    def close(self) -> None:
        self._conn.close()

    def _one(self, sql: str, params: tuple = ()) -> sqlite3.Row:
        row = self._conn.execute(sql, params).fetchone()
        if row is None:
            raise NoRowsError("no rows in result set")
        return row

    def _many(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        return self._conn.execute(sql, params).fetchall()

    # users

    def create_user(self, id: uuid.UUID, created_at: datetime, updated_at: datetime, name: str) -> User:
        self._conn.execute(
            "INSERT INTO users (id, created_at, updated_at, name) VALUES (?, ?, ?, ?)",
            (str(id), _store_time(created_at), _store_time(updated_at), name),
        )
        return self.get_user_by_id(id)

    def get_user(self, name: str) -> User:
        return _user(self._one(f"SELECT {_USER_COLUMNS} FROM users WHERE name = ?", (name,)))

    def get_user_by_id(self, id: uuid.UUID) -> User:
        return _user(self._one(f"SELECT {_USER_COLUMNS} FROM users WHERE id = ?", (str(id),)))

    def get_user_by_name(self, name: str) -> User:
        return self.get_user(name)

    def get_all_users(self) -> list[User]:
        return [_user(row) for row in self._many(f"SELECT {_USER_COLUMNS} FROM users")]

    def delete_all_users(self) -> None:
        self._conn.execute("DELETE FROM users")

    # feeds

    def add_feed(self, name: str, url: str, user_id: uuid.UUID) -> Feed:
        feed_id = uuid.uuid4()
        now = _store_time(_now())
        self._conn.execute(
            "INSERT INTO feeds (id, created_at, updated_at, name, url, user_id) VALUES (?, ?, ?, ?, ?, ?)",
            (str(feed_id), now, now, name, url, str(user_id)),
        )
        return _feed(self._one(f"SELECT {_FEED_COLUMNS} FROM feeds WHERE id = ?", (str(feed_id),)))

    def get_all_feeds(self) -> list[Feed]:
        return [_feed(row) for row in self._many(f"SELECT {_FEED_COLUMNS} FROM feeds")]

    def get_feed_by_url(self, url: str) -> Feed:
        return _feed(self._one(f"SELECT {_FEED_COLUMNS} FROM feeds WHERE url = ?", (url,)))

    def get_next_feed_to_fetch(self) -> Feed:
        """Return the feed fetched longest ago, never-fetched feeds first."""
        return _feed(
            self._one(
                f"SELECT {_FEED_COLUMNS} FROM feeds "
                "ORDER BY last_fetched_at IS NOT NULL, last_fetched_at ASC LIMIT 1"
            )
        )

    def mark_feed_fetched(self, id: uuid.UUID) -> None:
        now = _store_time(_now())
        self._conn.execute(
            "UPDATE feeds SET last_fetched_at = ?, updated_at = ? WHERE id = ?",
            (now, now, str(id)),
        )

    # feed follows

    def add_feed_follow(self, user_id: uuid.UUID, feed_id: uuid.UUID) -> FeedFollowRow:
        follow_id = uuid.uuid4()
        now = _store_time(_now())
        self._conn.execute(
            "INSERT INTO feed_follows (id, created_at, updated_at, user_id, feed_id) VALUES (?, ?, ?, ?, ?)",
            (str(follow_id), now, now, str(user_id), str(feed_id)),
        )
        return _follow_row(self._one(_FOLLOW_ROW_SELECT + "WHERE feed_follows.id = ?", (str(follow_id),)))

    def delete_feed_follow(self, user_id: uuid.UUID, feed_id: uuid.UUID) -> None:
        self._conn.execute(
            "DELETE FROM feed_follows WHERE user_id = ? AND feed_id = ?",
            (str(user_id), str(feed_id)),
        )

    def get_feed_follows_for_user(self, user_id: uuid.UUID) -> list[FeedFollowRow]:
        rows = self._many(_FOLLOW_ROW_SELECT + "WHERE feed_follows.user_id = ?", (str(user_id),))
        return [_follow_row(row) for row in rows]

    # posts

    def add_post(
        self,
        feed_id: uuid.UUID,
        title: str,
        url: str,
        description: str | None,
        published_at: datetime,
    ) -> Post:
        post_id = uuid.uuid4()
        now = _store_time(_now())
        self._conn.execute(
            "INSERT INTO posts (id, created_at, updated_at, feed_id, title, url, description, published_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            (str(post_id), now, now, str(feed_id), title, url, description, _store_time(published_at)),
        )
        return _post(self._one(f"SELECT {_POST_COLUMNS} FROM posts WHERE id = ?", (str(post_id),)))

    def get_posts_for_user(self, user_id: uuid.UUID, limit: int) -> list[Post]:
        """Return the newest posts from feeds the user follows, at most *limit*."""
        if limit < 0:
            raise ValueError("LIMIT must not be negative")
        rows = self._many(
            f"SELECT {_POST_COLUMNS} FROM feed_follows "
            "INNER JOIN posts ON feed_follows.feed_id = posts.feed_id "
            "WHERE feed_follows.user_id = ? "
            "ORDER BY posts.published_at DESC LIMIT ?",
            (str(user_id), limit),
        )
        return [_post(row) for row in rows]


def _resolve(db_url: str) -> tuple[str, bool]:
    if db_url.startswith("sqlite://"):
        rest = db_url[len("sqlite://"):]
        if rest in ("", "/"):
            return ":memory:", False
        return (rest[1:] if rest.startswith("/") else rest), False
    if db_url.startswith("file:"):
        return db_url, True
    if "://" in db_url:
        raise ValueError(f"unsupported database URL '{db_url}'")
    return db_url, False


def connect(db_url: str) -> Queries:
    """Open the database at *db_url* and make sure its tables exist.

    Accepts a file path, ':memory:', a 'sqlite:///path' URL or a 'file:' URI.
    """
    target, uri = _resolve(db_url)
    queries = Queries(sqlite3.connect(target, uri=uri, isolation_level=None))
    queries.create_schema()
    return queries