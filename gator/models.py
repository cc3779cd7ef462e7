"""Records stored in the gator database."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone


def _format_time(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    text = moment.strftime("%Y-%m-%d %H:%M:%S")
    if moment.microsecond:
        text += "." + f"{moment.microsecond:06d}".rstrip("0")
    offset = moment.strftime("%z")
    name = moment.tzname() or offset
    if name != "UTC" and name.startswith("UTC"):
        name = offset
    return f"{text} {offset} {name}"


@dataclass(frozen=True)
class User:
    id: uuid.UUID
    created_at: datetime
    updated_at: datetime
    name: str

    def __str__(self) -> str:
        return (
            f"database.User {{ ID: {self.id}, Name: {self.name}, "
            f"CreatedAt: {_format_time(self.created_at)}, "
            f"UpdatedAt: {_format_time(self.updated_at)} }}"
        )


@dataclass(frozen=True)
class Feed:
    id: uuid.UUID
    created_at: datetime
    updated_at: datetime
    name: str
    url: str
    user_id: uuid.UUID
    last_fetched_at: datetime | None = None

    def __str__(self) -> str:
        return (
            f"database.Feed {{ ID: {self.id}, Name: {self.name}, Url: {self.url}, "
            f"UserID: {self.user_id}, CreatedAt: {_format_time(self.created_at)}, "
            f"UpdatedAt: {_format_time(self.updated_at)} }}"
        )


@dataclass(frozen=True)
class FeedFollow:
    id: uuid.UUID
    created_at: datetime
    updated_at: datetime
    user_id: uuid.UUID
    feed_id: uuid.UUID

    def __str__(self) -> str:
        return (
            f"database.FeedFollow {{ ID: {self.id}, FeedID: {self.feed_id}, "
            f"UserID: {self.user_id}, CreatedAt: {_format_time(self.created_at)}, "
            f"UpdatedAt: {_format_time(self.updated_at)} }}"
        )


@dataclass(frozen=True)
class FeedFollowRow:
    """A feed follow joined with the names of its feed and user."""

    id: uuid.UUID
    created_at: datetime
    updated_at: datetime
    user_id: uuid.UUID
    feed_id: uuid.UUID
    feed_name: str
    user_name: str

    def __str__(self) -> str:
        return (
            f"database.FeedFollow {{ ID: {self.id}, FeedID: {self.feed_id}, "
            f"FeedName: {self.feed_name}, UserID: {self.user_id}, "
            f"UserName: {self.user_name}, CreatedAt: {_format_time(self.created_at)}, "
            f"UpdatedAt: {_format_time(self.updated_at)} }}"
        )


@dataclass(frozen=True)
class Post:
    id: uuid.UUID
    created_at: datetime
    updated_at: datetime
    published_at: datetime
    title: str
    url: str
    description: str | None
    feed_id: uuid.UUID

    def __str__(self) -> str:
        description = self.description if self.description is not None else ""
        return (
            f"| Post Title: \t\t\t{self.title}\n"
            f"| Post Description: \t\t{description}\n"
            f"| Post Date: \t\t\t{_format_time(self.published_at)}\n"
            f"| Post Link: \t\t\t{self.url}"
        )