"""Command handlers for feeds, follows and scraping."""

from __future__ import annotations

import re
import sqlite3
import time
from collections.abc import Callable
from datetime import timedelta
from urllib.parse import urlsplit

from .commands import Command, CommandError, State, check_usage
from .database import NoRowsError
from .models import User
from .rss import FeedError, RSSFeed, fetch_feed, parse_post_date

_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*$")
_DURATION_PART = re.compile(r"(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)")
_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def validate_url(raw: str) -> str:
    """Return *raw* if it is an absolute URL or an absolute path, else raise CommandError."""
    error = CommandError(f"failed to parse URL '{raw}'")
    if not raw or any(ch in raw for ch in " \t\r\n"):
        raise error
    if raw.startswith("/"):
        return raw
    try:
        parts = urlsplit(raw)
    except ValueError as exc:
        raise error from exc
    if not parts.scheme or not _SCHEME.match(parts.scheme) or not raw.startswith(parts.scheme + ":"):
        raise error
    return raw


def parse_duration(text: str) -> timedelta:
    """Parse a duration such as '1m30s' or '500ms'."""
    body = text
    sign = 1
    if body[:1] in "+-" and body:
        sign = -1 if body[0] == "-" else 1
        body = body[1:]
    if body == "0":
        return timedelta(0)
    if not body:
        raise ValueError(f"invalid duration '{text}'")
    seconds = 0.0
    position = 0
    while position < len(body):
        match = _DURATION_PART.match(body, position)
        if match is None:
            raise ValueError(f"invalid duration '{text}'")
        seconds += float(match.group(1)) * _UNITS[match.group(2)]
        position = match.end()
    return timedelta(seconds=sign * seconds)


def scrape_feeds(state: State, fetch: Callable[[str], RSSFeed] = fetch_feed) -> int:
    """Fetch the feed due next and store its posts; return how many were saved."""
    try:
        next_feed = state.db.get_next_feed_to_fetch()
    except (NoRowsError, sqlite3.Error) as exc:
        print(f"ERROR: failed to get feed to fetch from db: {exc}")
        return 0
    print(f"INFO: Scraping {next_feed.name}")
    try:
        feed = fetch(next_feed.url)
    except FeedError as exc:
        print(f"ERROR: failed to fetch feed: {exc}")
        return 0
    state.db.mark_feed_fetched(next_feed.id)
    saved = 0
    for post in feed.items:
        try:
            published = parse_post_date(post.pub_date)
        except ValueError as exc:
            print(f"WARN: failed to save post {post.link} to db: {exc}")
            continue
        try:
            state.db.add_post(next_feed.id, post.title, post.link, post.description, published)
        except sqlite3.IntegrityError as exc:
            if "UNIQUE" not in str(exc):
                print(f"WARN: failed to save post {post.link} to db: {exc}")
            continue
        except sqlite3.Error as exc:
            print(f"err: {exc}")
            continue
        saved += 1
    return saved


def handler_list_feeds(state: State, cmd: Command) -> None:
    usage = "Usage: gator feeds\nList the feeds configured for scraping, and which user"
    check_usage(0, 0, len(cmd.args), usage)
    try:
        feeds = state.db.get_all_feeds()
    except sqlite3.Error as exc:
        raise CommandError(f"failed to get feeds from db: {exc}") from exc
    for feed in feeds:
        try:
            user = state.db.get_user_by_id(feed.user_id)
        except (NoRowsError, sqlite3.Error) as exc:
            raise CommandError(f"failed to get user from db: {exc}") from exc
        print("Feed created by", user.name)
        print(feed)


def handler_agg(state: State, cmd: Command) -> None:
    usage = "Usage: gator agg DURATION\nScrape feeds forever, one every DURATION."
    check_usage(1, 1, len(cmd.args), usage)
    try:
        interval = parse_duration(cmd.args[0])
    except ValueError as exc:
        raise CommandError(f"failed to parse user defined duration : {exc}") from exc
    if interval <= timedelta(0):
        raise CommandError("non-positive interval for agg")
    seconds = interval.total_seconds()
    next_tick = time.monotonic()
    while True:
        scrape_feeds(state)
        next_tick += seconds
        time.sleep(max(0.0, next_tick - time.monotonic()))


def handler_add_feed(state: State, cmd: Command, user: User) -> None:
    usage = "Usage: gator addfeed NAME URL\nAdd a feed to gator for scraping."
    check_usage(2, 2, len(cmd.args), usage)
    name, url = cmd.args
    validate_url(url)
    try:
        feed = state.db.add_feed(name, url, user.id)
    except sqlite3.Error as exc:
        raise CommandError(f"failed to add feed to db: {exc}") from exc
    print(feed)
    try:
        follow = state.db.add_feed_follow(user.id, feed.id)
    except sqlite3.Error as exc:
        raise CommandError(f"failed to add feed follow to db: {exc}") from exc
    print(follow)


def _feed_id(state: State, url: str):
    validate_url(url)
    try:
        return state.db.get_feed_by_url(url).id
    except (NoRowsError, sqlite3.Error) as exc:
        raise CommandError(f"failed to lookup feed in db: {exc}") from exc


def handler_follow_feed(state: State, cmd: Command, user: User) -> None:
    usage = "Usage: gator follow URL\nFollow a feed that has already been added by URL."
    check_usage(1, 1, len(cmd.args), usage)
    feed_id = _feed_id(state, cmd.args[0])
    try:
        follow = state.db.add_feed_follow(user.id, feed_id)
    except sqlite3.Error as exc:
        raise CommandError(f"failed to add feed follow to db: {exc}") from exc
    print(follow)


def handler_unfollow_feed(state: State, cmd: Command, user: User) -> None:
    usage = "Usage: gator unfollow URL\nUnfollow a feed by URL."
    check_usage(1, 1, len(cmd.args), usage)
    feed_id = _feed_id(state, cmd.args[0])
    try:
        state.db.delete_feed_follow(user.id, feed_id)
    except sqlite3.Error as exc:
        raise CommandError(f"failed to unfollow feed: {exc}") from exc