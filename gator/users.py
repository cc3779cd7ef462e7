"""Command handlers for users, the current user's follows and browsing posts."""

from __future__ import annotations

import re
import sqlite3
import uuid
from datetime import datetime, timezone

from .commands import Command, CommandError, State, check_usage
from .database import NoRowsError
from .models import User

DEFAULT_POST_LIMIT = 2
_RULE = "=" * 106
_INTEGER = re.compile(r"[+-]?[0-9]+")
_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1


def handler_register(state: State, cmd: Command) -> None:
    """Create a user with the given name and log them in."""
    usage = "Usage: gator register USERNAME\nRegister a new user and log them in."
    check_usage(1, 1, len(cmd.args), usage)
    username = cmd.args[0]
    print(f"Registering user {username}")
    now = datetime.now(timezone.utc)
    try:
        user = state.db.create_user(uuid.uuid4(), now, now, username)
    except sqlite3.Error as exc:
        raise CommandError(f"failed to create user '{username}': {exc}") from exc
    print(f"Registered {user.name}")
    print(user)
    state.config.set_user(user.name)
    print(f"Logged in {user.name}")


def handler_login(state: State, cmd: Command) -> None:
    """Make an already registered user the current user."""
    usage = "Usage: gator login USERNAME\nLogin as the given user."
    check_usage(1, 1, len(cmd.args), usage)
    username = cmd.args[0]
    try:
        state.db.get_user(username)
    except NoRowsError as exc:
        raise CommandError(f"no registered user '{username}'") from exc
    except sqlite3.Error as exc:
        raise CommandError(f"failed to get user from database: {exc}") from exc
    state.config.set_user(username)
    print(f"Logged in {username}")


def handler_list_users(state: State, cmd: Command) -> None:
    """Print every registered user, marking the current one."""
    usage = "Usage: gator users\nList configured users."
    check_usage(0, 0, len(cmd.args), usage)
    try:
        users = state.db.get_all_users()
    except sqlite3.Error as exc:
        raise CommandError(f"failed to get users: {exc}") from exc
    print("Registered Users:")
    for user in users:
        if user.name == state.config.current_user_name:
            print("* ", user.name, "(current)")
        else:
            print("* ", user.name)


def handler_reset(state: State, cmd: Command) -> None:
    """Delete every user, and with them their feeds, follows and posts."""
    usage = "Usage: gator reset\nDelete all configured users. INTENDED FOR DEV USE ONLY."
    check_usage(0, 0, len(cmd.args), usage)
    try:
        state.db.delete_all_users()
    except sqlite3.Error as exc:
        raise CommandError(f"failed to delete users: {exc}") from exc
    print("All users deleted")


def handler_following(state: State, cmd: Command, user: User) -> None:
    """Print the feeds the current user follows."""
    usage = "Usage: gator following\nPrint the list of feeds the current user is following to the terminal"
    check_usage(0, 0, len(cmd.args), usage)
    try:
        follows = state.db.get_feed_follows_for_user(user.id)
    except sqlite3.Error as exc:
        raise CommandError(f"failed to get follows for user in db: {exc}") from exc
    for follow in follows:
        print(follow)


def _parse_limit(text: str) -> int:
    if not _INTEGER.fullmatch(text):
        raise CommandError("post limit must be numeric")
    value = int(text)
    if not _INT32_MIN <= value <= _INT32_MAX:
        raise CommandError("post limit must be numeric")
    return value


def handler_browse(state: State, cmd: Command, user: User) -> None:
    """Print the most recent posts from the feeds the current user follows."""
    usage = (
        "Usage: gator browse [LIMIT] \n"
        f"Print LIMIT (default {DEFAULT_POST_LIMIT}) most recent scraped posts to the terminal"
    )
    check_usage(0, 1, len(cmd.args), usage)
    limit = _parse_limit(cmd.args[0]) if cmd.args else DEFAULT_POST_LIMIT
    try:
        posts = state.db.get_posts_for_user(user.id, limit)
    except (sqlite3.Error, ValueError) as exc:
        raise CommandError(f"failed to get posts for user in db: {exc}") from exc
    for post in posts:
        print(_RULE)
        print(post)
    print(_RULE)