"""Command-line entry point for gator."""

from __future__ import annotations

import sqlite3
import sys

from . import config as config_module
from .commands import Command, CommandError, Commands, State, logged_in
from .database import connect
from .feeds import (
    handler_add_feed,
    handler_agg,
    handler_follow_feed,
    handler_list_feeds,
    handler_unfollow_feed,
)
from .users import (
    handler_browse,
    handler_following,
    handler_list_users,
    handler_login,
    handler_register,
    handler_reset,
)


def build_commands() -> Commands:
    """Return a registry holding every gator command."""
    commands = Commands()
    commands.register("login", handler_login)
    commands.register("register", handler_register)
    commands.register("reset", handler_reset)
    commands.register("users", handler_list_users)
    commands.register("following", logged_in(handler_following))
    commands.register("browse", logged_in(handler_browse))
    commands.register("agg", handler_agg)
    commands.register("addfeed", logged_in(handler_add_feed))
    commands.register("feeds", handler_list_feeds)
    commands.register("follow", logged_in(handler_follow_feed))
    commands.register("unfollow", logged_in(handler_unfollow_feed))
    return commands


def main(argv: list[str] | None = None) -> int:
    """Run the command named by *argv* and return the exit status."""
    args = list(sys.argv[1:] if argv is None else argv)

    try:
        active_config = config_module.read()
    except (OSError, ValueError) as exc:
        print(f"ERROR: Failed to load config: {exc}", file=sys.stderr)
        return 1

    try:
        db = connect(active_config.db_url)
    except (sqlite3.Error, ValueError) as exc:
        print(f"ERROR: Unable to connect to database: {exc}", file=sys.stderr)
        return 1

    with db:
        commands = build_commands()
        if not args:
            print(f"ERROR: No command provided\n\n{commands.list_commands()}", file=sys.stderr)
            return 1
        state = State(db=db, config=active_config)
        try:
            commands.run(state, Command(name=args[0], args=args[1:]))
        except (CommandError, sqlite3.Error, OSError) as exc:
            print(f"ERROR: command failed: {exc}", file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())