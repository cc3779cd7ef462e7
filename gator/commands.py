"""Command registry, argument checks and the logged-in wrapper."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from functools import wraps

from .config import Config
from .database import NoRowsError, Queries
from .models import User


class CommandError(Exception):
    """A command could not be carried out."""


class UsageError(CommandError):
    """A command was given the wrong number of arguments."""


@dataclass(frozen=True)
class Command:
    name: str
    args: list[str] = field(default_factory=list)


@dataclass
class State:
    """What every command handler works with."""

    db: Queries
    config: Config


Handler = Callable[[State, Command], None]
UserHandler = Callable[[State, Command, User], None]


def check_usage(min_args: int, max_args: int, arg_count: int, usage: str) -> None:
    """Raise UsageError unless *arg_count* lies between the two bounds."""
    if arg_count < min_args:
        raise UsageError(f"too few arguments, expected {min_args} got {arg_count}\n\n{usage}")
    if arg_count > max_args:
        raise UsageError(f"too many arguments, expected {max_args} got {arg_count}\n\n{usage}")


def logged_in(handler: UserHandler) -> Handler:
    """Wrap *handler* so that it receives the current user from the database."""

    @wraps(handler)
    def wrapper(state: State, cmd: Command) -> None:
        try:
            user = state.db.get_user(state.config.current_user_name)
        except NoRowsError as exc:
            raise CommandError(f"failed to lookup user in db: {exc}") from exc
        handler(state, cmd, user)

    return wrapper


class Commands:
    """Handlers by command name."""

    def __init__(self) -> None:
        self._handlers: dict[str, Handler] = {}

    def register(self, name: str, handler: Handler) -> None:
        if name in self._handlers:
            raise CommandError(f"command with Name '{name}' already registered")
        self._handlers[name] = handler

    def run(self, state: State, cmd: Command) -> None:
        handler = self._handlers.get(cmd.name)
        if handler is None:
            raise CommandError(f"no command called '{cmd.name}' registered.\n\n{self.list_commands()}")
        handler(state, cmd)

    def list_commands(self) -> str:
        return "Available Commands:\n\t" + ", ".join(sorted(self._handlers))