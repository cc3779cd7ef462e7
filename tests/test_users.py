import json
from datetime import datetime, timedelta, timezone

import pytest

from gator.commands import Command, CommandError, State, UsageError
from gator.config import Config, read
from gator.database import connect
from gator.users import (
    handler_browse,
    handler_following,
    handler_list_users,
    handler_login,
    handler_register,
    handler_reset,
)


@pytest.fixture
def state(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"db_url": ":memory:", "current_user_name": ""}))
    db = connect(":memory:")
    yield State(db=db, config=Config(db_url=":memory:", path=path))
    db.close()


def _register(state, name):
    handler_register(state, Command("register", [name]))
    return state.db.get_user(name)


def _user_with_posts(state, count):
    user = _register(state, "alice")
    feed = state.db.add_feed("Blog", "https://example.com/rss", user.id)
    state.db.add_feed_follow(user.id, feed.id)
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    for n in range(count):
        state.db.add_post(feed.id, f"post {n}", f"https://example.com/p/{n}", "text", base + timedelta(days=n))
    return user


def test_register_creates_user_and_logs_in(state):
    user = _register(state, "alice")
    assert user.name == "alice"
    assert state.config.current_user_name == "alice"
    assert read(state.config.path).current_user_name == "alice"


def test_register_duplicate_fails(state):
    _register(state, "alice")
    with pytest.raises(CommandError):
        handler_register(state, Command("register", ["alice"]))


def test_register_needs_one_argument(state):
    with pytest.raises(UsageError, match="too few arguments"):
        handler_register(state, Command("register", []))
    with pytest.raises(UsageError, match="too many arguments"):
        handler_register(state, Command("register", ["a", "b"]))


def test_login_unknown_user(state):
    with pytest.raises(CommandError, match="no registered user 'bob'"):
        handler_login(state, Command("login", ["bob"]))


def test_login_switches_user(state):
    _register(state, "alice")
    _register(state, "bob")
    handler_login(state, Command("login", ["alice"]))
    assert state.config.current_user_name == "alice"
    assert read(state.config.path).current_user_name == "alice"


def test_list_users_marks_current(state, capsys):
    _register(state, "alice")
    _register(state, "bob")
    capsys.readouterr()
    handler_list_users(state, Command("users", []))
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "Registered Users:"
    assert "*  bob (current)" in lines
    assert "*  alice" in lines


def test_reset_removes_all_users(state):
    _register(state, "alice")
    _register(state, "bob")
    handler_reset(state, Command("reset", []))
    assert state.db.get_all_users() == []


def test_following_prints_follows(state, capsys):
    user = _register(state, "alice")
    feed = state.db.add_feed("Blog", "https://example.com/rss", user.id)
    state.db.add_feed_follow(user.id, feed.id)
    capsys.readouterr()
    handler_following(state, Command("following", []), user)
    out = capsys.readouterr().out
    assert "FeedName: Blog" in out
    assert "UserName: alice" in out


def test_browse_default_limit(state, capsys):
    user = _user_with_posts(state, 3)
    capsys.readouterr()
    handler_browse(state, Command("browse", []), user)
    out = capsys.readouterr().out
    assert out.count("| Post Title:") == 2
    assert out.index("post 2") < out.index("post 1")
    assert "post 0" not in out


def test_browse_explicit_limit(state, capsys):
    user = _user_with_posts(state, 3)
    capsys.readouterr()
    handler_browse(state, Command("browse", ["3"]), user)
    assert capsys.readouterr().out.count("| Post Title:") == 3


@pytest.mark.parametrize("arg", ["abc", "1.5", "99999999999"])
def test_browse_rejects_bad_limit(state, arg):
    user = _register(state, "alice")
    with pytest.raises(CommandError, match="post limit must be numeric"):
        handler_browse(state, Command("browse", [arg]), user)


def test_browse_too_many_arguments(state):
    user = _register(state, "alice")
    with pytest.raises(UsageError):
        handler_browse(state, Command("browse", ["1", "2"]), user)