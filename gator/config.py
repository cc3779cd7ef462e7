"""Reading and writing the user's gator configuration file."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

CONFIG_FILE_NAME = ".gatorconfig.json"


def config_path() -> Path:
    """Return the location of the configuration file in the user's home directory."""
    return Path.home() / CONFIG_FILE_NAME


@dataclass
class Config:
    """Database location and the name of the logged-in user."""

    db_url: str = ""
    current_user_name: str = ""
    path: Path | None = field(default=None, compare=False, repr=False)

    def set_user(self, user_name: str) -> None:
        """Record *user_name* as the current user and save the file."""
        self.current_user_name = user_name
        self.write()

    def write(self) -> None:
        """Overwrite the existing configuration file with this configuration.

        The file must already exist; a missing file raises FileNotFoundError.
        """
        target = self.path if self.path is not None else config_path()
        payload = {"db_url": self.db_url, "current_user_name": self.current_user_name}
        with open(target, "r+", encoding="utf-8") as handle:
            handle.truncate(0)
            handle.seek(0)
            handle.write(json.dumps(payload, separators=(",", ":"), ensure_ascii=False))
            handle.write("\n")

    def __str__(self) -> str:
        return f"Config {{ DbUrl: '{self.db_url}', CurrentUserName: '{self.current_user_name}' }}"


def read(path: str | Path | None = None) -> Config:
    """Load the configuration from *path*, or from the default location."""
    target = Path(path) if path is not None else config_path()
    with open(target, encoding="utf-8") as handle:
        data = json.load(handle)
    if not isinstance(data, dict):
        raise ValueError(f"configuration in '{target}' is not a JSON object")
    return Config(
        db_url=str(data.get("db_url", "")),
        current_user_name=str(data.get("current_user_name", "")),
        path=target,
    )