# disco/config.py
"""
Configuration for disco.

Values are loaded from environment variables (and a ``.env`` file at the
project root) and validated with Pydantic.  Command-line flags are layered
on top by ``DiscoConfig`` so every component receives one explicit object.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings

# Resolve .env relative to the project root (one level above disco/ package),
# so the config works regardless of the user's current working directory.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"

# Largest page the platform's member listing will return in one request.
MAX_MEMBER_FETCH_LIMIT: int = 1000

DEFAULT_NOTIFY_GEOMETRY = "10,10,260,90"


class DiscordConfig(BaseSettings):
    """Connection settings for the Discord transport."""

    token: str = Field(
        ...,
        validation_alias=AliasChoices("DISCORD_TOKEN", "DISCORD_BOT_TOKEN"),
    )
    presence: str = Field("Plan 9", alias="DISCO_PRESENCE")
    # Bound on a single transport call; None keeps calls unbounded.
    request_timeout: Optional[float] = Field(None, alias="DISCO_REQUEST_TIMEOUT")
    member_fetch_limit: int = Field(MAX_MEMBER_FETCH_LIMIT, alias="DISCO_MEMBER_FETCH_LIMIT")

    model_config = {
        "env_file": _ENV_FILE,
        "extra": "ignore",
        "populate_by_name": True,
        "env_ignore_empty": True,
    }

    @model_validator(mode="after")
    def normalize_limits(self) -> "DiscordConfig":
        self.token = self.token.strip()
        if not self.token:
            raise ValueError("DISCORD_TOKEN is empty")
        self.member_fetch_limit = min(MAX_MEMBER_FETCH_LIMIT, max(1, int(self.member_fetch_limit)))
        if self.request_timeout is not None and self.request_timeout <= 0:
            self.request_timeout = None
        return self


class DisplayConfig(BaseSettings):
    """What gets printed after a channel is selected."""

    load_backlog: bool = Field(True, alias="DISCO_LOAD_BACKLOG")
    messages: int = Field(10, alias="DISCO_MESSAGES")

    model_config = {"env_file": _ENV_FILE, "extra": "ignore", "populate_by_name": True}

    @model_validator(mode="after")
    def normalize_limits(self) -> "DisplayConfig":
        self.messages = min(100, max(1, int(self.messages)))
        return self


class NotifyConfig(BaseSettings):
    """External desktop notifier."""

    command: str = Field("statusmsg", alias="DISCO_NOTIFY_COMMAND")

    model_config = {"env_file": _ENV_FILE, "extra": "ignore", "populate_by_name": True}


class DiscoConfig:
    """
    Master configuration composing the environment-driven settings with the
    command-line flags.  No global state: the session receives this object
    and passes pieces of it to each component.
    """

    def __init__(
        self,
        *,
        hide_timestamps: bool = False,
        notify: bool = False,
        notify_geometry: str = DEFAULT_NOTIFY_GEOMETRY,
        discord: DiscordConfig | None = None,
        display: DisplayConfig | None = None,
        notifier: NotifyConfig | None = None,
    ) -> None:
        self.discord = discord if discord is not None else DiscordConfig()
        self.display = display if display is not None else DisplayConfig()
        self.notifier = notifier if notifier is not None else NotifyConfig()
        self.hide_timestamps = hide_timestamps
        self.notify = notify
        self.notify_geometry = notify_geometry.strip() or DEFAULT_NOTIFY_GEOMETRY

    @property
    def notify_args(self) -> list[str]:
        """Arguments forwarded opaquely to the notifier program."""
        return ["-w", self.notify_geometry]

    def __repr__(self) -> str:
        return (
            f"DiscoConfig(presence={self.discord.presence!r}, "
            f"backlog={self.display.messages if self.display.load_backlog else 0}, "
            f"notify={self.notify})"
        )
