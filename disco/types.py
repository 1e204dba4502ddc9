"""
Core data types shared across disco subsystems.

Lightweight containers for what the transport hands back.  They live here
rather than in a specific subsystem to avoid circular imports, and none of
them are cached: every lookup produces fresh instances.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum


class ChannelKind(str, Enum):
    COMMUNITY = "community"
    DIRECT_MESSAGE = "direct_message"


@dataclass
class Member:
    """A user as seen from a community or a direct-message channel."""

    id: str
    username: str
    nickname: str | None = None

    @property
    def mention(self) -> str:
        """Addressable reference the platform turns into a ping."""
        return f"<@{self.id}>"

    @property
    def display_name(self) -> str:
        return self.nickname or self.username


@dataclass
class Community:
    """A guild: a named collection of channels and members."""

    id: str
    name: str
    members: list[Member] = field(default_factory=list)


@dataclass
class Channel:
    id: str
    name: str
    kind: ChannelKind = ChannelKind.COMMUNITY


@dataclass
class DirectMessageChannel:
    id: str
    recipients: list[Member] = field(default_factory=list)

    @property
    def name(self) -> str:
        return ", ".join(r.username for r in self.recipients) or self.id


@dataclass
class InboundMessage:
    """A message pushed by the transport for any channel the session can see."""

    channel_id: str
    author: Member
    content: str
    community_id: str | None = None
    timestamp: float = field(default_factory=time.time)
    # True when the message pings the logged-in user.
    mentions_me: bool = False

    @property
    def is_direct(self) -> bool:
        return self.community_id is None
