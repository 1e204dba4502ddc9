"""
Mention resolution — rewrites ``@name`` tokens into addressable references.

Tokenizing is a plain scanner: an ``@`` followed by one or more ASCII word
characters (``[A-Za-z0-9_]``).  Each token is resolved independently against
fresh lookups:

  1. up to ``member_limit`` members of the current community, in listing
     order: nickname prefix first, then username prefix, per member;
  2. the direct-message channels visible to the user, recipient by recipient.

Resolution never raises.  When nothing matches or a lookup fails the token
comes back unchanged.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

import structlog

from disco.config import MAX_MEMBER_FETCH_LIMIT

if TYPE_CHECKING:
    from disco.channels.base import ChatTransport
    from disco.output import OutputWriter
    from disco.state import ContextState

logger = structlog.get_logger(__name__)

_T = TypeVar("_T")

WORD_CHARS = frozenset(
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_"
)


@dataclass(frozen=True)
class MentionToken:
    text: str
    start: int
    end: int

    @property
    def name(self) -> str:
        return self.text[1:]


def tokenize_mentions(line: str) -> list[MentionToken]:
    """Return the ``@word`` tokens of *line*, left to right, non-overlapping."""
    tokens: list[MentionToken] = []
    i = 0
    n = len(line)
    while i < n:
        if line[i] != "@":
            i += 1
            continue
        j = i + 1
        while j < n and line[j] in WORD_CHARS:
            j += 1
        if j > i + 1:
            tokens.append(MentionToken(text=line[i:j], start=i, end=j))
            i = j
        else:
            i += 1
    return tokens


def _recipient_matches(name: str, username: str) -> bool:
    # Direct-message recipients match in either prefix direction.
    return name.startswith(username) or username.startswith(name)


class MentionResolver:
    """Resolves mention tokens for the community selected in *state*."""

    def __init__(
        self,
        transport: ChatTransport,
        state: ContextState,
        *,
        writer: OutputWriter | None = None,
        member_limit: int = MAX_MEMBER_FETCH_LIMIT,
        timeout: float | None = None,
    ) -> None:
        self._transport = transport
        self._state = state
        self._writer = writer
        self._member_limit = min(MAX_MEMBER_FETCH_LIMIT, max(1, int(member_limit)))
        self._timeout = timeout

    async def _call(self, awaitable: Awaitable[_T]) -> _T:
        if self._timeout is None:
            return await awaitable
        return await asyncio.wait_for(awaitable, timeout=self._timeout)

    async def resolve(self, token: str) -> str:
        """Return the addressable reference for *token*, or *token* itself."""
        if len(token) < 2:
            return token
        name = token[1:]

        community_id = self._state.community_id
        if community_id:
            try:
                members = await self._call(
                    self._transport.list_members(community_id, self._member_limit)
                )
            except Exception as e:
                logger.warning(
                    "mentions.member_lookup_failed",
                    community_id=community_id,
                    error=str(e),
                )
                if self._writer is not None:
                    await self._writer.error(f"Could not look up members: {e}")
                return token

            for member in members:
                if member.nickname and member.nickname.startswith(name):
                    return member.mention
                if member.username.startswith(name):
                    return member.mention

        try:
            dm_channels = await self._call(self._transport.list_direct_message_channels())
        except Exception as e:
            logger.warning("mentions.dm_lookup_failed", error=str(e))
            return token

        for channel in dm_channels:
            for recipient in channel.recipients:
                if _recipient_matches(name, recipient.username):
                    return recipient.mention

        return token

    async def rewrite(self, line: str) -> str:
        """Replace every mention token in *line* with its resolved form."""
        tokens = tokenize_mentions(line)
        if not tokens:
            return line
        resolved = [await self.resolve(tok.text) for tok in tokens]
        parts: list[str] = []
        cursor = 0
        for tok, replacement in zip(tokens, resolved):
            parts.append(line[cursor : tok.start])
            parts.append(replacement)
            cursor = tok.end
        parts.append(line[cursor:])
        return "".join(parts)
