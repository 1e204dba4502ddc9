"""
Menu selector — picks the community and channel the session talks to.

    SelectingCommunity → SelectingChannel → Active

Menus are numbered from 1.  Anything that is not a valid index prints a
notice and asks again, indefinitely, without touching the context state.
An empty list cannot be chosen from and raises InitializationError.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Sequence

import structlog

from disco.cli.formatters import build_menu

if TYPE_CHECKING:
    from disco.channels.base import ChatTransport
    from disco.output import OutputWriter
    from disco.state import ContextState
    from disco.terminal import LineReader
    from disco.types import Channel, Community

logger = structlog.get_logger(__name__)


class InitializationError(Exception):
    """The session cannot reach a usable state (no connection, nothing to select)."""


class MenuStage(str, Enum):
    SELECTING_COMMUNITY = "selecting_community"
    SELECTING_CHANNEL = "selecting_channel"
    ACTIVE = "active"


def parse_index(answer: str, count: int) -> int | None:
    """Return the 0-based position for a 1-based *answer*, or None if invalid."""
    try:
        index = int(answer.strip())
    except ValueError:
        return None
    if 1 <= index <= count:
        return index - 1
    return None


class MenuSelector:
    def __init__(
        self,
        transport: ChatTransport,
        state: ContextState,
        reader: LineReader,
        writer: OutputWriter,
    ) -> None:
        self._transport = transport
        self._state = state
        self._reader = reader
        self._writer = writer
        self.stage = MenuStage.SELECTING_COMMUNITY

    async def run(self) -> None:
        """Full selection: community first, then one of its channels.

        The context state changes only once both have been chosen, so a
        community without channels leaves the previous selection active.
        """
        previous = self.stage
        self.stage = MenuStage.SELECTING_COMMUNITY
        try:
            community = await self._pick_community()
            self.stage = MenuStage.SELECTING_CHANNEL
            channel = await self._pick_channel(community.id, community.name)
        except Exception:
            self.stage = previous
            raise
        self._state.set_community(community.id, community.name)
        self._state.set_channel(channel.id, channel.name)
        self.stage = MenuStage.ACTIVE
        logger.debug(
            "menu.context_selected", community_id=community.id, channel_id=channel.id
        )

    async def select_community(self) -> None:
        community = await self._pick_community()
        self._state.set_community(community.id, community.name)
        self.stage = MenuStage.SELECTING_CHANNEL
        logger.debug("menu.community_selected", community_id=community.id)

    async def select_channel(self) -> None:
        community_id = self._state.community_id
        if not community_id:
            raise InitializationError("No server selected")
        self.stage = MenuStage.SELECTING_CHANNEL
        channel = await self._pick_channel(community_id, self._state.community_name)
        self._state.set_channel(channel.id, channel.name)
        self.stage = MenuStage.ACTIVE
        logger.debug("menu.channel_selected", channel_id=channel.id)

    async def _pick_community(self) -> Community:
        communities = await self._transport.list_communities()
        if not communities:
            raise InitializationError("No servers available to select")
        choice = await self._choose("Servers", [c.name for c in communities])
        return communities[choice]

    async def _pick_channel(self, community_id: str, community_name: str) -> Channel:
        channels = await self._transport.list_channels(community_id)
        if not channels:
            raise InitializationError(
                f"No channels available in {community_name or community_id}"
            )
        choice = await self._choose("Channels", [f"#{c.name}" for c in channels])
        return channels[choice]

    async def select_direct_message(self) -> None:
        dm_channels = await self._transport.list_direct_message_channels()
        if not dm_channels:
            raise InitializationError("No direct message channels available")
        choice = await self._choose("Direct messages", [c.name for c in dm_channels])
        channel = dm_channels[choice]
        self._state.set_channel(channel.id, channel.name, direct=True)
        self.stage = MenuStage.ACTIVE
        logger.debug("menu.direct_message_selected", channel_id=channel.id)

    async def _choose(self, title: str, labels: Sequence[str]) -> int:
        """Show *labels* and read answers until one is a valid index."""
        table = build_menu(title, list(labels))
        while True:
            async with self._writer.exclusive() as console:
                console.print(table)
                console.print("[bold]Select #:[/bold] ", end="")
            answer = await self._reader.readline()
            if not answer:
                raise InitializationError("Input closed during selection")
            index = parse_index(answer, len(labels))
            if index is not None:
                return index
            await self._writer.info(f"Enter a number between 1 and {len(labels)}.")
