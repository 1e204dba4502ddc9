"""
Discord transport for disco.

Uses discord.py v2+ async API.

We use asyncio.create_task(client.start(token)) instead of client.run(token)
because the latter creates its own event loop and would conflict with the
loop the session already runs on.

Every inbound message the client can see is converted to an InboundMessage
and pushed onto ``self.inbound``; filtering by the active channel happens in
the session's inbound printer, not here.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from disco.channels.base import ChatTransport, TransportError
from disco.types import (
    Channel,
    ChannelKind,
    Community,
    DirectMessageChannel,
    InboundMessage,
    Member,
)

if TYPE_CHECKING:
    from disco.config import DiscordConfig

logger = structlog.get_logger(__name__)

_READY_TIMEOUT: float = 30.0


class DiscordTransport(ChatTransport):
    """ChatTransport backed by a discord.py client."""

    def __init__(self, config: DiscordConfig) -> None:
        super().__init__()
        self._config = config
        self._client = None
        self._task: asyncio.Task | None = None
        self._ready_event: asyncio.Event = asyncio.Event()

    @property
    def transport_name(self) -> str:
        return "discord"

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Log in to Discord and wait until the client is ready."""
        import discord

        # Suppress discord.py's "PyNaCl is not installed" warning; there is
        # no voice support in a terminal client.
        try:
            discord.VoiceClient.warn_nacl = False
        except AttributeError:
            pass

        intents = discord.Intents.default()
        intents.message_content = True
        intents.members = True

        self._ready_event.clear()
        self._client = _create_discord_client(transport=self, intents=intents)
        self._task = asyncio.create_task(
            self._client.start(self._config.token),
            name="discord_client",
        )
        # Wait for on_ready or an early task failure (bad token, network error).
        ready_fut = asyncio.ensure_future(self._ready_event.wait())
        done, _ = await asyncio.wait(
            {ready_fut, self._task},
            timeout=_READY_TIMEOUT,
            return_when=asyncio.FIRST_COMPLETED,
        )
        ready_fut.cancel()
        if self._task in done:
            try:
                self._task.result()
            except Exception:
                await self.stop()
                raise
        if not self._ready_event.is_set():
            await self.stop()
            raise TimeoutError(f"Discord client did not become ready within {_READY_TIMEOUT:.0f}s")
        logger.info("discord_transport.started")

    async def stop(self) -> None:
        """Disconnect from Discord."""
        if self._client is not None:
            try:
                await self._client.close()
            except Exception:
                logger.exception("discord_transport.stop_error")
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except (asyncio.CancelledError, Exception):
                pass
            self._task = None
        logger.info("discord_transport.stopped")

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _require_client(self):
        if self._client is None:
            raise TransportError("Discord client is not connected")
        return self._client

    def _get_guild(self, community_id: str):
        client = self._require_client()
        guild = client.get_guild(self._validate_platform_id(community_id))
        if guild is None:
            raise TransportError(f"Unknown guild: {community_id}")
        return guild

    async def _get_messageable(self, channel_id: str):
        client = self._require_client()
        cid = self._validate_platform_id(channel_id)
        channel = client.get_channel(cid)
        if channel is None:
            channel = await client.fetch_channel(cid)
        return channel

    async def list_communities(self) -> list[Community]:
        client = self._require_client()
        return [Community(id=str(g.id), name=g.name) for g in client.guilds]

    async def list_channels(self, community_id: str) -> list[Channel]:
        guild = self._get_guild(community_id)
        return [
            Channel(id=str(ch.id), name=ch.name, kind=ChannelKind.COMMUNITY)
            for ch in guild.text_channels
        ]

    async def list_members(self, community_id: str, limit: int) -> list[Member]:
        guild = self._get_guild(community_id)
        return [_to_member(m) async for m in guild.fetch_members(limit=limit)]

    async def list_direct_message_channels(self) -> list[DirectMessageChannel]:
        client = self._require_client()
        result: list[DirectMessageChannel] = []
        for ch in client.private_channels:
            recipients = getattr(ch, "recipients", None)
            if recipients is None:
                single = getattr(ch, "recipient", None)
                recipients = [single] if single is not None else []
            result.append(
                DirectMessageChannel(
                    id=str(ch.id),
                    recipients=[_to_member(r) for r in recipients],
                )
            )
        return result

    async def fetch_messages(self, channel_id: str, limit: int) -> list[InboundMessage]:
        channel = await self._get_messageable(channel_id)
        messages = [self._to_inbound(m) async for m in channel.history(limit=limit)]
        messages.reverse()
        return messages

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    async def send_message(self, channel_id: str, text: str) -> None:
        channel = await self._get_messageable(channel_id)
        await channel.send(text)

    async def set_presence(self, status: str) -> None:
        import discord

        client = self._require_client()
        await client.change_presence(activity=discord.Game(name=status))

    # ------------------------------------------------------------------
    # Inbound
    # ------------------------------------------------------------------

    def _to_inbound(self, message) -> InboundMessage:
        guild = getattr(message, "guild", None)
        me = self._client.user if self._client is not None else None
        mentions = getattr(message, "mentions", None) or []
        return InboundMessage(
            channel_id=str(message.channel.id),
            community_id=self._normalize_id(getattr(guild, "id", None)),
            author=_to_member(message.author),
            content=message.content or "",
            timestamp=message.created_at.timestamp(),
            mentions_me=me is not None and any(m.id == me.id for m in mentions),
        )

    async def _on_message(self, message) -> None:
        try:
            self.publish(self._to_inbound(message))
        except Exception:
            logger.exception("discord_transport.inbound_convert_failed")


def _to_member(user) -> Member:
    """Convert a discord.User / discord.Member into a Member."""
    return Member(
        id=str(user.id),
        username=user.name,
        nickname=getattr(user, "nick", None) or None,
    )


def _create_discord_client(transport: DiscordTransport, intents, **kwargs):
    """
    Factory that creates a discord.Client wired to *transport*.

    The discord import is deferred to this function so the module can be
    imported even when discord.py is not installed.
    """
    import discord

    class _Client(discord.Client):
        def __init__(self, disco_transport: DiscordTransport, **kw):
            super().__init__(**kw)
            self._disco_transport = disco_transport

        async def on_ready(self) -> None:
            self._disco_transport._ready_event.set()
            logger.info(
                "discord_transport.ready",
                user=str(self.user),
                guild_count=len(self.guilds),
            )

        async def on_message(self, message) -> None:
            await self._disco_transport._on_message(message)

    return _Client(disco_transport=transport, intents=intents, **kwargs)
