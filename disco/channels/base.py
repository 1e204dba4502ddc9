"""
Transport capability interface.

Every platform adapter inherits from ChatTransport and implements the
listing, sending and presence calls the client core consumes.  The core
never talks to a platform library directly: it only sees these methods and
the ``inbound`` queue.

Inbound events are not delivered through callbacks into the core.  The
adapter pushes them onto ``inbound`` (an asyncio.Queue) and the session's
inbound printer task consumes them independently of the read loop.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod

import structlog

from disco.types import Channel, Community, DirectMessageChannel, InboundMessage, Member

logger = structlog.get_logger(__name__)

# Default bound on queued inbound events before the oldest are dropped.
_DEFAULT_INBOUND_QUEUE_SIZE: int = 1000


class TransportError(Exception):
    """Raised by adapters when a platform call fails."""


class ChatTransport(ABC):
    """Abstract base for all disco platform transports."""

    def __init__(self, *, inbound_queue_size: int = _DEFAULT_INBOUND_QUEUE_SIZE) -> None:
        self.inbound: asyncio.Queue[InboundMessage] = asyncio.Queue(
            maxsize=max(1, int(inbound_queue_size)),
        )

    # ------------------------------------------------------------------
    # Abstract interface — subclasses must implement these
    # ------------------------------------------------------------------

    @property
    @abstractmethod
    def transport_name(self) -> str:
        """Short platform identifier: 'discord', …"""

    @abstractmethod
    async def start(self) -> None:
        """Connect and authenticate.  Raises on failure."""

    @abstractmethod
    async def stop(self) -> None:
        """Disconnect gracefully."""

    @abstractmethod
    async def list_communities(self) -> list[Community]:
        ...

    @abstractmethod
    async def list_channels(self, community_id: str) -> list[Channel]:
        ...

    @abstractmethod
    async def list_members(self, community_id: str, limit: int) -> list[Member]:
        """Return up to *limit* members in the platform's listing order."""

    @abstractmethod
    async def list_direct_message_channels(self) -> list[DirectMessageChannel]:
        ...

    @abstractmethod
    async def send_message(self, channel_id: str, text: str) -> None:
        """Send *text* to *channel_id*.  Raises on failure."""

    @abstractmethod
    async def set_presence(self, status: str) -> None:
        ...

    @abstractmethod
    async def fetch_messages(self, channel_id: str, limit: int) -> list[InboundMessage]:
        """Return the last *limit* messages of a channel, oldest first."""

    # ------------------------------------------------------------------
    # Shared helpers — subclasses use these
    # ------------------------------------------------------------------

    def publish(self, message: InboundMessage) -> None:
        """Queue an inbound message for the printer task.

        When the queue is full the oldest event is dropped so a stalled
        consumer never blocks the platform's event loop callbacks.
        """
        if self.inbound.full():
            try:
                dropped = self.inbound.get_nowait()
                logger.warning(
                    "transport.inbound_dropped",
                    transport=self.transport_name,
                    channel_id=dropped.channel_id,
                )
            except asyncio.QueueEmpty:
                pass
        self.inbound.put_nowait(message)

    @staticmethod
    def _normalize_id(value: object) -> str | None:
        """Coerce a platform id (int or str) to a stripped string, or None."""
        if isinstance(value, int):
            return str(value)
        if isinstance(value, str):
            cleaned = value.strip()
            return cleaned or None
        return None

    @staticmethod
    def _validate_platform_id(platform_id: str) -> int:
        """Convert a platform id to int, raising TransportError when invalid."""
        try:
            return int(platform_id)
        except (ValueError, TypeError) as exc:
            raise TransportError(f"Invalid id: {platform_id!r}") from exc
