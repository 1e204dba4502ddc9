"""Dispatcher — hands finalized lines to the transport for the active channel."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from disco.channels.base import ChatTransport
    from disco.output import OutputWriter
    from disco.state import ContextState

logger = structlog.get_logger(__name__)


class Dispatcher:
    def __init__(
        self,
        transport: ChatTransport,
        state: ContextState,
        writer: OutputWriter,
        *,
        timeout: float | None = None,
    ) -> None:
        self._transport = transport
        self._state = state
        self._writer = writer
        self._timeout = timeout

    async def dispatch(self, text: str) -> bool:
        """Send *text* to the current channel.

        Returns True when the transport accepted it.  Failures are reported
        to the user and never raised.
        """
        if not text:
            return False
        if not self._state.is_ready():
            await self._writer.error("No channel selected")
            return False
        channel_id = self._state.channel_id
        try:
            send = self._transport.send_message(channel_id, text)
            if self._timeout is None:
                await send
            else:
                await asyncio.wait_for(send, timeout=self._timeout)
        except Exception as e:
            logger.warning("dispatcher.send_failed", channel_id=channel_id, error=str(e))
            await self._writer.error(str(e) or type(e).__name__)
            return False
        return True
