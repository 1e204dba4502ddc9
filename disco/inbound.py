"""
Inbound printer — the second execution path next to the read loop.

A dedicated task drains the transport's inbound queue.  Messages for the
active channel are printed through the shared OutputWriter; direct messages
and mentions elsewhere trigger a desktop notification when enabled.  The
printer only reads the context state.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from disco.cli.formatters import format_message

if TYPE_CHECKING:
    from disco.channels.base import ChatTransport
    from disco.notify import Notifier
    from disco.output import OutputWriter
    from disco.state import ContextState
    from disco.types import InboundMessage

logger = structlog.get_logger(__name__)


class InboundPrinter:
    def __init__(
        self,
        transport: ChatTransport,
        state: ContextState,
        writer: OutputWriter,
        *,
        hide_timestamps: bool = False,
        notifier: Notifier | None = None,
    ) -> None:
        self._transport = transport
        self._state = state
        self._writer = writer
        self._hide_timestamps = hide_timestamps
        self._notifier = notifier
        self._task: asyncio.Task | None = None

    # ------------------------------------------------------------------
    # Background task
    # ------------------------------------------------------------------

    def start(self) -> None:
        if self._task is not None:
            return
        self._task = asyncio.create_task(self._consume(), name="disco_inbound")

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    async def _consume(self) -> None:
        queue = self._transport.inbound
        while True:
            message = await queue.get()
            try:
                await self.handle(message)
            except Exception:
                logger.exception("inbound.handle_failed", channel_id=message.channel_id)
            finally:
                queue.task_done()

    async def handle(self, message: InboundMessage) -> None:
        if self._state.enabled and message.channel_id == self._state.channel_id:
            await self._writer.write(
                format_message(message, hide_timestamps=self._hide_timestamps)
            )
            return
        if self._notifier is not None and (message.is_direct or message.mentions_me):
            await self._notifier.notify(f"{message.author.display_name}: {message.content}")

    # ------------------------------------------------------------------
    # Channel content shown on selection and by :m
    # ------------------------------------------------------------------

    async def show_header(self) -> None:
        await self._writer.header(f"── {self._state.describe()} ──")

    async def show_backlog(self, limit: int) -> None:
        if not self._state.is_ready():
            await self._writer.error("No channel selected")
            return
        try:
            messages = await self._transport.fetch_messages(self._state.channel_id, limit)
        except Exception as e:
            logger.warning(
                "inbound.backlog_failed", channel_id=self._state.channel_id, error=str(e)
            )
            await self._writer.error(f"Could not load messages: {e}")
            return
        async with self._writer.exclusive() as console:
            for message in messages:
                console.print(format_message(message, hide_timestamps=self._hide_timestamps))
