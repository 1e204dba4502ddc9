"""
Session — wires the client together and runs the read loop.

Startup:
  1. Connect the transport (failure is fatal)
  2. Set presence
  3. Run the menu until a channel is active
  4. Print the channel header and optional backlog
  5. Start the inbound printer task
Then read, classify and dispatch lines until quit or end of input.

The session owns every piece of state; components receive what they need by
reference.  There are no module-level singletons.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from rich.markup import escape as markup_escape

from disco import __version__
from disco.classifier import InputClassifier
from disco.commands import CommandParser
from disco.dispatcher import Dispatcher
from disco.inbound import InboundPrinter
from disco.mentions import MentionResolver
from disco.menu import InitializationError, MenuSelector
from disco.notify import Notifier
from disco.output import OutputWriter
from disco.state import ContextState
from disco.terminal import StdinLineReader

if TYPE_CHECKING:
    from disco.channels.base import ChatTransport
    from disco.config import DiscoConfig
    from disco.terminal import LineReader

logger = structlog.get_logger(__name__)


class DiscoSession:
    def __init__(
        self,
        config: DiscoConfig,
        *,
        transport: ChatTransport | None = None,
        reader: LineReader | None = None,
        writer: OutputWriter | None = None,
    ) -> None:
        self._config = config
        if transport is None:
            from disco.channels.discord_channel import DiscordTransport

            transport = DiscordTransport(config.discord)
        self.transport = transport
        self.reader = reader if reader is not None else StdinLineReader()
        self.writer = writer if writer is not None else OutputWriter()
        self.state = ContextState()

        timeout = config.discord.request_timeout
        notifier = (
            Notifier(config.notifier.command, config.notify_args) if config.notify else None
        )
        self.menu = MenuSelector(self.transport, self.state, self.reader, self.writer)
        self.printer = InboundPrinter(
            self.transport,
            self.state,
            self.writer,
            hide_timestamps=config.hide_timestamps,
            notifier=notifier,
        )
        self.commands = CommandParser(
            self.state,
            self.menu,
            self.printer,
            self.writer,
            default_backlog=config.display.messages,
        )
        self.resolver = MentionResolver(
            self.transport,
            self.state,
            writer=self.writer,
            member_limit=config.discord.member_fetch_limit,
            timeout=timeout,
        )
        self.classifier = InputClassifier(self.reader, self.commands, self.resolver, self.writer)
        self.dispatcher = Dispatcher(self.transport, self.state, self.writer, timeout=timeout)
        self._transport_started = False

    async def run(self) -> int:
        """Run the whole session.  Returns the process exit status."""
        try:
            try:
                await self.start()
            except InitializationError as e:
                logger.error("session.init_failed", error=str(e))
                reason = markup_escape(str(e))
                await self.writer.write(f"[red]Initialization failed: {reason}[/red]")
                return 1
            await self.interaction_loop()
            return 0
        finally:
            await self.shutdown()

    async def start(self) -> None:
        await self.writer.header(f"disco version: {__version__}")
        try:
            await self.transport.start()
        except Exception as e:
            raise InitializationError(f"Session failed: {e}") from e
        self._transport_started = True

        try:
            await self.transport.set_presence(self._config.discord.presence)
        except Exception as e:
            logger.warning("session.presence_failed", error=str(e))

        try:
            await self.menu.run()
        except InitializationError:
            raise
        except Exception as e:
            raise InitializationError(f"Could not load servers or channels: {e}") from e

        await self.printer.show_header()
        if self._config.display.load_backlog:
            await self.printer.show_backlog(self._config.display.messages)
        self.printer.start()
        logger.info("session.active", channel_id=self.state.channel_id)

    async def interaction_loop(self) -> None:
        """Read, classify and dispatch until quit or end of input."""
        while True:
            line = await self.classifier.next_line()
            if line.ends_session:
                logger.debug("session.loop_end", reason=line.kind.value)
                break
            if line.sendable:
                await self.dispatcher.dispatch(line.payload)

    async def shutdown(self) -> None:
        await self.printer.stop()
        if self._transport_started:
            self._transport_started = False
            try:
                await self.transport.stop()
            except Exception:
                logger.exception("session.transport_stop_failed")
