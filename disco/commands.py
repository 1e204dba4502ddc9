"""
Command pass — the first rewrite applied to a plain input line.

A command is ``:`` followed by a known name, optionally followed by an
argument.  Commands either run a local side effect and consume the whole
line (the result is ``""`` so nothing is sent), or rewrite the line and let
it continue to the mention pass (``:me``).  Unknown ``:`` words are ordinary
text.  A failing command is reported and never ends the read loop.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

import structlog

if TYPE_CHECKING:
    from disco.inbound import InboundPrinter
    from disco.menu import MenuSelector
    from disco.output import OutputWriter
    from disco.state import ContextState

logger = structlog.get_logger(__name__)

HELP_TEXT = (
    "[bold]Commands[/bold]\n"
    ":? — show this command list\n"
    ":s — show the current server and channel\n"
    ":g — choose another server and channel\n"
    ":c — choose another channel in this server\n"
    ":p — choose a direct message channel\n"
    ":m \\[n] — show the last n messages of this channel\n"
    ":me <text> — send an action message\n"
    ":q — quit (an empty line also quits)\n"
    "[dim]```  starts a block sent verbatim until the closing ```[/dim]"
)

_ALIASES = {
    ":?": "help",
    ":help": "help",
    ":s": "status",
    ":status": "status",
    ":g": "guild",
    ":guild": "guild",
    ":c": "channel",
    ":channel": "channel",
    ":p": "private",
    ":private": "private",
    ":m": "messages",
    ":messages": "messages",
    ":me": "me",
}


def parse_command(line: str) -> Optional[tuple[str, str]]:
    """Parse ``:command arg...`` input.  Returns None for non-command text."""
    text = line.strip()
    if not text.startswith(":"):
        return None
    parts = text.split(maxsplit=1)
    name = _ALIASES.get(parts[0].lower())
    if name is None:
        return None
    arg = parts[1].strip() if len(parts) > 1 else ""
    return name, arg


class CommandParser:
    def __init__(
        self,
        state: ContextState,
        menu: MenuSelector,
        printer: InboundPrinter,
        writer: OutputWriter,
        *,
        default_backlog: int = 10,
    ) -> None:
        self._state = state
        self._menu = menu
        self._printer = printer
        self._writer = writer
        self._default_backlog = default_backlog

    async def process(self, line: str) -> str:
        """Run the command in *line*, returning the line that remains to send."""
        command = parse_command(line)
        if command is None:
            return line
        name, arg = command
        if name == "me":
            return f"*{arg}*" if arg else ""
        try:
            await self._run(name, arg)
        except Exception as e:
            logger.warning("commands.failed", command=name, error=str(e))
            await self._writer.error(str(e) or type(e).__name__)
        return ""

    async def _run(self, name: str, arg: str) -> None:
        if name == "help":
            await self._writer.write(HELP_TEXT)
        elif name == "status":
            await self._writer.info(f"Current: {self._state.describe()}")
        elif name == "guild":
            await self._menu.run()
            await self._printer.show_header()
        elif name == "channel":
            await self._menu.select_channel()
            await self._printer.show_header()
        elif name == "private":
            await self._menu.select_direct_message()
            await self._printer.show_header()
        elif name == "messages":
            count = self._default_backlog
            if arg:
                try:
                    count = int(arg)
                except ValueError:
                    await self._writer.error(f"Not a number: {arg}")
                    return
                if count < 1:
                    await self._writer.error("Message count must be at least 1")
                    return
            await self._printer.show_backlog(min(count, 100))
