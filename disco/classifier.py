"""
Input classifier — turns terminal input into one classified logical line.

A logical line is usually one physical line, except for fenced blocks:

  - a line starting with ``` opens a block; following physical lines are
    appended, newlines and all, until one of them contains ``` again.  The
    block is sent exactly as typed, with no command or mention processing;
  - an empty line or ``:q`` quits;
  - anything else goes through the command pass and then the mention pass.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from disco.commands import CommandParser
    from disco.mentions import MentionResolver
    from disco.output import OutputWriter
    from disco.terminal import LineReader

logger = structlog.get_logger(__name__)

FENCE = "```"
QUIT_COMMAND = ":q"


class LineKind(str, Enum):
    EOF = "eof"
    QUIT = "quit"
    FENCED_BLOCK = "fenced_block"
    COMMAND = "command"
    PLAIN_TEXT = "plain_text"


@dataclass
class ClassifiedLine:
    kind: LineKind
    payload: str = ""

    @property
    def ends_session(self) -> bool:
        return self.kind in (LineKind.EOF, LineKind.QUIT)

    @property
    def sendable(self) -> bool:
        return self.kind in (LineKind.FENCED_BLOCK, LineKind.PLAIN_TEXT) and bool(self.payload)


def strip_newline(line: str) -> str:
    if line.endswith("\n"):
        line = line[:-1]
        if line.endswith("\r"):
            line = line[:-1]
    return line


class InputClassifier:
    def __init__(
        self,
        reader: LineReader,
        commands: CommandParser,
        resolver: MentionResolver,
        writer: OutputWriter,
    ) -> None:
        self._reader = reader
        self._commands = commands
        self._resolver = resolver
        self._writer = writer

    async def next_line(self) -> ClassifiedLine:
        raw = await self._reader.readline()
        if not raw:
            return ClassifiedLine(LineKind.EOF)

        if raw.startswith(FENCE):
            return ClassifiedLine(LineKind.FENCED_BLOCK, await self._read_fenced_block(raw))

        line = strip_newline(raw)
        if line == "" or line == QUIT_COMMAND:
            return ClassifiedLine(LineKind.QUIT)

        line = await self._commands.process(line)
        if line:
            line = await self._rewrite_mentions(line)
        if not line:
            return ClassifiedLine(LineKind.COMMAND)
        return ClassifiedLine(LineKind.PLAIN_TEXT, line)

    async def _read_fenced_block(self, first: str) -> str:
        # The closing fence has to arrive on a later physical line.
        parts = [first]
        while True:
            sub = await self._reader.readline()
            if not sub:
                logger.debug("classifier.unterminated_fence", lines=len(parts))
                break
            parts.append(sub)
            if FENCE in sub:
                break
        return "".join(parts)

    async def _rewrite_mentions(self, line: str) -> str:
        try:
            return await self._resolver.rewrite(line)
        except Exception as e:
            logger.error("classifier.mention_pass_failed", error=str(e), exc_info=True)
            await self._writer.error(f"Could not parse mentions: {e}")
            return line
