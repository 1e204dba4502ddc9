"""
Output writer — the one place terminal output is produced.

The read loop (prompts, menus, error reports) and the inbound printer task
both write to the terminal.  Every write takes ``_lock`` so lines from the two
paths never interleave; a multi-line block holds the lock for its whole
duration via ``exclusive()``.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from rich.console import Console
from rich.markup import escape as markup_escape

from disco.cli.formatters import get_console


class OutputWriter:
    """Serialized writer around a Rich console."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console if console is not None else get_console()
        self._lock = asyncio.Lock()

    @property
    def console(self) -> Console:
        return self._console

    @asynccontextmanager
    async def exclusive(self) -> AsyncIterator[Console]:
        """Hold the output for a multi-line block."""
        async with self._lock:
            yield self._console

    async def write(self, *renderables: Any, **kwargs: Any) -> None:
        async with self._lock:
            self._console.print(*renderables, **kwargs)

    async def info(self, text: str) -> None:
        await self.write(f"[dim]{markup_escape(text)}[/dim]")

    async def header(self, text: str) -> None:
        await self.write(f"[bold]{markup_escape(text)}[/bold]")

    async def error(self, text: str) -> None:
        await self.write(f"[red]Error: {markup_escape(text)}[/red]")
