"""CLI formatters — console factory, message lines, menu tables."""

from __future__ import annotations

import time
from typing import Any

from rich.console import Console
from rich.table import Table
from rich.text import Text

from disco.types import InboundMessage

_EMOJI_NAME_CHARS = frozenset(
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_"
)


def get_console(no_color: bool = False, **kwargs: Any) -> Console:
    """Get a Rich Console, optionally with color disabled."""
    return Console(no_color=no_color, highlight=False, **kwargs)


def collapse_custom_emoji(text: str) -> str:
    """Rewrite custom guild emoji ``<:name:1234>`` to their ``:name:`` form.

    Only the static form is collapsed: ``<`` then ``:name:`` (word characters)
    then one or more digits then ``>``.  Anything else is left untouched.
    """
    out: list[str] = []
    i = 0
    n = len(text)
    while i < n:
        if text[i] == "<" and i + 1 < n and text[i + 1] == ":":
            j = i + 2
            while j < n and text[j] in _EMOJI_NAME_CHARS:
                j += 1
            if j > i + 2 and j < n and text[j] == ":":
                k = j + 1
                while k < n and "0" <= text[k] <= "9":
                    k += 1
                if k > j + 1 and k < n and text[k] == ">":
                    out.append(text[i + 1 : j + 1])
                    i = k + 1
                    continue
        out.append(text[i])
        i += 1
    return "".join(out)


def format_timestamp(ts: float) -> str:
    return time.strftime("%H:%M", time.localtime(ts))


def format_message(message: InboundMessage, *, hide_timestamps: bool = False) -> Text:
    """Render one inbound message as a single styled line."""
    line = Text()
    if not hide_timestamps:
        line.append(f"[{format_timestamp(message.timestamp)}] ", style="dim")
    line.append(f"<{message.author.display_name}> ", style="bold cyan")
    line.append(collapse_custom_emoji(message.content))
    return line


def build_menu(title: str, labels: list[str]) -> Table:
    """Build a numbered (1-based) selection table."""
    table = Table(title=title, show_header=False, box=None, title_justify="left")
    table.add_column("#", style="bold", justify="right")
    table.add_column("name")
    for index, label in enumerate(labels, start=1):
        table.add_row(str(index), Text(label))
    return table
