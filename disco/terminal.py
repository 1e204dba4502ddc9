"""
Terminal line source.

``StdinLineReader.readline()`` behaves like a stream's ``readline``: the
returned physical line keeps its trailing newline, and ``""`` means end of
input.  The blocking read runs in a dedicated daemon thread so the event
loop (and with it the inbound printer) keeps running while the user types.
"""

from __future__ import annotations

import asyncio
import sys
import threading
from typing import Any, Callable, Protocol, TextIO


class LineReader(Protocol):
    async def readline(self) -> str:
        ...


async def run_blocking_call(fn: Callable[[], Any]) -> Any:
    """
    Run a blocking callable in a dedicated daemon thread.

    A plain daemon thread (rather than the default executor) means a read
    still blocked on stdin never holds up interpreter shutdown.
    """
    loop = asyncio.get_running_loop()
    done = asyncio.Event()
    box: dict[str, Any] = {}

    def _invoke() -> None:
        try:
            box["result"] = fn()
        except BaseException as exc:
            box["error"] = exc
        finally:
            try:
                loop.call_soon_threadsafe(done.set)
            except RuntimeError:
                pass

    thread = threading.Thread(target=_invoke, daemon=True)
    thread.start()
    await done.wait()

    if "error" in box:
        raise box["error"]
    return box.get("result")


class StdinLineReader:
    """Reads physical lines from *stream* (stdin by default)."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream if stream is not None else sys.stdin
        self._eof = False

    async def readline(self) -> str:
        if self._eof:
            return ""
        line = await run_blocking_call(self._stream.readline)
        if not line:
            self._eof = True
        return line
