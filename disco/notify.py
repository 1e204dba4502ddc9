"""
Desktop notifications through an external notifier program.

The notifier (``statusmsg`` by default) is launched as
``<command> -w <geometry> <text>``; the geometry string is passed through
untouched.  A notifier that is missing or fails only produces a log line.
"""

from __future__ import annotations

import asyncio

import structlog

logger = structlog.get_logger(__name__)

_MAX_NOTIFY_TEXT: int = 200


class Notifier:
    def __init__(self, command: str, extra_args: list[str] | None = None) -> None:
        self._command = command
        self._extra_args = list(extra_args or [])

    def build_argv(self, text: str) -> list[str]:
        if len(text) > _MAX_NOTIFY_TEXT:
            text = text[:_MAX_NOTIFY_TEXT] + "…"
        return [self._command, *self._extra_args, text]

    async def notify(self, text: str) -> bool:
        """Launch the notifier without waiting for it to exit."""
        argv = self.build_argv(text)
        try:
            await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except (OSError, ValueError) as e:
            logger.warning("notify.launch_failed", command=self._command, error=str(e))
            return False
        return True
