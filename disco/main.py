"""
Main — logging setup and the session runner behind the ``disco`` command.

Logs go to stderr through structlog's stdlib integration so they never mix
with the chat output on stdout.
"""

from __future__ import annotations

import asyncio
import logging
import sys

import structlog
from pydantic import ValidationError
from rich.markup import escape as markup_escape

from disco.config import DiscoConfig
from disco.output import OutputWriter

_logging_configured = False

_SENSITIVE_KEYS = ("content", "text", "payload")
_MAX_DISPLAY_LEN = 80


def _redact_sensitive_fields(logger, method_name, event_dict):
    """
    Structlog processor that keeps credentials and message bodies out of logs.

    Any ``token`` field is masked; message text fields are truncated.
    """
    if "token" in event_dict:
        event_dict["token"] = "[REDACTED]"
    for key in _SENSITIVE_KEYS:
        val = event_dict.get(key)
        if isinstance(val, str) and len(val) > _MAX_DISPLAY_LEN:
            event_dict[key] = val[:_MAX_DISPLAY_LEN] + "... [truncated]"
    return event_dict


def configure_logging(level: int = logging.WARNING) -> None:
    """Configure structlog and standard-library logging.

    Safe to call more than once — subsequent calls are no-ops.
    """
    global _logging_configured  # noqa: PLW0603
    if _logging_configured:
        return
    _logging_configured = True

    logging.basicConfig(format="%(message)s", level=level, stream=sys.stderr)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            _redact_sensitive_fields,
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
    )


def run_session(config: DiscoConfig) -> int:
    """Run an interactive session to completion and return the exit status."""
    from disco.session import DiscoSession

    session = DiscoSession(config)
    try:
        return asyncio.run(session.run())
    except KeyboardInterrupt:
        return 130


def _describe_config_error(error: Exception) -> list[str]:
    """One line per problem, naming the setting when pydantic reports it."""
    if not isinstance(error, ValidationError):
        return [str(error) or type(error).__name__]
    lines = []
    for item in error.errors():
        loc = ".".join(str(part) for part in item.get("loc", ()))
        msg = item.get("msg", "invalid value")
        lines.append(f"{loc}: {msg}" if loc else msg)
    return lines


def load_config(**flags) -> DiscoConfig | None:
    """Build the configuration, printing the problem when it is invalid."""
    try:
        return DiscoConfig(**flags)
    except Exception as e:
        structlog.get_logger(__name__).error("config.invalid", error=str(e))
        problems = _describe_config_error(e)
        console = OutputWriter().console
        console.print("[red]Configuration error:[/red]")
        for problem in problems:
            console.print(f"  {markup_escape(problem)}")
        if any("TOKEN" in problem for problem in problems):
            console.print("[dim]Set DISCORD_TOKEN in the environment or .env.[/dim]")
        return None
