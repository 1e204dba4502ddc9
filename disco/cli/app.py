"""CLI application — the ``disco`` click command.

Flags only shape output and notifications; they never change how input is
parsed or how mentions resolve.
"""

from __future__ import annotations

import click

from disco import __version__
from disco.config import DEFAULT_NOTIFY_GEOMETRY


@click.command("disco")
@click.option(
    "-t", "--hide-timestamps", is_flag=True, help="Hide timestamps in channel log"
)
@click.option("-n", "--notify", is_flag=True, help="Enable notifications")
@click.option(
    "-w",
    "--notify-geometry",
    default=DEFAULT_NOTIFY_GEOMETRY,
    show_default=True,
    help="Dimensions to pass through to the notifier",
)
@click.version_option(__version__, prog_name="disco")
def cli(hide_timestamps: bool, notify: bool, notify_geometry: str) -> None:
    """disco - a terminal client for Discord."""
    from disco.main import configure_logging, load_config, run_session

    configure_logging()
    config = load_config(
        hide_timestamps=hide_timestamps,
        notify=notify,
        notify_geometry=notify_geometry,
    )
    if config is None:
        raise SystemExit(1)
    status = run_session(config)
    if status:
        raise SystemExit(status)
