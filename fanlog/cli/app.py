"""Main Typer application — imports and registers all CLI commands.

Entry point: ``fanlog`` (configured via pyproject.toml project.scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from fanlog.cli.commands.probe import probe_cmd
from fanlog.cli.commands.send import send_cmd
from fanlog.cli.commands.show_config import show_config_cmd
from fanlog.config import LogSettings

app = typer.Typer(
    name="fanlog",
    help="fanlog: fanout logging to stdout and remote collectors.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show fanlog's own diagnostics at DEBUG."
    ),
) -> None:
    """Configure diagnostic logging before any command runs."""
    level = "DEBUG" if verbose else LogSettings().log_level.upper()
    diagnostics = logging.getLogger("fanlog")
    diagnostics.handlers.clear()
    diagnostics.addHandler(RichHandler(console=Console(stderr=True), show_path=False))
    diagnostics.setLevel(level)


# Register subcommands
app.command(name="send", help="Broadcast one record through the configured sinks.")(send_cmd)
app.command(name="probe", help="Dial the collector and run the liveness probe.")(probe_cmd)
app.command(name="show-config", help="Show the effective FANLOG_* settings.")(show_config_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
