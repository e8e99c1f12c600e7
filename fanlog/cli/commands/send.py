"""``fanlog send`` — broadcast one record synchronously.

Builds the logger from FANLOG_* settings, writes the message through
every configured sink (optionally via a tagged child logger), and
reports any sink that failed.
"""

from __future__ import annotations

import typer
from rich.console import Console

from fanlog.config import LogSettings
from fanlog.routing.broadcaster import BroadcastError
from fanlog.routing.factory import logger_from_settings

console = Console(stderr=True)


def send_cmd(
    message: str = typer.Argument(..., help="The record to send."),
    tag: list[str] = typer.Option(
        [],
        "--tag",
        "-t",
        help="Send through a child logger carrying these tags (repeatable).",
    ),
) -> None:
    """Broadcast MESSAGE to stdout and/or the configured collector.

    Exits with status 1 if any sink rejects the record.
    """
    settings = LogSettings()
    log = logger_from_settings(settings)
    target = log.new_child_logger(*tag) if tag else log
    try:
        target.write(f"{message}\n".encode("utf-8"))
    except BroadcastError as exc:
        for name, error in exc.failures:
            console.print(f"[red]Sink {name} failed:[/red] {error}")
        raise typer.Exit(code=1) from exc
    finally:
        log.close()
