"""``fanlog show-config`` — print the effective settings."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from fanlog.config import LogSettings

console = Console()


def _mask(token: str) -> str:
    if not token:
        return "[dim]unset[/dim]"
    return token[:4] + "…" if len(token) > 4 else "****"


def show_config_cmd() -> None:
    """Show FANLOG_* settings as the logger would see them."""
    settings = LogSettings()

    table = Table(title="fanlog settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("token", _mask(settings.token))
    table.add_row("host", settings.host or "[dim]unset[/dim]")
    table.add_row("port", str(settings.port) if settings.port else "[dim]unset[/dim]")
    table.add_row("sink_prefix", settings.sink_prefix or "[dim]none[/dim]")
    table.add_row("dial_timeout", f"{settings.dial_timeout:g}s")
    table.add_row("queued_network", str(settings.queued_network))
    table.add_row("local_sink", str(settings.local_sink))
    table.add_row("async_queue_size", str(settings.async_queue_size))
    table.add_row("log_level", settings.log_level)

    console.print(table)
    if settings.has_collector:
        console.print("[green]Collector configured.[/green]")
    else:
        console.print("[yellow]No collector configured; stdout only.[/yellow]")
