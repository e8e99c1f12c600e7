"""``fanlog probe`` — check that a collector endpoint is reachable.

Dials the collector with the configured timeout, runs the zero-timeout
liveness probe on the fresh connection, and reports both steps.  No
record is sent.
"""

from __future__ import annotations

import time

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from fanlog.config import LogSettings
from fanlog.routing.sinks.network import ConfigurationError, NetworkSink

console = Console()


def _run_probe(sink: NetworkSink) -> list[tuple[str, bool, str]]:
    """Dial and probe, returning ``(step, ok, detail)`` rows."""
    rows: list[tuple[str, bool, str]] = []

    started = time.monotonic()
    try:
        sink.open()
    except ConfigurationError as exc:
        rows.append(("Configuration", False, str(exc)))
        return rows
    except OSError as exc:
        rows.append(("Dial", False, f"{type(exc).__name__}: {exc}"))
        return rows
    elapsed_ms = (time.monotonic() - started) * 1000
    rows.append(("Dial", True, f"{elapsed_ms:.1f} ms"))

    alive = sink.probe_alive()
    rows.append(("Liveness probe", alive, "idle, no data pending" if alive else "peer closed or reset"))
    return rows


def probe_cmd(
    host: str = typer.Option(None, "--host", "-H", help="Collector host (default: FANLOG_HOST)."),
    port: int = typer.Option(None, "--port", "-p", help="Collector port (default: FANLOG_PORT)."),
    timeout: float = typer.Option(None, "--timeout", help="Dial timeout in seconds."),
) -> None:
    """Dial the collector and run the liveness probe.

    Exits with status 1 if either step fails.
    """
    settings = LogSettings()
    sink = NetworkSink(
        settings.token or "probe",
        host or settings.host,
        port or settings.port,
        dial_timeout=timeout if timeout is not None else settings.dial_timeout,
    )

    with sink:
        rows = _run_probe(sink)

    table = Table(show_header=True, header_style="bold cyan", expand=True)
    table.add_column("Step", min_width=16)
    table.add_column("Status", width=10, justify="center")
    table.add_column("Details")

    all_ok = True
    for step, ok, detail in rows:
        if not ok:
            all_ok = False
        table.add_row(step, "[green]OK[/green]" if ok else "[red]FAILED[/red]", detail)

    host_shown, port_shown = sink.endpoint
    console.print()
    console.print(
        Panel(
            table,
            title=f"[bold]Collector {host_shown}:{port_shown}[/bold]",
            border_style="green" if all_ok else "red",
            padding=(1, 2),
        )
    )
    console.print()

    if not all_ok:
        raise typer.Exit(code=1)
