"""fanlog CLI — Typer-based command-line interface.

Provides the ``fanlog`` command with subcommands for sending a record
through the configured sinks, probing a collector, and showing the
effective configuration.

All output uses Rich for formatted terminal display.
"""
