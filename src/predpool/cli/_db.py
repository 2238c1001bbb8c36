"""Shared read-only connection helper for CLI commands."""

from __future__ import annotations

from pathlib import Path

import typer

from predpool.storage.db import get_connection


def open_read_only(ctx: typer.Context):
    settings = ctx.obj["settings"]
    if not Path(settings.db_path).exists():
        typer.echo(f"No ledger database at {settings.db_path}")
        raise typer.Exit(1)
    return get_connection(settings.db_path, read_only=True)


def fmt_units(value: int, decimals: int = 18) -> str:
    """Render integer base units as a decimal token amount."""
    whole, frac = divmod(value, 10**decimals)
    return f"{whole}.{frac:0{decimals}d}"[: len(str(whole)) + 5]
