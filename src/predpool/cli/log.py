"""Log subcommand: export, stats."""

from __future__ import annotations

import typer

from predpool.cli._db import open_read_only
from predpool.storage.event_log import log_stats
from predpool.storage.export import export_table_to_parquet

app = typer.Typer(help="Event log export and statistics")


@app.command("export")
def export(
    ctx: typer.Context,
    table: str = typer.Option("market_events", "--table", "-t", help="bets or market_events"),
    market: str | None = typer.Option(None, "--market", "-m", help="Filter by market ID"),
    output: str = typer.Option("events.parquet", "--output", "-o", help="Output path"),
) -> None:
    """Export bets or market events to Parquet."""
    conn = open_read_only(ctx)
    try:
        count = export_table_to_parquet(conn, table, output, market_id=market)
        typer.echo(f"Exported {count} rows to {output}")
    finally:
        conn.close()


@app.command("stats")
def stats(ctx: typer.Context) -> None:
    """Show event log statistics (counts, time range, by type and market)."""
    conn = open_read_only(ctx)
    try:
        s = log_stats(conn)
        typer.echo(f"Total events: {s['total_events']}")
        typer.echo(f"Min event_ts: {s.get('min_event_ts')}")
        typer.echo(f"Max event_ts: {s.get('max_event_ts')}")
        for row in s["by_type"]:
            typer.echo(f"  {row['event_type']:<18} {row['count']}")
        if s.get("by_market"):
            typer.echo("By market (top 20):")
            for row in s["by_market"]:
                typer.echo(f"  {row['market_id']}  {row['count']}")
    finally:
        conn.close()
