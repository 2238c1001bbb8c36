"""Markets subcommand: list, show."""

from __future__ import annotations

import typer

from predpool.cli._db import fmt_units, open_read_only
from predpool.pricing import curve
from predpool.storage.markets import get_market
from predpool.storage.markets import list_markets as storage_list_markets

app = typer.Typer(help="Market listing and detail")


@app.command("list")
def list_markets(
    ctx: typer.Context,
    open_only: bool = typer.Option(False, "--open", help="Show only markets that are neither settled nor canceled"),
) -> None:
    """List markets in the ledger."""
    conn = open_read_only(ctx)
    try:
        rows = storage_list_markets(conn, open_only=open_only)
        for r in rows:
            state = "settled" if r["settled"] else "canceled" if r["canceled"] else "open"
            names = "/".join(r["option_names"])
            typer.echo(f"  {r['market_id'][:20]:<20}  {state:<8}  {fmt_units(r['total_liquidity']):>14}  {names}")
        typer.echo(f"Total: {len(rows)} markets")
    finally:
        conn.close()


@app.command("show")
def show(
    ctx: typer.Context,
    market_id: str = typer.Argument(..., help="Market ID"),
    precision: int = typer.Option(10000, "--precision", help="Odds precision used by the ledger"),
) -> None:
    """Show liquidity, reserves, bet totals and odds for one market."""
    conn = open_read_only(ctx)
    try:
        market = get_market(conn, market_id)
        if market is None:
            typer.echo(f"Market not found: {market_id}")
            raise typer.Exit(1)
        odds = curve.all_odds(market.initial_liquidity, market.current_liquidity, precision)
        typer.echo(f"Market: {market.market_id}  Event: {market.event_id}")
        typer.echo(f"Settled: {market.settled}  Canceled: {market.canceled}  Winner: {market.winning_option_index}")
        for i, name in enumerate(market.option_names):
            typer.echo(
                f"  [{i}] {name:<12} liquidity={fmt_units(market.current_liquidity[i])}"
                f"  reserve={fmt_units(market.reserve(i))}"
                f"  bets={fmt_units(market.total_bets[i])}  odds={odds[i] / precision:.4f}"
            )
        typer.echo(f"Total liquidity: {fmt_units(market.total_liquidity)}  Fees: {fmt_units(market.total_fees)}")
        typer.echo(f"Providers: {len(market.provider_list)}")
    finally:
        conn.close()
