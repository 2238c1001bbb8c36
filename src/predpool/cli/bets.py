"""Bets subcommand: list."""

from __future__ import annotations

import typer

from predpool.cli._db import fmt_units, open_read_only
from predpool.models import BetStatus
from predpool.storage.bets import list_bets

app = typer.Typer(help="Bet ledger queries")


@app.command("list")
def list_(
    ctx: typer.Context,
    market: str | None = typer.Option(None, "--market", "-m", help="Filter by market ID"),
    owner: str | None = typer.Option(None, "--owner", "-o", help="Filter by owner"),
    status: BetStatus | None = typer.Option(None, "--status", "-s", help="Filter by status"),
) -> None:
    """List bets in id order."""
    conn = open_read_only(ctx)
    try:
        bets = list_bets(conn, market_id=market, owner=owner, status=status)
        for b in bets:
            typer.echo(
                f"  #{b.bet_id:<6} {b.market_id[:16]:<16} {b.owner[:16]:<16} opt={b.option_index}"
                f"  amount={fmt_units(b.amount)}  payout={fmt_units(b.potential_payout)}"
                f"  odds={b.locked_odds}  {b.status.value}"
            )
        typer.echo(f"Total: {len(bets)} bets")
    finally:
        conn.close()
