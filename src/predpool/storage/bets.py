"""Bet persistence - one row per bet, status updated in place."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

from predpool.models import Bet, BetStatus

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

_SELECT = (
    "SELECT bet_id, owner, market_id, option_index, amount, potential_payout, locked_odds, "
    "created_at, status FROM bets"
)


def _from_row(row: tuple[Any, ...]) -> Bet:
    return Bet(
        bet_id=row[0],
        owner=row[1],
        market_id=row[2],
        option_index=row[3],
        amount=int(row[4]),
        potential_payout=int(row[5]),
        locked_odds=row[6],
        created_at=row[7],
        status=BetStatus(row[8]),
    )


def upsert_bet(conn: DuckDBPyConnection, bet: Bet) -> None:
    """Insert a bet or update its status."""
    conn.execute(
        """
        INSERT INTO bets (bet_id, owner, market_id, option_index, amount, potential_payout, locked_odds, created_at, status, updated_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT (bet_id) DO UPDATE SET
            status = excluded.status,
            updated_at = excluded.updated_at
        """,
        [
            bet.bet_id,
            bet.owner,
            bet.market_id,
            bet.option_index,
            str(bet.amount),
            str(bet.potential_payout),
            bet.locked_odds,
            bet.created_at,
            bet.status.value,
            int(time.time() * 1000),
        ],
    )


def get_bet(conn: DuckDBPyConnection, bet_id: int) -> Bet | None:
    row = conn.execute(f"{_SELECT} WHERE bet_id = ?", [bet_id]).fetchone()
    return _from_row(row) if row else None


def list_bets(
    conn: DuckDBPyConnection,
    market_id: str | None = None,
    owner: str | None = None,
    status: BetStatus | None = None,
) -> list[Bet]:
    """Bets in id order, optionally filtered."""
    conditions = []
    params: list[Any] = []
    if market_id:
        conditions.append("market_id = ?")
        params.append(market_id)
    if owner:
        conditions.append("owner = ?")
        params.append(owner)
    if status is not None:
        conditions.append("status = ?")
        params.append(status.value)
    where = " AND ".join(conditions) if conditions else "1=1"
    rows = conn.execute(f"{_SELECT} WHERE {where} ORDER BY bet_id ASC", params).fetchall()
    return [_from_row(r) for r in rows]

