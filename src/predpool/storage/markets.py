"""Market persistence."""

from __future__ import annotations

import json
import time
from typing import TYPE_CHECKING, Any

from predpool.models import Market

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

_COLUMNS = [
    "market_id",
    "event_id",
    "initialized",
    "settled",
    "canceled",
    "winning_option_index",
    "settlement_deadline",
    "option_names",
    "initial_liquidity",
    "current_liquidity",
    "total_bets",
    "total_liquidity",
    "total_fees",
    "providers",
    "provider_list",
    "winning_stake",
    "winning_pool",
    "claimed_stake",
    "claimed_payout",
    "created_at",
]

# Amount columns are stored as text; 18-decimal values overflow BIGINT.
_INT_TEXT = ("total_liquidity", "total_fees", "winning_stake", "winning_pool", "claimed_stake", "claimed_payout")
_JSON = ("option_names", "initial_liquidity", "current_liquidity", "total_bets", "providers", "provider_list")


def _to_row(market: Market) -> list[Any]:
    data = market.model_dump()
    row = []
    for col in _COLUMNS:
        value = data[col]
        if col in _INT_TEXT:
            value = str(value)
        elif col in _JSON:
            value = json.dumps(value)
        row.append(value)
    return row


def _from_row(row: tuple[Any, ...]) -> Market:
    data = dict(zip(_COLUMNS, row))
    for col in _INT_TEXT:
        data[col] = int(data[col])
    for col in _JSON:
        raw = data[col]
        data[col] = json.loads(raw) if isinstance(raw, str) else raw
    return Market.model_validate(data)


def upsert_market(conn: DuckDBPyConnection, market: Market) -> None:
    """Insert or replace a market row."""
    cols = ", ".join(_COLUMNS)
    placeholders = ", ".join("?" for _ in range(len(_COLUMNS) + 1))
    updates = ",\n            ".join(f"{c} = excluded.{c}" for c in _COLUMNS[1:])
    conn.execute(
        f"""
        INSERT INTO markets ({cols}, updated_at)
        VALUES ({placeholders})
        ON CONFLICT (market_id) DO UPDATE SET
            {updates},
            updated_at = excluded.updated_at
        """,
        _to_row(market) + [int(time.time() * 1000)],
    )


def get_market(conn: DuckDBPyConnection, market_id: str) -> Market | None:
    row = conn.execute(
        f"SELECT {', '.join(_COLUMNS)} FROM markets WHERE market_id = ?",
        [market_id],
    ).fetchone()
    return _from_row(row) if row else None


def load_markets(conn: DuckDBPyConnection) -> list[Market]:
    """Load every persisted market."""
    rows = conn.execute(f"SELECT {', '.join(_COLUMNS)} FROM markets ORDER BY market_id").fetchall()
    return [_from_row(r) for r in rows]


def list_markets(conn: DuckDBPyConnection, open_only: bool = False) -> list[dict]:
    """List market summaries as dicts (for inspection)."""
    sql = (
        "SELECT market_id, event_id, settled, canceled, winning_option_index, option_names, "
        "current_liquidity, total_liquidity, total_fees FROM markets"
    )
    if open_only:
        sql += " WHERE NOT settled AND NOT canceled"
    rows = conn.execute(sql + " ORDER BY market_id").fetchall()
    columns = [
        "market_id",
        "event_id",
        "settled",
        "canceled",
        "winning_option_index",
        "option_names",
        "current_liquidity",
        "total_liquidity",
        "total_fees",
    ]
    out = []
    for r in rows:
        item = dict(zip(columns, r))
        item["option_names"] = json.loads(item["option_names"])
        item["current_liquidity"] = json.loads(item["current_liquidity"])
        item["total_liquidity"] = int(item["total_liquidity"])
        item["total_fees"] = int(item["total_fees"])
        out.append(item)
    return out
