"""Market event append and query - append-only notification log."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

    from predpool.models import MarketEvent


def append_event(conn: DuckDBPyConnection, event: MarketEvent) -> None:
    """Append one notification event."""
    conn.execute(
        "INSERT INTO market_events (event_type, market_id, event_ts, payload) VALUES (?, ?, ?, ?)",
        [event.event_type, event.market_id, event.timestamp, json.dumps(event.payload())],
    )


def list_events(
    conn: DuckDBPyConnection,
    market_id: str | None = None,
    event_type: str | None = None,
) -> list[dict[str, Any]]:
    """Events in append order as dicts with decoded payload."""
    conditions = []
    params: list[Any] = []
    if market_id:
        conditions.append("market_id = ?")
        params.append(market_id)
    if event_type:
        conditions.append("event_type = ?")
        params.append(event_type)
    where = " AND ".join(conditions) if conditions else "1=1"
    rows = conn.execute(
        f"SELECT id, event_type, market_id, event_ts, payload FROM market_events WHERE {where} ORDER BY id ASC",
        params,
    ).fetchall()
    out = []
    for r in rows:
        try:
            payload = json.loads(r[4]) if isinstance(r[4], str) else r[4]
        except (TypeError, json.JSONDecodeError):
            payload = {}
        out.append({"id": r[0], "event_type": r[1], "market_id": r[2], "event_ts": r[3], "payload": payload})
    return out


def log_stats(conn: DuckDBPyConnection) -> dict[str, Any]:
    """Return event log statistics: total count, min/max event_ts, counts by type and market."""
    total = conn.execute("SELECT COUNT(*) FROM market_events").fetchone()[0]
    range_row = conn.execute("SELECT MIN(event_ts), MAX(event_ts) FROM market_events").fetchone()
    min_ts, max_ts = range_row[0], range_row[1]
    by_type = conn.execute(
        "SELECT event_type, COUNT(*) AS cnt FROM market_events GROUP BY event_type ORDER BY cnt DESC"
    ).fetchall()
    by_market = conn.execute(
        "SELECT market_id, COUNT(*) AS cnt FROM market_events GROUP BY market_id ORDER BY cnt DESC LIMIT 20"
    ).fetchall()
    return {
        "total_events": total,
        "min_event_ts": min_ts,
        "max_event_ts": max_ts,
        "by_type": [{"event_type": r[0], "count": r[1]} for r in by_type],
        "by_market": [{"market_id": r[0], "count": r[1]} for r in by_market],
    }
