"""Export ledger tables to Parquet."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

_TABLES = ("bets", "market_events")


def export_table_to_parquet(
    conn: DuckDBPyConnection,
    table: str,
    output_path: str | Path,
    market_id: str | None = None,
) -> int:
    """Export bets or market_events to a Parquet file. Optional filter by market_id. Returns row count."""
    if table not in _TABLES:
        raise ValueError(f"cannot export table {table!r}; choose from {list(_TABLES)}")
    path = Path(output_path).resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    path_str = str(path).replace("'", "''")
    if market_id:
        conn.execute(
            f"COPY (SELECT * FROM {table} WHERE market_id = ?) TO '{path_str}' (FORMAT PARQUET)",
            [market_id],
        )
        count = conn.execute(f"SELECT COUNT(*) FROM {table} WHERE market_id = ?", [market_id]).fetchone()[0]
    else:
        conn.execute(f"COPY (SELECT * FROM {table}) TO '{path_str}' (FORMAT PARQUET)")
        count = conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
    return count
