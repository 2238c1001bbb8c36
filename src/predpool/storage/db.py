"""DuckDB connection and schema init."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import duckdb

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

SCHEMA_SQL = """
CREATE SEQUENCE IF NOT EXISTS market_event_seq START 1;

-- One row per market id. Amount vectors are JSON text (values exceed 64 bits)
CREATE TABLE IF NOT EXISTS markets (
    market_id            VARCHAR PRIMARY KEY,
    event_id             VARCHAR NOT NULL,
    initialized          BOOLEAN NOT NULL,
    settled              BOOLEAN NOT NULL,
    canceled             BOOLEAN NOT NULL,
    winning_option_index INTEGER,
    settlement_deadline  BIGINT NOT NULL,
    option_names         JSON NOT NULL,
    initial_liquidity    VARCHAR NOT NULL,
    current_liquidity    VARCHAR NOT NULL,
    total_bets           VARCHAR NOT NULL,
    total_liquidity      VARCHAR NOT NULL,
    total_fees           VARCHAR NOT NULL,
    providers            VARCHAR NOT NULL,
    provider_list        JSON NOT NULL,
    winning_stake        VARCHAR NOT NULL,
    winning_pool         VARCHAR NOT NULL,
    claimed_stake        VARCHAR NOT NULL,
    claimed_payout       VARCHAR NOT NULL,
    created_at           BIGINT,
    updated_at           BIGINT NOT NULL
);

-- One row per bet, status updated in place and rows never deleted
CREATE TABLE IF NOT EXISTS bets (
    bet_id           BIGINT PRIMARY KEY,
    owner            VARCHAR NOT NULL,
    market_id        VARCHAR NOT NULL,
    option_index     INTEGER NOT NULL,
    amount           VARCHAR NOT NULL,
    potential_payout VARCHAR NOT NULL,
    locked_odds      BIGINT NOT NULL,
    created_at       BIGINT NOT NULL,
    status           VARCHAR NOT NULL,
    updated_at       BIGINT NOT NULL
);

-- Append-only notification log
CREATE TABLE IF NOT EXISTS market_events (
    id          BIGINT PRIMARY KEY DEFAULT nextval('market_event_seq'),
    event_type  VARCHAR NOT NULL,
    market_id   VARCHAR NOT NULL,
    event_ts    BIGINT NOT NULL,
    payload     VARCHAR NOT NULL
);
"""


def get_connection(db_path: str | Path, read_only: bool = False) -> DuckDBPyConnection:
    """Return a DuckDB connection. Caller must close or use as context manager.
    Use read_only=True for inspection while another process holds the write lock."""
    path = Path(db_path)
    if not read_only:
        path.parent.mkdir(parents=True, exist_ok=True)
    return duckdb.connect(str(path), read_only=read_only)


def init_schema(conn: DuckDBPyConnection) -> None:
    """Create tables and sequences if they do not exist."""
    for stmt in SCHEMA_SQL.split(";"):
        stmt = stmt.strip()
        if stmt:
            try:
                conn.execute(stmt)
            except duckdb.Error as e:
                if "already exists" not in str(e).lower():
                    raise
