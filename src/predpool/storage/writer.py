"""Serialized write-through access to the ledger database."""

from __future__ import annotations

from pathlib import Path
from threading import Lock
from typing import TYPE_CHECKING

import structlog

from predpool.storage.bets import upsert_bet
from predpool.storage.db import get_connection, init_schema
from predpool.storage.event_log import append_event
from predpool.storage.markets import upsert_market

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

    from predpool.models import Bet, Market, MarketEvent

log = structlog.get_logger(__name__)


class LedgerWriter:
    """Owns one DuckDB connection; all writes go through a single lock."""

    def __init__(self, conn: DuckDBPyConnection) -> None:
        self.conn = conn
        self._lock = Lock()

    @classmethod
    def open(cls, db_path: str | Path) -> LedgerWriter:
        conn = get_connection(db_path)
        init_schema(conn)
        log.debug("ledger_db_opened", db_path=str(db_path))
        return cls(conn)

    def save_market(self, market: Market) -> None:
        with self._lock:
            upsert_market(self.conn, market)

    def save_bet(self, bet: Bet) -> None:
        with self._lock:
            upsert_bet(self.conn, bet)

    def append_event(self, event: MarketEvent) -> None:
        with self._lock:
            append_event(self.conn, event)

    def close(self) -> None:
        with self._lock:
            self.conn.close()
