"""Keyed market storage with a per-market single-writer lock."""

from __future__ import annotations

from contextlib import contextmanager
from threading import Lock, RLock
from typing import TYPE_CHECKING, Iterator

import structlog

from predpool.errors import InvalidMarket, MarketExists
from predpool.models import Market

if TYPE_CHECKING:
    from predpool.storage.writer import LedgerWriter

log = structlog.get_logger(__name__)


def check_invariants(market: Market) -> None:
    """Raise ValueError if the market's stored state is inconsistent."""
    n = market.option_count
    if not (len(market.initial_liquidity) == len(market.current_liquidity) == len(market.total_bets) == n):
        raise ValueError(f"market {market.market_id}: per-option sequences differ in length")
    if any(v < 0 for v in market.current_liquidity) or any(v < 0 for v in market.total_bets):
        raise ValueError(f"market {market.market_id}: negative liquidity or bet total")
    # Either unfunded (all zero) or every option strictly positive
    if any(v > 0 for v in market.current_liquidity) and not market.liquidity_is_positive():
        raise ValueError(f"market {market.market_id}: option liquidity drained to zero")
    expected = sum(market.current_liquidity) + sum(market.reserves)
    if market.total_liquidity != expected:
        raise ValueError(
            f"market {market.market_id}: total_liquidity {market.total_liquidity} != {expected}"
        )
    if market.settled and market.canceled:
        raise ValueError(f"market {market.market_id}: settled and canceled")


class MarketStore:
    """market_id -> Market. Writers hold ``locked(market_id)`` for the whole
    read-modify-write; readers get deep-copied snapshots taken under the same
    lock, so they never observe a half-updated liquidity vector."""

    def __init__(self, writer: LedgerWriter | None = None) -> None:
        self._markets: dict[str, Market] = {}
        self._locks: dict[str, RLock] = {}
        self._registry_lock = Lock()
        self._writer = writer

    def _lock_for(self, market_id: str) -> RLock:
        with self._registry_lock:
            lock = self._locks.get(market_id)
            if lock is None or market_id not in self._markets:
                raise InvalidMarket(market_id=market_id)
            return lock

    def create(self, market: Market) -> Market:
        """Store a new market. Markets are never removed."""
        market.recompute_total_liquidity()
        check_invariants(market)
        with self._registry_lock:
            if market.market_id in self._markets:
                raise MarketExists(market_id=market.market_id)
            self._markets[market.market_id] = market.model_copy(deep=True)
            self._locks[market.market_id] = RLock()
        if self._writer is not None:
            self._writer.save_market(market)
        return market.model_copy(deep=True)

    def load(self, markets: list[Market]) -> None:
        """Restore persisted markets (startup)."""
        with self._registry_lock:
            for m in markets:
                self._markets[m.market_id] = m.model_copy(deep=True)
                self._locks.setdefault(m.market_id, RLock())
        log.info("markets_loaded", count=len(markets))

    def exists(self, market_id: str) -> bool:
        with self._registry_lock:
            return market_id in self._markets

    def ids(self) -> list[str]:
        with self._registry_lock:
            return sorted(self._markets)

    def get(self, market_id: str) -> Market:
        """Consistent snapshot (deep copy) of one market."""
        with self._lock_for(market_id):
            return self._markets[market_id].model_copy(deep=True)

    @contextmanager
    def locked(self, market_id: str) -> Iterator[Market]:
        """Hold the market's write lock and yield a working copy.

        Nothing is stored unless the caller passes the copy to ``commit``
        while still inside the block.
        """
        lock = self._lock_for(market_id)
        with lock:
            yield self._markets[market_id].model_copy(deep=True)

    def commit(self, market: Market) -> None:
        """Replace the stored market. Caller must hold ``locked(market_id)``."""
        market.recompute_total_liquidity()
        check_invariants(market)
        lock = self._lock_for(market.market_id)
        with lock:
            self._markets[market.market_id] = market.model_copy(deep=True)
        if self._writer is not None:
            self._writer.save_market(market)
