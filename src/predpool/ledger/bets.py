"""Bet ledger - bet records, active-by-owner and all-bets indexes, live cashout values."""

from __future__ import annotations

import time
from collections import defaultdict
from threading import Lock
from typing import TYPE_CHECKING, Any, Callable

import structlog

from predpool.errors import BetNotFound, PredPoolError, UnauthorizedRecorder
from predpool.external.oracle import window_is_open
from predpool.models import Bet, BetStatus, check_transition
from predpool.pricing.cashout import CashoutQuote, simulate_cashout

if TYPE_CHECKING:
    from predpool.external.oracle import Oracle
    from predpool.markets.store import MarketStore
    from predpool.models import Market, ProtocolParameters
    from predpool.storage.writer import LedgerWriter

log = structlog.get_logger(__name__)

ActiveKey = tuple[str, str]  # (owner, market_id)


class BetLedger:
    """Stores every Bet and two indexes per market.

    The active index is an unordered list per (owner, market) plus a position
    map, so removal is swap-with-last and O(1). The all-bets index is
    append-only and drives settlement sweeps and audits.
    """

    def __init__(
        self,
        store: MarketStore,
        params: ProtocolParameters,
        writer: LedgerWriter | None = None,
        clock: Callable[[], int] | None = None,
        oracle: Oracle | None = None,
    ) -> None:
        self._store = store
        self._params = params
        self._oracle = oracle
        self._writer = writer
        self._clock = clock or (lambda: int(time.time()))
        self._bets: dict[int, Bet] = {}
        self._active: dict[ActiveKey, list[int]] = defaultdict(list)
        self._active_pos: dict[int, int] = {}
        self._by_market: dict[str, list[int]] = defaultdict(list)
        self._next_id = 1
        self._recorder: Any = None
        self._lock = Lock()

    # --- Writes ---
    def set_recorder(self, recorder: Any) -> None:
        """Register the single component allowed to call record_bet."""
        self._recorder = recorder

    def record_bet(
        self,
        caller: Any,
        owner: str,
        market_id: str,
        option_index: int,
        amount: int,
        potential_payout: int,
        locked_odds: int,
    ) -> int:
        """Store a new Active bet and index it. Returns the new bet id."""
        if self._recorder is None or caller is not self._recorder:
            raise UnauthorizedRecorder(caller=type(caller).__name__)
        with self._lock:
            bet = Bet(
                bet_id=self._next_id,
                owner=owner,
                market_id=market_id,
                option_index=option_index,
                amount=amount,
                potential_payout=potential_payout,
                locked_odds=locked_odds,
                created_at=self._clock(),
            )
            self._next_id += 1
            self._bets[bet.bet_id] = bet
            self._add_active(bet)
            self._by_market[market_id].append(bet.bet_id)
        if self._writer is not None:
            self._writer.save_bet(bet)
        return bet.bet_id

    def update_bet_status(self, bet_id: int, new_status: BetStatus) -> Bet:
        """Transition a bet. Same-status calls are no-ops."""
        with self._lock:
            bet = self._bets.get(bet_id)
            if bet is None:
                raise BetNotFound(bet_id=bet_id)
            if bet.status is new_status:
                return bet.model_copy()
            check_transition(bet_id, bet.status, new_status)
            if bet.status is BetStatus.ACTIVE:
                self._remove_active(bet)
            bet.status = new_status
            updated = bet.model_copy()
        if self._writer is not None:
            self._writer.save_bet(updated)
        log.debug("bet_status_updated", bet_id=bet_id, status=new_status.value)
        return updated

    def _add_active(self, bet: Bet) -> None:
        ids = self._active[(bet.owner, bet.market_id)]
        self._active_pos[bet.bet_id] = len(ids)
        ids.append(bet.bet_id)

    def _remove_active(self, bet: Bet) -> None:
        key = (bet.owner, bet.market_id)
        ids = self._active[key]
        pos = self._active_pos.pop(bet.bet_id)
        last = ids.pop()
        if last != bet.bet_id:
            ids[pos] = last
            self._active_pos[last] = pos
        if not ids:
            del self._active[key]

    def load(self, bets: list[Bet]) -> None:
        """Rebuild records and indexes from persisted bets (id order)."""
        with self._lock:
            for bet in sorted(bets, key=lambda b: b.bet_id):
                self._bets[bet.bet_id] = bet.model_copy()
                self._by_market[bet.market_id].append(bet.bet_id)
                if bet.is_active:
                    self._add_active(bet)
                self._next_id = max(self._next_id, bet.bet_id + 1)
        log.info("bets_loaded", count=len(bets), next_id=self._next_id)

    # --- Reads ---
    def get_bet(self, bet_id: int) -> Bet:
        with self._lock:
            bet = self._bets.get(bet_id)
            if bet is None:
                raise BetNotFound(bet_id=bet_id)
            return bet.model_copy()

    def get_user_active_bet_ids(self, owner: str, market_id: str) -> list[int]:
        with self._lock:
            return list(self._active.get((owner, market_id), ()))

    def get_user_active_bets(self, owner: str, market_id: str) -> list[Bet]:
        with self._lock:
            return [self._bets[i].model_copy() for i in self._active.get((owner, market_id), ())]

    def get_market_bet_ids(self, market_id: str) -> list[int]:
        with self._lock:
            return list(self._by_market.get(market_id, ()))

    def get_market_bets(self, market_id: str, status: BetStatus | None = None) -> list[Bet]:
        with self._lock:
            bets = [self._bets[i] for i in self._by_market.get(market_id, ())]
            return [b.model_copy() for b in bets if status is None or b.status is status]

    def active_stake(self, owner: str, market_id: str, option_index: int) -> int:
        """Sum of the owner's Active bet amounts on one option."""
        with self._lock:
            return sum(
                self._bets[i].amount
                for i in self._active.get((owner, market_id), ())
                if self._bets[i].option_index == option_index
            )

    @property
    def bet_count(self) -> int:
        with self._lock:
            return len(self._bets)

    # --- Cashout valuation ---
    def quote_cashout(self, bet: Bet, market: Market) -> CashoutQuote:
        """Read-only cashout for one bet against the given market state."""
        return simulate_cashout(
            bet,
            market.initial_liquidity,
            market.current_liquidity,
            self._params.precision,
            self._params.early_exit_fee,
        )

    def calculate_early_exit_value(self, bet_id: int) -> int:
        """Current cashout value of one bet; 0 when it cannot be cashed out."""
        bet = self.get_bet(bet_id)
        return dict(self.get_active_bets_with_cashout(bet.owner, bet.market_id)).get(bet_id, 0)

    def _can_exit(self, market: Market) -> bool:
        """Same market-level gates early_exit applies before simulating."""
        if self._params.paused or not market.is_open or not market.is_binary:
            return False
        return self._oracle is None or window_is_open(self._oracle, market.event_id, self._clock())

    def get_active_bets_with_cashout(self, owner: str, market_id: str) -> list[tuple[int, int]]:
        """[(bet_id, cashout_value)] for the owner's active bets in one market.

        Bets that fail the simulation's preconditions are reported with 0
        instead of failing the whole call.
        """
        # Hold the market lock so liquidity and bet set come from one state
        with self._store.locked(market_id) as market:
            bets = self.get_user_active_bets(owner, market_id)
            can_exit = self._can_exit(market)
            out: list[tuple[int, int]] = []
            for bet in bets:
                if not can_exit:
                    out.append((bet.bet_id, 0))
                    continue
                try:
                    out.append((bet.bet_id, self.quote_cashout(bet, market).cashout))
                except PredPoolError as e:
                    log.debug("cashout_valuation_failed", bet_id=bet.bet_id, code=e.code)
                    out.append((bet.bet_id, 0))
            return out
