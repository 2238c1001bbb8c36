"""Pricing engine - odds, bet placement, potential-return previews, early exit.

Every mutating call holds the market's write lock for its whole
read-validate-transfer-commit sequence. Preconditions and the full quote are
computed on a working copy first; the value transfer is the last fallible
step, and only then is the market committed and the ledger updated.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Callable

import structlog

from predpool.errors import (
    BetNotActive,
    MarketClosed,
    NotBetOwner,
    SlippageExceeded,
    WindowClosed,
    ZeroAmount,
)
from predpool.external.oracle import window_is_open
from predpool.markets.store import check_invariants
from predpool.models import BetCashedOut, BetPlaced, BetStatus, OddsChanged
from predpool.pricing import curve

if TYPE_CHECKING:
    from predpool.external.assets import AssetLedger
    from predpool.external.oracle import Oracle
    from predpool.ledger.bets import BetLedger
    from predpool.markets.store import MarketStore
    from predpool.models import Market, ProtocolParameters
    from predpool.notifications import NotificationBus

log = structlog.get_logger(__name__)


class PricingEngine:
    def __init__(
        self,
        store: MarketStore,
        ledger: BetLedger,
        params: ProtocolParameters,
        oracle: Oracle,
        assets: AssetLedger,
        bus: NotificationBus,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self._store = store
        self._ledger = ledger
        self._params = params
        self._oracle = oracle
        self._assets = assets
        self._bus = bus
        self._clock = clock or (lambda: int(time.time()))
        ledger.set_recorder(self)

    # --- Read-only ---
    def get_odds(self, market_id: str, option_index: int) -> int:
        """Odds for one option, scaled by precision; 0 if the option has no liquidity."""
        market = self._store.get(market_id)
        market.require_option(option_index)
        total = curve.total_remaining_liquidity(market.initial_liquidity, market.current_liquidity)
        return curve.odds_for_option(market.current_liquidity[option_index], total, self._params.precision)

    def get_all_odds(self, market_id: str) -> list[int]:
        market = self._store.get(market_id)
        return curve.all_odds(market.initial_liquidity, market.current_liquidity, self._params.precision)

    def _quote(self, market: Market, option_index: int, amount: int) -> curve.BetQuote:
        return curve.quote_bet(
            market.initial_liquidity,
            market.current_liquidity,
            market.total_bets,
            option_index,
            amount,
            self._params.precision,
            self._params.platform_fee,
        )

    def preview_bet(self, market_id: str, option_index: int, amount: int) -> curve.BetQuote:
        """Full quote for a hypothetical bet against the current market state."""
        market = self._store.get(market_id)
        market.require_initialized()
        market.require_binary()
        if amount <= 0:
            raise ZeroAmount(amount=amount)
        market.require_option(option_index)
        return self._quote(market, option_index, amount)

    def calculate_potential_return(self, market_id: str, option_index: int, amount: int) -> int:
        """Total payout (stake included) a bet would lock in right now."""
        return self.preview_bet(market_id, option_index, amount).potential_return

    # --- Preconditions ---
    def _require_open(self, market: Market) -> None:
        market.require_initialized()
        if market.settled or market.canceled or self._params.paused:
            raise MarketClosed(
                market_id=market.market_id,
                settled=market.settled,
                canceled=market.canceled,
                paused=self._params.paused,
            )

    def _require_window(self, market: Market) -> None:
        now = self._clock()
        if not window_is_open(self._oracle, market.event_id, now):
            start, end = self._oracle.get_betting_window(market.event_id)
            raise WindowClosed(market_id=market.market_id, now=now, start=start, end=end)

    # --- Mutations ---
    def place_bet(
        self,
        owner: str,
        market_id: str,
        option_index: int,
        amount: int,
        min_odds: int = 0,
    ) -> int:
        """Price and place a bet; returns the new bet id."""
        with self._store.locked(market_id) as market:
            self._require_open(market)
            market.require_binary()
            if amount <= 0:
                raise ZeroAmount(amount=amount)
            market.require_option(option_index)
            self._require_window(market)

            quote = self._quote(market, option_index, amount)
            if quote.locked_odds < min_odds:
                raise SlippageExceeded(locked_odds=quote.locked_odds, min_odds=min_odds)

            market.total_bets[option_index] += amount
            market.total_fees += quote.fee
            market.current_liquidity = quote.new_liquidity
            market.recompute_total_liquidity()
            check_invariants(market)

            self._assets.deposit(owner, amount)
            self._store.commit(market)
            bet_id = self._ledger.record_bet(
                self,
                owner,
                market_id,
                option_index,
                amount,
                quote.potential_return,
                quote.locked_odds,
            )
            odds = curve.all_odds(market.initial_liquidity, market.current_liquidity, self._params.precision)

        log.info(
            "bet_placed",
            bet_id=bet_id,
            market_id=market_id,
            owner=owner,
            option_index=option_index,
            amount=amount,
            locked_odds=quote.locked_odds,
            potential_return=quote.potential_return,
        )
        now = self._clock()
        self._bus.publish(
            BetPlaced(
                market_id=market_id,
                timestamp=now,
                bet_id=bet_id,
                owner=owner,
                option_index=option_index,
                amount=amount,
                potential_payout=quote.potential_return,
                locked_odds=quote.locked_odds,
            )
        )
        self._bus.publish(OddsChanged(market_id=market_id, timestamp=now, odds=odds))
        return bet_id

    def early_exit(self, bet_id: int, caller: str) -> int:
        """Cash out an active bet at its current value; returns the amount paid."""
        bet = self._ledger.get_bet(bet_id)
        if bet.owner != caller:
            raise NotBetOwner(bet_id=bet_id, caller=caller)
        with self._store.locked(bet.market_id) as market:
            # Re-read under the market lock; a concurrent exit may have won
            bet = self._ledger.get_bet(bet_id)
            if not bet.is_active:
                raise BetNotActive(bet_id=bet_id, status=bet.status.value)
            self._require_open(market)
            market.require_binary()
            self._require_window(market)

            quote = self._ledger.quote_cashout(bet, market)

            market.current_liquidity = quote.new_liquidity
            market.total_fees += quote.fee
            market.recompute_total_liquidity()
            check_invariants(market)

            self._assets.withdraw(caller, quote.cashout)
            self._store.commit(market)
            self._ledger.update_bet_status(bet_id, BetStatus.CASHED_OUT)
            odds = curve.all_odds(market.initial_liquidity, market.current_liquidity, self._params.precision)

        log.info(
            "early_exit",
            bet_id=bet_id,
            market_id=bet.market_id,
            owner=caller,
            cashout=quote.cashout,
            fee=quote.fee,
        )
        now = self._clock()
        self._bus.publish(
            BetCashedOut(
                market_id=bet.market_id,
                timestamp=now,
                bet_id=bet_id,
                owner=caller,
                cashout=quote.cashout,
                fee=quote.fee,
            )
        )
        self._bus.publish(OddsChanged(market_id=bet.market_id, timestamp=now, odds=odds))
        return quote.cashout
