"""Settlement - finalize the winning option, pay winners pro-rata, refund canceled markets."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Callable

import structlog

from predpool.errors import MarketClosed, NothingToClaim, SettlementNotReady
from predpool.markets.store import check_invariants
from predpool.models import BetRefunded, BetStatus, MarketSettled, WinningsClaimed
from predpool.pricing import curve

if TYPE_CHECKING:
    from predpool.external.assets import AssetLedger
    from predpool.external.oracle import Oracle
    from predpool.ledger.bets import BetLedger
    from predpool.markets.store import MarketStore
    from predpool.models import Bet, Market, ProtocolParameters
    from predpool.notifications import NotificationBus

log = structlog.get_logger(__name__)


def winning_pool(market: Market, winning_option_index: int, stake: int, precision: int, platform_fee: int) -> int:
    """Payout owed to the whole winning side: the potential-return formula
    applied to the aggregate winning stake."""
    if stake <= 0:
        return 0
    if curve.constant_product(market.initial_liquidity) == 0:
        # Nothing to extract from an unfunded pool; winners get their stake back
        return stake
    quote = curve.quote_bet(
        market.initial_liquidity,
        market.current_liquidity,
        market.total_bets,
        winning_option_index,
        stake,
        precision,
        platform_fee,
        require_liquidity=False,
    )
    return quote.potential_return


class SettlementModule:
    """Settles markets from the oracle outcome and pays claims.

    Winners are paid strictly pro-rata: ``winning_pool * user_stake //
    winning_stake``, with the last claimant receiving any rounding remainder.
    """

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

    def settle(self, market_id: str, winning_option_index: int) -> Market:
        """Finalize the winner confirmed by the oracle. Losing bets become SettledLost."""
        with self._store.locked(market_id) as market:
            market.require_initialized()
            if market.settled or market.canceled:
                raise MarketClosed(market_id=market_id, settled=market.settled, canceled=market.canceled)
            market.require_option(winning_option_index)

            approved, winner = self._oracle.get_approval_and_winner(market.event_id)
            if not approved or winner != winning_option_index:
                raise SettlementNotReady(
                    market_id=market_id,
                    approved=approved,
                    oracle_winner=winner,
                    requested=winning_option_index,
                )
            now = self._clock()
            if now < market.settlement_deadline:
                raise SettlementNotReady(market_id=market_id, now=now, deadline=market.settlement_deadline)

            active = self._ledger.get_market_bets(market_id, BetStatus.ACTIVE)
            stake = sum(b.amount for b in active if b.option_index == winning_option_index)
            if market.total_liquidity == 0 and stake == 0:
                raise SettlementNotReady(market_id=market_id, reason="no liquidity and no winning bets")

            pool = winning_pool(
                market, winning_option_index, stake, self._params.precision, self._params.platform_fee
            )
            market.settled = True
            market.winning_option_index = winning_option_index
            market.winning_stake = stake
            market.winning_pool = pool
            self._store.commit(market)

            losers = [b for b in active if b.option_index != winning_option_index]
            for bet in losers:
                self._ledger.update_bet_status(bet.bet_id, BetStatus.SETTLED_LOST)
            settled = market.model_copy(deep=True)

        log.info(
            "market_settled",
            market_id=market_id,
            winning_option_index=winning_option_index,
            winning_stake=stake,
            winning_pool=pool,
            losing_bets=len(losers),
        )
        self._bus.publish(
            MarketSettled(
                market_id=market_id,
                timestamp=now,
                winning_option_index=winning_option_index,
                winning_stake=stake,
                winning_pool=pool,
            )
        )
        return settled

    def _winning_bets(self, market: Market, claimant: str) -> list[Bet]:
        return [
            b
            for b in self._ledger.get_user_active_bets(claimant, market.market_id)
            if b.option_index == market.winning_option_index
        ]

    @staticmethod
    def _pro_rata(market: Market, stake: int) -> int:
        if market.claimed_stake + stake == market.winning_stake:
            return market.winning_pool - market.claimed_payout
        return curve.mul_div(market.winning_pool, stake, market.winning_stake, "pro_rata")

    def get_claimable(self, market_id: str, claimant: str) -> int:
        """Amount claim_winnings would pay right now (0 if nothing to claim)."""
        with self._store.locked(market_id) as market:
            if not market.settled:
                return 0
            stake = sum(b.amount for b in self._winning_bets(market, claimant))
            return self._pro_rata(market, stake) if stake else 0

    def claim_winnings(self, market_id: str, claimant: str) -> int:
        """Pay the claimant's pro-rata share of the winning pool."""
        with self._store.locked(market_id) as market:
            market.require_initialized()
            if not market.settled:
                raise SettlementNotReady(market_id=market_id, settled=False)
            bets = self._winning_bets(market, claimant)
            stake = sum(b.amount for b in bets)
            if stake == 0:
                raise NothingToClaim(market_id=market_id, claimant=claimant)

            payout = self._pro_rata(market, stake)
            market.claimed_stake += stake
            market.claimed_payout += payout
            market.recompute_total_liquidity()
            check_invariants(market)

            self._assets.withdraw(claimant, payout)
            self._store.commit(market)
            for bet in bets:
                self._ledger.update_bet_status(bet.bet_id, BetStatus.SETTLED_WON)

        log.info("winnings_claimed", market_id=market_id, claimant=claimant, stake=stake, payout=payout)
        self._bus.publish(
            WinningsClaimed(
                market_id=market_id,
                timestamp=self._clock(),
                claimant=claimant,
                stake=stake,
                payout=payout,
                bet_ids=[b.bet_id for b in bets],
            )
        )
        return payout

    def claim_refund(self, market_id: str, owner: str) -> int:
        """Return the stakes of the owner's active bets in a canceled market."""
        with self._store.locked(market_id) as market:
            market.require_initialized()
            if not market.canceled:
                raise SettlementNotReady(market_id=market_id, canceled=False)
            bets = self._ledger.get_user_active_bets(owner, market_id)
            amount = sum(b.amount for b in bets)
            if amount == 0:
                raise NothingToClaim(market_id=market_id, claimant=owner)

            self._assets.withdraw(owner, amount)
            for bet in bets:
                self._ledger.update_bet_status(bet.bet_id, BetStatus.REFUNDED)

        log.info("refund_claimed", market_id=market_id, owner=owner, amount=amount, bets=len(bets))
        self._bus.publish(
            BetRefunded(
                market_id=market_id,
                timestamp=self._clock(),
                owner=owner,
                amount=amount,
                bet_ids=[b.bet_id for b in bets],
            )
        )
        return amount
