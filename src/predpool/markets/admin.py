"""Administrative surface - market creation and cancellation, fees, pause, default liquidity."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Callable

import structlog

from predpool.errors import FeeTooHigh, InsufficientPoolBalance, InvalidOption, MarketClosed
from predpool.markets.liquidity import apply_deposit
from predpool.models import LiquidityChanged, Market, MarketCanceled, MarketCreated

if TYPE_CHECKING:
    from predpool.external.assets import AssetLedger
    from predpool.markets.store import MarketStore
    from predpool.models import ProtocolParameters
    from predpool.notifications import NotificationBus

log = structlog.get_logger(__name__)


class MarketAdmin:
    def __init__(
        self,
        store: MarketStore,
        assets: AssetLedger,
        params: ProtocolParameters,
        bus: NotificationBus,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self._store = store
        self._assets = assets
        self._params = params
        self._bus = bus
        self._clock = clock or (lambda: int(time.time()))

    def create_market(
        self,
        market_id: str,
        event_id: str,
        option_names: list[str],
        settlement_deadline: int = 0,
    ) -> Market:
        """Initialize a market; seeds house liquidity when default liquidity is enabled."""
        if len(option_names) < 2:
            raise InvalidOption(option_count=len(option_names), reason="at least two options required")
        now = self._clock()
        market = Market.new(market_id, event_id, option_names, settlement_deadline=settlement_deadline, created_at=now)
        seeded = 0
        if self._params.default_liquidity_enabled and self._params.default_liquidity_amount > 0:
            # Seed from the pool's own balance before the market exists
            seeded = apply_deposit(market, self._params.house_provider, self._params.default_liquidity_amount)
            balance = self._assets.pool_balance()
            if balance < seeded:
                raise InsufficientPoolBalance(pool_balance=balance, required=seeded)
        market = self._store.create(market)

        log.info("market_created", market_id=market_id, event_id=event_id, options=option_names, seeded=seeded)
        self._bus.publish(
            MarketCreated(market_id=market_id, timestamp=now, event_id=event_id, option_names=list(option_names))
        )
        if seeded:
            self._bus.publish(
                LiquidityChanged(
                    market_id=market_id,
                    timestamp=now,
                    provider=self._params.house_provider,
                    amount=seeded,
                    total_liquidity=market.total_liquidity,
                )
            )
        return market

    def cancel_market(self, market_id: str) -> Market:
        """Terminal cancel; bettors reclaim stakes via claim_refund."""
        with self._store.locked(market_id) as market:
            market.require_initialized()
            if market.settled or market.canceled:
                raise MarketClosed(market_id=market_id, settled=market.settled, canceled=market.canceled)
            market.canceled = True
            self._store.commit(market)
        log.warning("market_canceled", market_id=market_id)
        self._bus.publish(MarketCanceled(market_id=market_id, timestamp=self._clock()))
        return market

    def _check_fee(self, name: str, fee: int) -> None:
        if fee < 0 or fee > self._params.max_fee:
            raise FeeTooHigh(fee=name, value=fee, max_fee=self._params.max_fee)

    def set_platform_fee(self, fee: int) -> None:
        self._check_fee("platform_fee", fee)
        old, self._params.platform_fee = self._params.platform_fee, fee
        log.info("fee_updated", fee="platform_fee", old=old, new=fee)

    def set_early_exit_fee(self, fee: int) -> None:
        self._check_fee("early_exit_fee", fee)
        old, self._params.early_exit_fee = self._params.early_exit_fee, fee
        log.info("fee_updated", fee="early_exit_fee", old=old, new=fee)

    def pause(self) -> None:
        self._params.paused = True
        log.warning("betting_paused")

    def unpause(self) -> None:
        self._params.paused = False
        log.info("betting_unpaused")

    def configure_default_liquidity(self, enabled: bool, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"default liquidity amount must be >= 0, got {amount}")
        self._params.default_liquidity_enabled = enabled
        self._params.default_liquidity_amount = amount
        log.info("default_liquidity_configured", enabled=enabled, amount=amount)
