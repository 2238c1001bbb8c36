"""Liquidity provision - deposits split across options, single all-or-nothing withdrawal."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Callable

import structlog

from predpool.errors import InsufficientPoolBalance, LiquidityLocked, MarketClosed, NothingToClaim, ZeroAmount
from predpool.markets.store import check_invariants
from predpool.models import LiquidityChanged
from predpool.pricing import curve

if TYPE_CHECKING:
    from predpool.external.assets import AssetLedger
    from predpool.markets.store import MarketStore
    from predpool.models import Market
    from predpool.notifications import NotificationBus

log = structlog.get_logger(__name__)


def apply_deposit(market: Market, provider: str, amount: int) -> int:
    """Split amount evenly across options and credit the provider.

    The same increment goes to initial and current liquidity, so a deposit
    never creates reserve. Returns the credited amount (indivisible dust is
    not taken).
    """
    per_option = amount // market.option_count
    if per_option == 0:
        raise ZeroAmount(amount=amount, option_count=market.option_count)
    for i in range(market.option_count):
        market.initial_liquidity[i] += per_option
        market.current_liquidity[i] += per_option
    credited = per_option * market.option_count
    if provider not in market.providers:
        market.provider_list.append(provider)
        market.providers[provider] = 0
    market.providers[provider] += credited
    market.recompute_total_liquidity()
    return credited


class LiquidityModule:
    def __init__(
        self,
        store: MarketStore,
        assets: AssetLedger,
        bus: NotificationBus,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self._store = store
        self._assets = assets
        self._bus = bus
        self._clock = clock or (lambda: int(time.time()))

    def add_liquidity(self, market_id: str, provider: str, amount: int, from_pool: bool = False) -> int:
        """Deposit liquidity; returns the credited amount.

        With ``from_pool`` the amount is taken from the pool's existing
        balance (house seeding) instead of the provider's account.
        """
        if amount <= 0:
            raise ZeroAmount(amount=amount)
        with self._store.locked(market_id) as market:
            market.require_initialized()
            if market.settled or market.canceled:
                raise MarketClosed(market_id=market_id, settled=market.settled, canceled=market.canceled)
            credited = apply_deposit(market, provider, amount)
            check_invariants(market)

            if from_pool:
                balance = self._assets.pool_balance()
                if balance < credited:
                    raise InsufficientPoolBalance(pool_balance=balance, required=credited)
            else:
                self._assets.deposit(provider, credited)
            self._store.commit(market)
            total = market.total_liquidity

        log.info("liquidity_added", market_id=market_id, provider=provider, amount=credited, total_liquidity=total)
        self._bus.publish(
            LiquidityChanged(
                market_id=market_id,
                timestamp=self._clock(),
                provider=provider,
                amount=credited,
                total_liquidity=total,
            )
        )
        return credited

    def remove_liquidity(self, market_id: str, provider: str) -> int:
        """Withdraw the provider's whole share after settlement or cancellation."""
        with self._store.locked(market_id) as market:
            market.require_initialized()
            if not (market.settled or market.canceled):
                raise LiquidityLocked(market_id=market_id)
            contribution = market.providers.get(provider, 0)
            if contribution == 0:
                raise NothingToClaim(market_id=market_id, provider=provider)

            remaining = curve.total_remaining_liquidity(market.initial_liquidity, market.current_liquidity)
            provider_share = curve.mul_div(remaining, contribution, market.total_liquidity, "provider_share")
            fee_share = curve.mul_div(market.total_fees, contribution, market.total_liquidity, "fee_share")
            payout = provider_share + fee_share
            market.providers[provider] = 0

            self._assets.withdraw(provider, payout)
            self._store.commit(market)
            total = market.total_liquidity

        log.info(
            "liquidity_removed",
            market_id=market_id,
            provider=provider,
            provider_share=provider_share,
            fee_share=fee_share,
        )
        self._bus.publish(
            LiquidityChanged(
                market_id=market_id,
                timestamp=self._clock(),
                provider=provider,
                amount=payout,
                removed=True,
                total_liquidity=total,
            )
        )
        return payout

    def get_liquidity_provided_by(self, market_id: str, provider: str) -> int:
        return self._store.get(market_id).providers.get(provider, 0)

    def get_providers(self, market_id: str) -> list[str]:
        return list(self._store.get(market_id).provider_list)
