"""Exchange - wires store, ledger, pricing, settlement, liquidity and admin together."""

from __future__ import annotations

import time
from typing import Callable

import structlog

from predpool.config.settings import Settings
from predpool.external.assets import AssetLedger
from predpool.external.oracle import Oracle
from predpool.ledger.bets import BetLedger
from predpool.markets.admin import MarketAdmin
from predpool.markets.liquidity import LiquidityModule
from predpool.markets.settlement import SettlementModule
from predpool.markets.store import MarketStore
from predpool.models import Bet, Market, Position, ProtocolParameters
from predpool.notifications import EventLogWriter, NotificationBus
from predpool.pricing import curve
from predpool.pricing.engine import PricingEngine
from predpool.storage.bets import list_bets
from predpool.storage.markets import load_markets
from predpool.storage.writer import LedgerWriter

log = structlog.get_logger(__name__)


class Exchange:
    """One process-wide instance per ledger database.

    The component objects are public (``pricing``, ``ledger``, ``settlement``,
    ``liquidity``, ``admin``, ``store``); the methods below are the read
    accessors that combine several of them.
    """

    def __init__(
        self,
        oracle: Oracle,
        assets: AssetLedger,
        params: ProtocolParameters | None = None,
        writer: LedgerWriter | None = None,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self.params = params or ProtocolParameters()
        self.clock = clock or (lambda: int(time.time()))
        self.oracle = oracle
        self.assets = assets
        self.writer = writer
        self.bus = NotificationBus()
        if writer is not None:
            self.bus.subscribe(EventLogWriter(writer))

        self.store = MarketStore(writer)
        self.ledger = BetLedger(self.store, self.params, writer, self.clock, oracle)
        self.pricing = PricingEngine(
            self.store, self.ledger, self.params, oracle, assets, self.bus, self.clock
        )
        self.settlement = SettlementModule(
            self.store, self.ledger, self.params, oracle, assets, self.bus, self.clock
        )
        self.liquidity = LiquidityModule(self.store, assets, self.bus, self.clock)
        self.admin = MarketAdmin(self.store, assets, self.params, self.bus, self.clock)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        oracle: Oracle,
        assets: AssetLedger,
        clock: Callable[[], int] | None = None,
    ) -> Exchange:
        """Build from config; with persistence on, reload markets and bets from the DB."""
        writer = LedgerWriter.open(settings.db_path) if settings.persist else None
        exchange = cls(oracle, assets, ProtocolParameters.from_settings(settings), writer, clock)
        if writer is not None:
            exchange.store.load(load_markets(writer.conn))
            exchange.ledger.load(list_bets(writer.conn))
        log.info("exchange_ready", persist=settings.persist, markets=len(exchange.store.ids()))
        return exchange

    def close(self) -> None:
        if self.writer is not None:
            self.writer.close()

    # --- Market reads ---
    def get_market(self, market_id: str) -> Market:
        return self.store.get(market_id)

    def get_option_names(self, market_id: str) -> list[str]:
        return self.store.get(market_id).option_names

    def get_initial_liquidity(self, market_id: str) -> list[int]:
        return self.store.get(market_id).initial_liquidity

    def get_current_liquidity(self, market_id: str) -> list[int]:
        return self.store.get(market_id).current_liquidity

    def get_reserved_tokens(self, market_id: str) -> list[int]:
        return self.store.get(market_id).reserves

    def get_total_bets_per_option(self, market_id: str) -> list[int]:
        return self.store.get(market_id).total_bets

    def get_total_remaining_liquidity(self, market_id: str) -> int:
        market = self.store.get(market_id)
        return curve.total_remaining_liquidity(market.initial_liquidity, market.current_liquidity)

    # --- Bet reads ---
    def get_bet_details(self, bet_id: int) -> Bet:
        return self.ledger.get_bet(bet_id)

    def get_user_volume(self, market_id: str, user: str, option_index: int) -> int:
        """Sum of the user's active stake on one option."""
        self.store.get(market_id).require_option(option_index)
        return self.ledger.active_stake(user, market_id, option_index)

    def get_position(self, market_id: str, user: str) -> Position:
        market = self.store.get(market_id)
        n = market.option_count
        stakes = [0] * n
        payouts = [0] * n
        for bet in self.ledger.get_user_active_bets(user, market_id):
            stakes[bet.option_index] += bet.amount
            payouts[bet.option_index] += bet.potential_payout
        return Position(
            market_id=market_id,
            user=user,
            stakes=stakes,
            locked_payouts=payouts,
            cashout_values=self.ledger.get_active_bets_with_cashout(user, market_id),
            claimable=self.settlement.get_claimable(market_id, user),
        )
