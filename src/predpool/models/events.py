"""Notification events published after committed mutations."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class MarketEvent(BaseModel):
    """Base notification. ``event_type`` names the concrete event."""

    event_type: str = "market_event"
    market_id: str
    timestamp: int

    def payload(self) -> dict[str, Any]:
        return self.model_dump(exclude={"event_type", "market_id", "timestamp"})


class OddsChanged(MarketEvent):
    event_type: str = "odds_changed"
    odds: list[int] = Field(default_factory=list)


class BetPlaced(MarketEvent):
    event_type: str = "bet_placed"
    bet_id: int
    owner: str
    option_index: int
    amount: int
    potential_payout: int
    locked_odds: int


class BetCashedOut(MarketEvent):
    event_type: str = "bet_cashed_out"
    bet_id: int
    owner: str
    cashout: int
    fee: int


class MarketCreated(MarketEvent):
    event_type: str = "market_created"
    event_id: str
    option_names: list[str] = Field(default_factory=list)


class MarketSettled(MarketEvent):
    event_type: str = "market_settled"
    winning_option_index: int
    winning_stake: int
    winning_pool: int


class MarketCanceled(MarketEvent):
    event_type: str = "market_canceled"


class WinningsClaimed(MarketEvent):
    event_type: str = "winnings_claimed"
    claimant: str
    stake: int
    payout: int
    bet_ids: list[int] = Field(default_factory=list)


class BetRefunded(MarketEvent):
    event_type: str = "bet_refunded"
    owner: str
    amount: int
    bet_ids: list[int] = Field(default_factory=list)


class LiquidityChanged(MarketEvent):
    event_type: str = "liquidity_changed"
    provider: str
    amount: int  # positive on add, payout on removal
    removed: bool = False
    total_liquidity: int = 0
