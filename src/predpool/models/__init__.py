"""Canonical schema (Pydantic) - Market, Bet, parameters, notifications."""

from predpool.models.bet import Bet, BetStatus, can_transition, check_transition
from predpool.models.events import (
    BetCashedOut,
    BetPlaced,
    BetRefunded,
    LiquidityChanged,
    MarketCanceled,
    MarketCreated,
    MarketEvent,
    MarketSettled,
    OddsChanged,
    WinningsClaimed,
)
from predpool.models.market import Market
from predpool.models.params import ProtocolParameters
from predpool.models.position import Position

__all__ = [
    "Market",
    "Bet",
    "BetStatus",
    "can_transition",
    "check_transition",
    "ProtocolParameters",
    "Position",
    "MarketEvent",
    "OddsChanged",
    "BetPlaced",
    "BetCashedOut",
    "MarketCreated",
    "MarketSettled",
    "MarketCanceled",
    "WinningsClaimed",
    "BetRefunded",
    "LiquidityChanged",
]
