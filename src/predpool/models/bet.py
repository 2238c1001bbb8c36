"""Bet record and its status lifecycle."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from predpool.errors import InvalidStatusTransition


class BetStatus(str, Enum):
    ACTIVE = "active"
    CASHED_OUT = "cashed_out"
    SETTLED_WON = "settled_won"
    SETTLED_LOST = "settled_lost"
    REFUNDED = "refunded"


# Active is the only state with outgoing edges.
_TRANSITIONS: dict[BetStatus, frozenset[BetStatus]] = {
    BetStatus.ACTIVE: frozenset(
        {
            BetStatus.CASHED_OUT,
            BetStatus.SETTLED_WON,
            BetStatus.SETTLED_LOST,
            BetStatus.REFUNDED,
        }
    ),
}


def can_transition(current: BetStatus, new: BetStatus) -> bool:
    return new in _TRANSITIONS.get(current, frozenset())


def check_transition(bet_id: int, current: BetStatus, new: BetStatus) -> None:
    """Raise InvalidStatusTransition unless current -> new is in the table."""
    if not can_transition(current, new):
        raise InvalidStatusTransition(bet_id=bet_id, current=current.value, new=new.value)


class Bet(BaseModel):
    """A single placed bet. Never deleted, only transitioned."""

    bet_id: int = Field(..., ge=1)
    owner: str
    market_id: str
    option_index: int = Field(..., ge=0)
    amount: int = Field(..., gt=0)
    potential_payout: int = Field(..., ge=0)
    locked_odds: int = Field(..., ge=0, description="Payout multiplier scaled by precision")
    created_at: int
    status: BetStatus = BetStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.status is BetStatus.ACTIVE
