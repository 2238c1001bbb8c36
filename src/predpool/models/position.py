"""A user's position in one market."""

from __future__ import annotations

from pydantic import BaseModel, Field


class Position(BaseModel):
    market_id: str
    user: str
    stakes: list[int] = Field(default_factory=list)  # active stake per option
    locked_payouts: list[int] = Field(default_factory=list)  # sum of potential payouts per option
    cashout_values: list[tuple[int, int]] = Field(default_factory=list)  # (bet_id, value)
    claimable: int = 0
