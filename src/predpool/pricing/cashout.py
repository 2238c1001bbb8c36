"""Cashout simulation shared by the read-only valuation and early exit.

Both BetLedger.get_active_bets_with_cashout and PricingEngine.early_exit call
simulate_cashout with the same inputs, so a quoted value equals the value
paid when nothing happens in between.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from predpool.errors import DivisionByZero, NotBinaryMarket
from predpool.models.bet import Bet
from predpool.pricing.curve import constant_product, mul_div, safe_div


@dataclass(frozen=True)
class CashoutQuote:
    bet_id: int
    cashout: int
    fee: int
    raw_cashout: int
    simulated_this: int
    simulated_other: int
    option_index: int

    @property
    def new_liquidity(self) -> list[int]:
        """Liquidity vector to commit on early exit."""
        out = [0, 0]
        out[self.option_index] = self.simulated_this
        out[1 - self.option_index] = self.simulated_other
        return out


def simulate_cashout(
    bet: Bet,
    initial: Sequence[int],
    current: Sequence[int],
    precision: int,
    early_exit_fee: int,
) -> CashoutQuote:
    """Value a bet by placing its profit as a hypothetical bet on the other option."""
    if len(current) != 2:
        raise NotBinaryMarket(option_count=len(current))
    this, other = bet.option_index, 1 - bet.option_index
    k = constant_product(initial)

    profit = max(0, bet.potential_payout - bet.amount)
    simulated_other = current[other] + profit
    simulated_this = safe_div(k, simulated_other, "simulated_liquidity")
    if simulated_this == 0:
        # Exiting would drain this option
        raise DivisionByZero(what="simulated_liquidity", option_index=this)
    raw_cashout = max(0, current[this] - simulated_this)

    fee = mul_div(raw_cashout, early_exit_fee, precision, "early_exit_fee")
    cashout = max(0, raw_cashout - fee)
    return CashoutQuote(
        bet_id=bet.bet_id,
        cashout=cashout,
        fee=fee,
        raw_cashout=raw_cashout,
        simulated_this=simulated_this,
        simulated_other=simulated_other,
        option_index=this,
    )
