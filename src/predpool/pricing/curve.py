"""Fixed-point CPMM math shared by pricing, previews, cashout and settlement.

All values are non-negative integers. Ratios are scaled by ``precision``
(10000 by default, so 17657 means 1.7657x). Every multiplication that feeds a
division is range-checked against the 256-bit limit and every division by a
liquidity value is guarded, so bad inputs raise instead of truncating.

The curve constant is always ``K = initial[0] * initial[1]``: the product is
anchored to the liquidity the market was seeded with, not the drifting
current product.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from predpool.errors import ArithmeticOverflow, DivisionByZero, NotBinaryMarket, ZeroAmount

MAX_VALUE = 2**256 - 1


def checked(value: int, what: str = "value") -> int:
    if value > MAX_VALUE:
        raise ArithmeticOverflow(what=what)
    return value


def safe_div(numerator: int, denominator: int, what: str = "denominator") -> int:
    """Floor division that raises DivisionByZero instead of ZeroDivisionError."""
    if denominator == 0:
        raise DivisionByZero(what=what)
    return numerator // denominator


def mul_div(a: int, b: int, denominator: int, what: str = "mul_div") -> int:
    """(a * b) // denominator with overflow and zero checks."""
    return safe_div(checked(a * b, what), denominator, what)


# --- Reserves and odds ---
def reserve(initial: int, current: int) -> int:
    return initial - current if current < initial else 0


def reserves(initial: Sequence[int], current: Sequence[int]) -> list[int]:
    return [reserve(i, c) for i, c in zip(initial, current)]


def total_remaining_liquidity(initial: Sequence[int], current: Sequence[int]) -> int:
    """Sum of current liquidity plus reserves over all options."""
    return sum(current) + sum(reserves(initial, current))


def odds_for_option(option_liquidity: int, total_remaining: int, precision: int) -> int:
    if option_liquidity == 0:
        return 0
    return mul_div(total_remaining, precision, option_liquidity, "odds")


def all_odds(initial: Sequence[int], current: Sequence[int], precision: int) -> list[int]:
    total = total_remaining_liquidity(initial, current)
    return [odds_for_option(c, total, precision) for c in current]


def constant_product(initial: Sequence[int]) -> int:
    """K for a binary market."""
    if len(initial) != 2:
        raise NotBinaryMarket(option_count=len(initial))
    return checked(initial[0] * initial[1], "constant_product")


# --- Bet quote ---
@dataclass(frozen=True)
class BetQuote:
    """Result of pricing one bet against a binary pool."""

    option_index: int
    amount: int
    effective_amount: int  # amount added to this option after throttling
    new_this: int
    new_other: int
    raw_return: int
    fee: int
    potential_return: int
    locked_odds: int

    @property
    def new_liquidity(self) -> list[int]:
        out = [0, 0]
        out[self.option_index] = self.new_this
        out[1 - self.option_index] = self.new_other
        return out


def effective_bet_amount(
    initial: Sequence[int],
    current: Sequence[int],
    total_bets: Sequence[int],
    option_index: int,
    amount: int,
    precision: int,
) -> int:
    """Throttle the amount while the receiving side has unused reserve.

    Applies only when the other option has more cumulative bets and this
    option's reserve is positive: amount * (reserve * P / |excess|) / P.
    """
    this, other = option_index, 1 - option_index
    excess = total_bets[0] - total_bets[1]
    this_reserve = reserve(initial[this], current[this])
    if total_bets[other] > total_bets[this] and this_reserve > 0:
        scale = mul_div(this_reserve, precision, abs(excess), "reserve_scale")
        return mul_div(amount, scale, precision, "scaled_amount")
    return amount


def quote_bet(
    initial: Sequence[int],
    current: Sequence[int],
    total_bets: Sequence[int],
    option_index: int,
    amount: int,
    precision: int,
    platform_fee: int,
    require_liquidity: bool = True,
) -> BetQuote:
    """Price a bet of ``amount`` on ``option_index``. Pure; mutates nothing.

    With ``require_liquidity`` the quote fails with DivisionByZero when the
    other option would be fully drained (new liquidity of 0).
    """
    if len(current) != 2:
        raise NotBinaryMarket(option_count=len(current))
    if amount <= 0:
        raise ZeroAmount(amount=amount)
    this, other = option_index, 1 - option_index
    k = constant_product(initial)

    effective = effective_bet_amount(initial, current, total_bets, option_index, amount, precision)
    new_this = checked(current[this] + effective, "new_liquidity")
    new_other = safe_div(k, new_this, "new_liquidity")
    if require_liquidity and new_other == 0:
        raise DivisionByZero(what="new_other_liquidity", option_index=other)

    raw_return = max(0, current[other] - new_other)
    extraction_ratio = mul_div(raw_return, precision, amount, "extraction_ratio")
    locked_odds = precision + mul_div(extraction_ratio, precision - platform_fee, precision, "locked_odds")
    fee = mul_div(raw_return, platform_fee, precision, "platform_fee")
    potential_return = amount + raw_return - fee
    return BetQuote(
        option_index=option_index,
        amount=amount,
        effective_amount=effective,
        new_this=new_this,
        new_other=new_other,
        raw_return=raw_return,
        fee=fee,
        potential_return=potential_return,
        locked_odds=locked_odds,
    )
