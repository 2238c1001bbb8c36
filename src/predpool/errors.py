"""Error kinds raised by pricing, ledger, settlement and liquidity operations.

Each error carries a machine-readable ``code`` and the offending values as
``context`` so callers can report which input was rejected.
"""

from __future__ import annotations

from typing import Any


class PredPoolError(Exception):
    """Base error. ``code`` is stable; ``context`` holds offending values."""

    code = "predpool_error"

    def __init__(self, message: str = "", **context: Any) -> None:
        self.context = context
        detail = message or self.__class__.__doc__ or self.code
        if context:
            detail = f"{detail} ({', '.join(f'{k}={v!r}' for k, v in context.items())})"
        super().__init__(detail)

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "detail": str(self), **self.context}


# --- Market state ---
class InvalidMarket(PredPoolError):
    """Unknown or uninitialized market."""

    code = "invalid_market"


class MarketExists(PredPoolError):
    """Market id already initialized."""

    code = "market_exists"


class MarketClosed(PredPoolError):
    """Market is settled, canceled, or betting is paused."""

    code = "market_closed"


class NotBinaryMarket(PredPoolError):
    """Operation is defined only for two-option markets."""

    code = "not_binary_market"


class WindowClosed(PredPoolError):
    """Current time is outside the betting window."""

    code = "window_closed"


# --- Inputs ---
class InvalidOption(PredPoolError):
    """Option index out of range."""

    code = "invalid_option"


class ZeroAmount(PredPoolError):
    """Amount must be greater than zero."""

    code = "zero_amount"


class SlippageExceeded(PredPoolError):
    """Locked odds fell below the caller's minimum."""

    code = "slippage_exceeded"


class FeeTooHigh(PredPoolError):
    """Fee above the configured maximum."""

    code = "fee_too_high"


# --- Arithmetic ---
class DivisionByZero(PredPoolError, ArithmeticError):
    """Division by a zero liquidity value."""

    code = "division_by_zero"


class ArithmeticOverflow(PredPoolError, ArithmeticError):
    """Intermediate value exceeds the 256-bit range."""

    code = "arithmetic_overflow"


# --- Value transfer ---
class InsufficientBalance(PredPoolError):
    """Caller balance cannot cover the deposit."""

    code = "insufficient_balance"


class InsufficientPoolBalance(PredPoolError):
    """Pool balance cannot cover the payout."""

    code = "insufficient_pool_balance"


# --- Bets ---
class BetNotFound(PredPoolError):
    """No bet with this id."""

    code = "bet_not_found"


class NotBetOwner(PredPoolError):
    """Caller does not own the bet."""

    code = "not_bet_owner"


class BetNotActive(PredPoolError):
    """Bet is no longer active."""

    code = "bet_not_active"


class InvalidStatusTransition(PredPoolError):
    """Bet status transition not allowed."""

    code = "invalid_status_transition"


# --- Settlement / liquidity ---
class SettlementNotReady(PredPoolError):
    """Oracle has not confirmed the outcome or the deadline has not passed."""

    code = "settlement_not_ready"


class NothingToClaim(PredPoolError):
    """No claimable stake for this account."""

    code = "nothing_to_claim"


class LiquidityLocked(PredPoolError):
    """Liquidity can be withdrawn only after settlement or cancellation."""

    code = "liquidity_locked"


class UnauthorizedRecorder(PredPoolError):
    """Only the registered pricing engine may record bets."""

    code = "unauthorized_recorder"
