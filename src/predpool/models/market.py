"""Market - one pooled-liquidity betting market per external event."""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from predpool.errors import InvalidMarket, InvalidOption, NotBinaryMarket


class Market(BaseModel):
    """Per-event market state. All amounts are integer base units."""

    market_id: str
    event_id: str
    initialized: bool = True
    settled: bool = False
    canceled: bool = False
    winning_option_index: int | None = None
    settlement_deadline: int = 0  # epoch seconds

    # Per-option vectors, equal length
    option_names: list[str] = Field(default_factory=list)
    initial_liquidity: list[int] = Field(default_factory=list)
    current_liquidity: list[int] = Field(default_factory=list)
    total_bets: list[int] = Field(default_factory=list)

    total_liquidity: int = 0
    total_fees: int = 0

    # provider -> contributed amount; provider_list keeps first-deposit order
    providers: dict[str, int] = Field(default_factory=dict)
    provider_list: list[str] = Field(default_factory=list)

    # Frozen at settlement for pro-rata claims
    winning_stake: int = 0
    winning_pool: int = 0
    claimed_stake: int = 0
    claimed_payout: int = 0

    created_at: int | None = None

    @model_validator(mode="after")
    def _check_vectors(self) -> Market:
        n = len(self.option_names)
        if not (len(self.initial_liquidity) == len(self.current_liquidity) == len(self.total_bets) == n):
            raise ValueError("per-option sequences must have equal length")
        if self.settled and self.canceled:
            raise ValueError("market cannot be both settled and canceled")
        return self

    @classmethod
    def new(
        cls,
        market_id: str,
        event_id: str,
        option_names: list[str],
        settlement_deadline: int = 0,
        created_at: int | None = None,
    ) -> Market:
        n = len(option_names)
        return cls(
            market_id=market_id,
            event_id=event_id,
            option_names=list(option_names),
            initial_liquidity=[0] * n,
            current_liquidity=[0] * n,
            total_bets=[0] * n,
            settlement_deadline=settlement_deadline,
            created_at=created_at,
        )

    @property
    def option_count(self) -> int:
        return len(self.option_names)

    @property
    def is_binary(self) -> bool:
        return self.option_count == 2

    @property
    def is_open(self) -> bool:
        return self.initialized and not self.settled and not self.canceled

    def reserve(self, index: int) -> int:
        """max(0, initial - current) for one option."""
        return max(0, self.initial_liquidity[index] - self.current_liquidity[index])

    @property
    def reserves(self) -> list[int]:
        return [self.reserve(i) for i in range(self.option_count)]

    def recompute_total_liquidity(self) -> int:
        """Sum of current liquidity plus reserves. Call after every mutation."""
        self.total_liquidity = sum(self.current_liquidity) + sum(self.reserves)
        return self.total_liquidity

    def require_initialized(self) -> None:
        if not self.initialized:
            raise InvalidMarket(market_id=self.market_id)

    def require_binary(self) -> None:
        if not self.is_binary:
            raise NotBinaryMarket(market_id=self.market_id, option_count=self.option_count)

    def require_option(self, option_index: int) -> None:
        if option_index < 0 or option_index >= self.option_count:
            raise InvalidOption(option_index=option_index, option_count=self.option_count)

    def liquidity_is_positive(self) -> bool:
        return all(v > 0 for v in self.current_liquidity)
