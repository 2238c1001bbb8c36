"""Protocol-wide parameters set through the administrative surface."""

from __future__ import annotations

from pydantic import BaseModel, Field

from predpool.config.settings import Settings


class ProtocolParameters(BaseModel):
    """Fees (basis points of precision), pause flag and default liquidity."""

    precision: int = Field(10000, gt=0)
    platform_fee: int = Field(300, ge=0)
    early_exit_fee: int = Field(300, ge=0)
    max_fee: int = Field(1000, ge=0)
    paused: bool = False
    default_liquidity_enabled: bool = False
    default_liquidity_amount: int = Field(0, ge=0)
    house_provider: str = "house"

    @classmethod
    def from_settings(cls, settings: Settings) -> ProtocolParameters:
        return cls(
            precision=settings.precision,
            platform_fee=settings.platform_fee_bps,
            early_exit_fee=settings.early_exit_fee_bps,
            max_fee=settings.max_fee_bps,
            default_liquidity_enabled=settings.default_liquidity_enabled,
            default_liquidity_amount=settings.default_liquidity_amount,
            house_provider=settings.house_provider,
        )
