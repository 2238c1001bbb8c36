"""Market storage, settlement, liquidity and administration."""
