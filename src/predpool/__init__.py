"""predpool - binary prediction market pool with CPMM pricing, early exit and a durable bet ledger."""

__version__ = "0.1.0"
