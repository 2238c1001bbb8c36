"""Bet ledger."""

from predpool.ledger.bets import BetLedger

__all__ = ["BetLedger"]
