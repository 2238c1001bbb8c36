"""Settlement-asset collaborator - deposits into and withdrawals from the pool."""

from __future__ import annotations

from collections import defaultdict
from threading import Lock
from typing import Protocol

from predpool.errors import InsufficientBalance, InsufficientPoolBalance, ZeroAmount


class AssetLedger(Protocol):
    """Value transfer between accounts and the shared pool."""

    def deposit(self, account: str, amount: int) -> None: ...

    def withdraw(self, account: str, amount: int) -> None: ...

    def pool_balance(self) -> int: ...


class InMemoryAssetLedger:
    """Account balances plus a single pool balance, all integers."""

    def __init__(self, pool_balance: int = 0) -> None:
        self._balances: dict[str, int] = defaultdict(int)
        self._pool = pool_balance
        self._lock = Lock()

    def mint(self, account: str, amount: int) -> None:
        if amount <= 0:
            raise ZeroAmount(amount=amount)
        with self._lock:
            self._balances[account] += amount

    def fund_pool(self, amount: int) -> None:
        if amount <= 0:
            raise ZeroAmount(amount=amount)
        with self._lock:
            self._pool += amount

    def balance_of(self, account: str) -> int:
        with self._lock:
            return self._balances.get(account, 0)

    def pool_balance(self) -> int:
        with self._lock:
            return self._pool

    def deposit(self, account: str, amount: int) -> None:
        """Move amount from account into the pool."""
        with self._lock:
            available = self._balances.get(account, 0)
            if available < amount:
                raise InsufficientBalance(account=account, available=available, required=amount)
            self._balances[account] = available - amount
            self._pool += amount

    def withdraw(self, account: str, amount: int) -> None:
        """Move amount from the pool to account."""
        with self._lock:
            if self._pool < amount:
                raise InsufficientPoolBalance(pool_balance=self._pool, required=amount)
            self._pool -= amount
            self._balances[account] += amount
