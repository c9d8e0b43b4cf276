"""Reserve asset interface and an in-memory ledger implementation."""

from __future__ import annotations

import threading
from typing import Protocol, runtime_checkable

import structlog

logger = structlog.get_logger()


@runtime_checkable
class ReserveAsset(Protocol):
    """Balance ledger of one of the two assets a pool trades.

    Transfers report failure by returning False; the pool never assumes a
    transfer succeeded without checking.
    """

    @property
    def symbol(self) -> str: ...

    @property
    def decimals(self) -> int: ...

    def balance_of(self, holder: str) -> int: ...

    def transfer_from(self, holder: str, recipient: str, amount: int) -> bool:
        """Move amount from holder to recipient on the recipient's initiative."""
        ...

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        """Move amount from sender to recipient on the sender's initiative."""
        ...


class InMemoryReserveAsset:
    """Thread-safe dictionary-backed ledger.

    Used by the HTTP service and the simulation script, and as the standard
    test double.

    Attributes:
        symbol: Ticker of the asset
        decimals: Native decimals of amounts
    """

    def __init__(self, symbol: str, decimals: int = 18) -> None:
        self.symbol = symbol
        self.decimals = decimals
        self._balances: dict[str, int] = {}
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"InMemoryReserveAsset({self.symbol!r}, decimals={self.decimals})"

    def balance_of(self, holder: str) -> int:
        with self._lock:
            return self._balances.get(holder, 0)

    def total_supply(self) -> int:
        with self._lock:
            return sum(self._balances.values())

    def mint(self, holder: str, amount: int) -> None:
        """Credit amount to holder out of thin air."""
        if amount < 0:
            raise ValueError(f"mint amount must be non-negative, got {amount}")
        with self._lock:
            self._balances[holder] = self._balances.get(holder, 0) + amount

    def transfer_from(self, holder: str, recipient: str, amount: int) -> bool:
        return self._move(holder, recipient, amount)

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        return self._move(sender, recipient, amount)

    def _move(self, source: str, destination: str, amount: int) -> bool:
        if amount < 0:
            return False
        with self._lock:
            balance = self._balances.get(source, 0)
            if balance < amount:
                logger.debug(
                    "transfer_insufficient_balance",
                    asset=self.symbol,
                    holder=source,
                    balance=balance,
                    amount=amount,
                )
                return False
            self._balances[source] = balance - amount
            self._balances[destination] = self._balances.get(destination, 0) + amount
            return True
