"""
vestvault - Collaborator Protocol Interfaces

The vesting ledger never stores balances itself. It depends on these
structural interfaces so hosts can plug in any token ledger and clock:
- Dependency injection without class inheritance
- Easy test doubles
- Clear API contracts at the escrow boundary
"""

from __future__ import annotations

from typing import Callable, Protocol, runtime_checkable

TimeProvider = Callable[[], int]


@runtime_checkable
class AssetLedger(Protocol):
    """
    Protocol for the fungible-asset ledger backing the escrow.

    Thread Safety: implementations shared between threads MUST serialize
    transfers themselves.
    """

    def balance_of(self, account: str) -> int:
        """
        Get the balance held by an account.

        Args:
            account: Account identifier

        Returns:
            Balance (0 for unknown accounts)
        """
        ...

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        """
        Move ``amount`` from sender to recipient.

        Returns:
            True if the transfer was applied

        Raises:
            InsufficientFundsError: If sender balance is below amount. The
                ledger must be left unchanged in that case.
        """
        ...


__all__ = ["AssetLedger", "TimeProvider"]
