"""
In-memory fungible asset ledger.

Reference AssetLedger implementation used by tests and by hosts that embed
the vesting engine without an external token ledger:
- Integer balances keyed by normalized account identifier
- Minting with an optional supply cap
- Atomic transfers (a failed transfer leaves every balance untouched)
- Transfer event log

Security features:
- Zero address checks on recipients
- Balance underflow prevention
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field

from .vesting_exceptions import InsufficientFundsError, InvalidAmountError, InvalidBeneficiaryError

logger = logging.getLogger(__name__)

ZERO_ADDRESS = "0x" + "0" * 40


@dataclass
class TransferEvent:
    """Represents a balance movement on the ledger."""

    from_address: str
    to_address: str
    value: int
    timestamp: float = field(default_factory=time.time)


@dataclass
class InMemoryAssetLedger:
    """
    Integer-balance token ledger satisfying the AssetLedger protocol.

    All balances are stored in-memory. Every state-changing call holds the
    ledger lock for its full duration.
    """

    symbol: str = "VEST"
    total_supply: int = 0

    # Supply cap (0 = unlimited)
    max_supply: int = 0

    balances: dict[str, int] = field(default_factory=dict)
    events: list[TransferEvent] = field(default_factory=list)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    # ==================== View Functions ====================

    def balance_of(self, account: str) -> int:
        """
        Get the balance of an account.

        Args:
            account: Address to check

        Returns:
            Token balance
        """
        with self._lock:
            return self.balances.get(self._normalize(account), 0)

    # ==================== State-Changing Functions ====================

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        """
        Transfer tokens from sender to recipient.

        Args:
            sender: Address sending tokens
            recipient: Address receiving tokens
            amount: Amount to transfer

        Returns:
            True if successful

        Raises:
            InsufficientFundsError: If sender balance is below amount
        """
        sender_norm = self._normalize(sender)
        recipient_norm = self._normalize(recipient)

        self._validate_address(recipient_norm, "recipient")
        self._validate_amount(amount)

        with self._lock:
            sender_balance = self.balances.get(sender_norm, 0)
            if sender_balance < amount:
                raise InsufficientFundsError(
                    f"{self.symbol}: transfer amount exceeds balance ({amount} > {sender_balance})",
                    available=sender_balance,
                    required=amount,
                    details={"account": sender_norm},
                )

            self.balances[sender_norm] = sender_balance - amount
            self.balances[recipient_norm] = self.balances.get(recipient_norm, 0) + amount
            self.events.append(TransferEvent(sender_norm, recipient_norm, amount))

        logger.debug(
            "Asset transfer",
            extra={
                "event": "asset.transfer",
                "token": self.symbol,
                "from": sender_norm[:10],
                "to": recipient_norm[:10],
                "amount": amount,
            },
        )
        return True

    def mint(self, to: str, amount: int) -> bool:
        """
        Create new tokens for an account.

        Raises:
            InvalidAmountError: If minting would exceed max_supply
        """
        to_norm = self._normalize(to)
        self._validate_address(to_norm, "recipient")
        self._validate_amount(amount)

        with self._lock:
            if self.max_supply > 0 and self.total_supply + amount > self.max_supply:
                raise InvalidAmountError(
                    f"{self.symbol}: mint would exceed max supply "
                    f"({self.total_supply + amount} > {self.max_supply})"
                )
            self.total_supply += amount
            self.balances[to_norm] = self.balances.get(to_norm, 0) + amount
            self.events.append(TransferEvent(ZERO_ADDRESS, to_norm, amount))

        logger.info(
            "Asset mint",
            extra={
                "event": "asset.mint",
                "token": self.symbol,
                "to": to_norm[:10],
                "amount": amount,
                "new_supply": self.total_supply,
            },
        )
        return True

    # ==================== Helpers ====================

    def _normalize(self, address: str) -> str:
        """Normalize address to lowercase."""
        return address.lower()

    def _validate_address(self, address: str, field_name: str) -> None:
        if not address or address == ZERO_ADDRESS:
            raise InvalidBeneficiaryError(f"{self.symbol}: {field_name} is zero address")

    def _validate_amount(self, amount: int) -> None:
        if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
            raise InvalidAmountError(f"{self.symbol}: amount must be a non-negative integer")


__all__ = ["InMemoryAssetLedger", "TransferEvent", "ZERO_ADDRESS"]
