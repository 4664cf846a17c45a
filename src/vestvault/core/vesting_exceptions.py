"""
Vesting-specific exception hierarchy for vestvault.

Provides typed exceptions for schedule creation, release and ledger
transfers so callers can handle each rejection precisely. Every error is
caller-recoverable: a rejected operation leaves the ledger untouched.
"""

from __future__ import annotations
from typing import Optional, Any, Dict


class VestingError(Exception):
    """Base exception for all vesting-related errors.

    Attributes:
        message: Human-readable error description
        details: Additional context about the error
        recoverable: Whether the operation can be retried
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable


# ==================== Creation Errors ====================


class InvalidBeneficiaryError(VestingError):
    """Raised when a beneficiary identifier is empty or the zero address."""
    pass


class InvalidAmountError(VestingError):
    """Raised when an escrow amount is zero, negative or not an integer."""
    pass


class InvalidCallerError(VestingError):
    """Raised when the funding caller is empty, the zero address or the escrow account."""
    pass


class InsufficientFundsError(VestingError):
    """Raised when an account lacks the balance for an escrow or transfer.

    Examples: creator balance below the requested schedule amount, or an
    escrow payout exceeding what the escrow account holds.
    """

    def __init__(
        self,
        message: str,
        available: Optional[int] = None,
        required: Optional[int] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.available = available
        self.required = required


class InvalidDurationError(VestingError):
    """Raised when duration does not exceed the cliff period."""
    pass


class EscrowTransferError(VestingError):
    """Raised when the asset ledger refuses an escrow deposit or payout."""
    pass


# ==================== Release Errors ====================


class ScheduleNotFoundError(VestingError):
    """Raised when no schedule exists for a (beneficiary, schedule_id) pair."""
    pass


class CliffNotElapsedError(VestingError):
    """Raised when a release is attempted at or before the cliff end."""
    pass


class NothingToReleaseError(VestingError):
    """Raised when the releasable amount computes to zero."""
    pass


__all__ = [
    "VestingError",
    "InvalidBeneficiaryError",
    "InvalidAmountError",
    "InvalidCallerError",
    "InsufficientFundsError",
    "EscrowTransferError",
    "InvalidDurationError",
    "ScheduleNotFoundError",
    "CliffNotElapsedError",
    "NothingToReleaseError",
]
