"""
vestvault - Token Vesting Accounting Engine

Tracks linear cliff vesting schedules per beneficiary over funds escrowed
on an injected asset ledger.

Main Components:
- VestingLedger: schedule creation, release and queries
- vesting_math: pure vested-amount arithmetic
- InMemoryAssetLedger: reference integer-balance asset ledger
"""

__version__ = "0.1.0"
__author__ = "vestvault Development Team"

from vestvault.core.asset_ledger import InMemoryAssetLedger
from vestvault.core.vesting_exceptions import VestingError
from vestvault.core.vesting_ledger import VestingEvent, VestingLedger
from vestvault.core.vesting_math import VestingSchedule, vested_amount

__all__ = [
    "InMemoryAssetLedger",
    "VestingError",
    "VestingEvent",
    "VestingLedger",
    "VestingSchedule",
    "vested_amount",
]
