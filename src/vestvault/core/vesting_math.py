"""
Linear cliff vesting arithmetic.

Pure functions over a VestingSchedule and a timestamp. All amounts are
integers and every division floors, so the computed vested amount never
exceeds the exact time-proportional share of the escrow.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass
class VestingSchedule:
    """One escrow commitment for a single beneficiary."""

    total_amount: int
    start_time: int
    cliff_period: int
    duration: int
    released_amount: int = 0

    @property
    def cliff_end(self) -> int:
        return self.start_time + self.cliff_period

    @property
    def end_time(self) -> int:
        return self.start_time + self.duration

    @property
    def is_fully_released(self) -> bool:
        return self.released_amount >= self.total_amount

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["cliff_end"] = self.cliff_end
        data["end_time"] = self.end_time
        return data


def vested_amount(schedule: VestingSchedule, now: int) -> int:
    """
    Calculate the cumulative amount vested for a schedule at ``now``.

    Nothing vests up to and including the cliff end. After ``start_time +
    duration`` the whole ``total_amount`` is vested. In between the amount
    grows linearly from the cliff end, rounded down.

    Args:
        schedule: Schedule to evaluate
        now: Timestamp to evaluate at

    Returns:
        Vested amount, independent of what has already been released
    """
    cliff_end = schedule.cliff_end
    if now <= cliff_end:
        return 0
    if now >= schedule.end_time:
        return schedule.total_amount

    elapsed = now - cliff_end
    vesting_window = schedule.duration - schedule.cliff_period
    # Python ints are unbounded, so the product cannot overflow
    return schedule.total_amount * elapsed // vesting_window


def releasable_amount(schedule: VestingSchedule, now: int) -> int:
    """Vested amount not yet paid out, floored at zero."""
    vested = vested_amount(schedule, now)
    if vested <= schedule.released_amount:
        return 0
    return vested - schedule.released_amount


__all__ = ["VestingSchedule", "vested_amount", "releasable_amount"]
