"""
Unit tests for the linear cliff vesting arithmetic.
"""

from vestvault.core.vesting_math import VestingSchedule, releasable_amount, vested_amount


def _schedule(**overrides):
    params = {"total_amount": 1000, "start_time": 0, "cliff_period": 100, "duration": 1000}
    params.update(overrides)
    return VestingSchedule(**params)


def test_nothing_vests_during_cliff():
    schedule = _schedule()
    assert vested_amount(schedule, 0) == 0
    assert vested_amount(schedule, 50) == 0


def test_cliff_end_is_exclusive():
    """At exactly start + cliff nothing has vested yet."""
    assert vested_amount(_schedule(), 100) == 0
    assert vested_amount(_schedule(), 101) == 1  # 1000 * 1 // 900


def test_linear_vesting_midpoint():
    assert vested_amount(_schedule(), 550) == 500


def test_fully_vested_at_and_after_end():
    schedule = _schedule()
    assert vested_amount(schedule, 1000) == 1000
    assert vested_amount(schedule, 1001) == 1000
    assert vested_amount(schedule, 10**12) == 1000


def test_vesting_rounds_down():
    schedule = _schedule(total_amount=10, cliff_period=0, duration=3)
    assert vested_amount(schedule, 1) == 3  # 10/3 = 3.33
    assert vested_amount(schedule, 2) == 6  # 20/3 = 6.67
    assert vested_amount(schedule, 3) == 10


def test_vesting_respects_start_time_offset():
    schedule = _schedule(start_time=1_700_000_000)
    assert vested_amount(schedule, 1_700_000_100) == 0
    assert vested_amount(schedule, 1_700_000_550) == 500
    assert vested_amount(schedule, 1_700_001_000) == 1000


def test_vested_amount_is_monotonic():
    schedule = _schedule(total_amount=7_777, cliff_period=37, duration=1_013)
    previous = 0
    for now in range(0, 1_100):
        current = vested_amount(schedule, now)
        assert current >= previous
        assert current <= schedule.total_amount
        previous = current


def test_large_amounts_keep_full_precision():
    """10^9 tokens with 18 decimals do not lose precision in the product."""
    total = 10**27
    schedule = _schedule(total_amount=total, cliff_period=0, duration=3)
    assert vested_amount(schedule, 1) == total // 3
    assert vested_amount(schedule, 2) == 2 * total // 3


def test_releasable_amount_subtracts_released():
    schedule = _schedule(released_amount=300)
    assert releasable_amount(schedule, 550) == 200
    assert releasable_amount(schedule, 200) == 0
    schedule.released_amount = 1000
    assert releasable_amount(schedule, 2000) == 0


def test_schedule_derived_fields():
    schedule = _schedule(start_time=10)
    assert schedule.cliff_end == 110
    assert schedule.end_time == 1010
    assert schedule.is_fully_released is False

    data = schedule.to_dict()
    assert data["total_amount"] == 1000
    assert data["released_amount"] == 0
    assert data["cliff_end"] == 110
    assert data["end_time"] == 1010

    schedule.released_amount = 1000
    assert schedule.is_fully_released is True
