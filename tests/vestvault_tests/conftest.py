import pytest

from vestvault.core.asset_ledger import InMemoryAssetLedger
from vestvault.core.vesting_ledger import VestingLedger

ESCROW = "0xescrow"
FUNDER = "0xfunder"


class ManualClock:
    def __init__(self, start_time: int):
        self.current_time = start_time

    def now(self) -> int:
        return self.current_time

    def advance(self, seconds: int):
        self.current_time += seconds

    def set(self, timestamp: int):
        self.current_time = timestamp


@pytest.fixture
def clock():
    return ManualClock(start_time=0)


@pytest.fixture
def asset_ledger():
    token = InMemoryAssetLedger(symbol="VEST")
    token.mint(FUNDER, 1_000_000)
    return token


@pytest.fixture
def ledger(asset_ledger, clock):
    return VestingLedger(
        asset_ledger,
        escrow_address=ESCROW,
        time_provider=clock.now,
        strict_queries=False,
        metrics_enabled=False,
    )
