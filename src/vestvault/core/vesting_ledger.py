"""
vestvault - Vesting Ledger

Tracks per-beneficiary vesting schedules backed by an escrow account on an
injected AssetLedger.

Each beneficiary owns a dense, zero-based sequence of schedule ids. Creating
a schedule pulls the escrowed amount from the creator into the escrow
account; releasing pays the vested-but-unreleased share back out to the
beneficiary. Schedules are never deleted.

Thread Safety: every mutating operation and every query runs under a single
RLock, so read-modify-write of ``released_amount`` is atomic.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, replace
from threading import RLock
from typing import Any, Callable, Optional

from . import vesting_metrics
from .asset_ledger import ZERO_ADDRESS
from .config import Config
from .protocols import AssetLedger, TimeProvider
from .vesting_exceptions import (
    CliffNotElapsedError,
    EscrowTransferError,
    InsufficientFundsError,
    InvalidAmountError,
    InvalidBeneficiaryError,
    InvalidCallerError,
    InvalidDurationError,
    NothingToReleaseError,
    ScheduleNotFoundError,
    VestingError,
)
from .vesting_math import VestingSchedule, releasable_amount, vested_amount

logger = logging.getLogger(__name__)

SCHEDULE_CREATED = "ScheduleCreated"
TOKENS_RELEASED = "TokensReleased"


@dataclass(frozen=True)
class VestingEvent:
    """Notification emitted after a committed create or release."""

    event_type: str  # SCHEDULE_CREATED or TOKENS_RELEASED
    beneficiary: str
    schedule_id: int
    amount: int
    timestamp: int


EventListener = Callable[[VestingEvent], None]


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class VestingLedger:
    """
    Per-beneficiary vesting schedules with escrowed funds.

    Usage:
        ledger = VestingLedger(asset_ledger, time_provider=clock.now)
        schedule_id = ledger.create_schedule("0xfunder", "0xalice", 1000, 1000, 100)
        ...
        released = ledger.release("0xalice", schedule_id)
    """

    def __init__(
        self,
        asset_ledger: AssetLedger,
        escrow_address: Optional[str] = None,
        time_provider: Optional[TimeProvider] = None,
        strict_queries: Optional[bool] = None,
        metrics_enabled: Optional[bool] = None,
    ) -> None:
        """
        Initialize the vesting ledger.

        Args:
            asset_ledger: Ledger holding balances; escrow lives on it
            escrow_address: Escrow account; defaults to Config.ESCROW_ADDRESS
            time_provider: Clock returning integer timestamps
            strict_queries: Raise ScheduleNotFoundError from read-only
                queries instead of reporting zero; defaults to
                Config.STRICT_QUERIES
            metrics_enabled: Record Prometheus metrics; defaults to
                Config.METRICS_ENABLED
        """
        self.asset_ledger = asset_ledger
        self.escrow_address = escrow_address or Config.ESCROW_ADDRESS
        self._time_provider = time_provider or (lambda: int(time.time()))
        self.strict_queries = Config.STRICT_QUERIES if strict_queries is None else strict_queries
        self.metrics_enabled = Config.METRICS_ENABLED if metrics_enabled is None else metrics_enabled

        # {beneficiary: [VestingSchedule, ...]} indexed by schedule_id
        self.vesting_schedules: dict[str, list[VestingSchedule]] = {}
        self._schedule_counters: dict[str, int] = {}
        # Unreleased amount across all schedules; mirrors the escrow balance
        self._outstanding = 0
        self.events: list[VestingEvent] = []
        self._listeners: list[EventListener] = []
        self.lock = RLock()

        logger.info(
            "VestingLedger initialized with escrow %s (deterministic time provider: %s)",
            self.escrow_address,
            bool(time_provider),
        )

    def _current_time(self) -> int:
        timestamp = self._time_provider()
        try:
            return int(timestamp)
        except (TypeError, ValueError) as exc:
            raise ValueError("time_provider must return an integer timestamp") from exc

    # ==================== State-Changing Functions ====================

    def create_schedule(
        self,
        caller: str,
        beneficiary: str,
        amount: int,
        duration: int,
        cliff_period: int,
    ) -> int:
        """
        Escrow ``amount`` from caller into a new schedule for beneficiary.

        Preconditions are checked in order and the first failure is raised:
        beneficiary, amount, caller and its balance, duration.

        Args:
            caller: Already-authorized account funding the schedule
            beneficiary: Account entitled to the vested funds
            amount: Quantity to escrow
            duration: Seconds from now until fully vested
            cliff_period: Seconds from now before anything vests

        Returns:
            The new schedule_id for beneficiary

        Raises:
            InvalidBeneficiaryError, InvalidAmountError, InvalidCallerError,
            InsufficientFundsError, InvalidDurationError, EscrowTransferError
        """
        with self.lock:
            now = self._current_time()
            try:
                self._validate_beneficiary(beneficiary)
                self._validate_amount(amount)
                self._validate_caller(caller)
                balance = self.asset_ledger.balance_of(caller)
                if balance < amount:
                    raise InsufficientFundsError(
                        f"Caller balance {balance} is below requested escrow {amount}",
                        available=balance,
                        required=amount,
                        details={"caller": caller},
                    )
                self._validate_duration(duration, cliff_period)
                if not self.asset_ledger.transfer(caller, self.escrow_address, amount):
                    raise EscrowTransferError(
                        f"Asset ledger refused escrow deposit of {amount} from {caller}",
                        details={"caller": caller, "escrow": self.escrow_address, "amount": amount},
                    )
            except VestingError as exc:
                self._reject("create_schedule", exc, beneficiary=beneficiary, amount=amount)
                raise

            schedule_id = self._schedule_counters.get(beneficiary, 0)
            self._schedule_counters[beneficiary] = schedule_id + 1
            self.vesting_schedules.setdefault(beneficiary, []).append(
                VestingSchedule(
                    total_amount=amount,
                    start_time=now,
                    cliff_period=cliff_period,
                    duration=duration,
                )
            )
            self._outstanding += amount
            event = self._record_event(SCHEDULE_CREATED, beneficiary, schedule_id, amount, now)

            if self.metrics_enabled:
                vesting_metrics.record_schedule_created(amount)
                vesting_metrics.update_escrow_outstanding(self.escrow_address, self._outstanding)

        logger.info(
            "Vesting schedule %s created for %s: %s escrowed, cliff %ss, duration %ss",
            schedule_id,
            beneficiary,
            amount,
            cliff_period,
            duration,
            extra={
                "event": "vesting.schedule_created",
                "beneficiary": beneficiary,
                "schedule_id": schedule_id,
                "amount": amount,
            },
        )
        self._notify(event)
        return schedule_id

    def release(self, caller: str, schedule_id: int) -> int:
        """
        Pay out everything vested but not yet released on one of caller's schedules.

        Args:
            caller: Beneficiary releasing its own schedule
            schedule_id: Handle returned by create_schedule

        Returns:
            Amount transferred to caller

        Raises:
            ScheduleNotFoundError: caller has no schedule with that id
            CliffNotElapsedError: now is at or before the cliff end
            NothingToReleaseError: everything vested is already released
        """
        with self.lock:
            now = self._current_time()
            try:
                schedule = self._require_schedule(caller, schedule_id)
                if now <= schedule.cliff_end:
                    raise CliffNotElapsedError(
                        f"Cliff for schedule {schedule_id} ends at {schedule.cliff_end}",
                        details={"beneficiary": caller, "schedule_id": schedule_id, "now": now},
                    )
                vested = vested_amount(schedule, now)
                if vested <= schedule.released_amount:
                    raise NothingToReleaseError(
                        f"Nothing to release for schedule {schedule_id}",
                        details={
                            "beneficiary": caller,
                            "schedule_id": schedule_id,
                            "vested": vested,
                            "released": schedule.released_amount,
                        },
                    )
            except VestingError as exc:
                self._reject("release", exc, beneficiary=caller, schedule_id=schedule_id)
                raise

            releasable = vested - schedule.released_amount
            # Commit bookkeeping before the external call, undo if it fails
            schedule.released_amount += releasable
            self._outstanding -= releasable
            try:
                if not self.asset_ledger.transfer(self.escrow_address, caller, releasable):
                    raise EscrowTransferError(
                        f"Asset ledger refused escrow payout of {releasable} to {caller}",
                        details={"beneficiary": caller, "schedule_id": schedule_id, "amount": releasable},
                    )
            except Exception:
                schedule.released_amount -= releasable
                self._outstanding += releasable
                logger.error(
                    "Escrow payout failed for schedule %s of %s, release rolled back",
                    schedule_id,
                    caller,
                    extra={
                        "event": "vesting.release_rolled_back",
                        "beneficiary": caller,
                        "schedule_id": schedule_id,
                        "amount": releasable,
                    },
                )
                raise

            event = self._record_event(TOKENS_RELEASED, caller, schedule_id, releasable, now)

            if self.metrics_enabled:
                vesting_metrics.record_release(releasable)
                vesting_metrics.update_escrow_outstanding(self.escrow_address, self._outstanding)

        logger.info(
            "Released %s from schedule %s to %s (%s/%s released)",
            releasable,
            schedule_id,
            caller,
            schedule.released_amount,
            schedule.total_amount,
            extra={
                "event": "vesting.tokens_released",
                "beneficiary": caller,
                "schedule_id": schedule_id,
                "amount": releasable,
            },
        )
        self._notify(event)
        return releasable

    # ==================== View Functions ====================

    def get_vested_amount(
        self, beneficiary: str, schedule_id: int, current_time: Optional[int] = None
    ) -> int:
        """
        Cumulative amount vested on a schedule, regardless of releases.

        Unknown schedules report 0 unless strict_queries is set, in which
        case ScheduleNotFoundError is raised.
        """
        with self.lock:
            schedule = self._lookup_for_query(beneficiary, schedule_id)
            if schedule is None:
                return 0
            now = self._current_time() if current_time is None else int(current_time)
            return vested_amount(schedule, now)

    def get_releasable_amount(
        self, beneficiary: str, schedule_id: int, current_time: Optional[int] = None
    ) -> int:
        """Amount a release would pay out right now (0 during the cliff)."""
        with self.lock:
            schedule = self._lookup_for_query(beneficiary, schedule_id)
            if schedule is None:
                return 0
            now = self._current_time() if current_time is None else int(current_time)
            return releasable_amount(schedule, now)

    def get_schedule_count(self, beneficiary: str) -> int:
        with self.lock:
            return self._schedule_counters.get(beneficiary, 0)

    def get_schedule(self, beneficiary: str, schedule_id: int) -> VestingSchedule:
        """Detached copy of a schedule; mutating it does not touch the ledger."""
        with self.lock:
            return replace(self._require_schedule(beneficiary, schedule_id))

    def get_schedules(self, beneficiary: str) -> list[VestingSchedule]:
        with self.lock:
            return [replace(s) for s in self.vesting_schedules.get(beneficiary, [])]

    def get_total_escrowed(self) -> int:
        """Sum of unreleased amounts across every schedule."""
        with self.lock:
            return self._outstanding

    def get_vesting_metrics(self) -> dict[str, int]:
        with self.lock:
            all_schedules = [s for schedules in self.vesting_schedules.values() for s in schedules]
            return {
                "beneficiaries": len(self.vesting_schedules),
                "schedules": len(all_schedules),
                "fully_released_schedules": sum(1 for s in all_schedules if s.is_fully_released),
                "total_escrowed": sum(s.total_amount - s.released_amount for s in all_schedules),
                "total_released": sum(s.released_amount for s in all_schedules),
            }

    # ==================== Notifications ====================

    def subscribe(self, listener: EventListener) -> None:
        with self.lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def unsubscribe(self, listener: EventListener) -> None:
        with self.lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _record_event(
        self, event_type: str, beneficiary: str, schedule_id: int, amount: int, timestamp: int
    ) -> VestingEvent:
        event = VestingEvent(event_type, beneficiary, schedule_id, amount, timestamp)
        self.events.append(event)
        return event

    def _notify(self, event: VestingEvent) -> None:
        with self.lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                # The operation is already committed; a listener cannot undo it
                logger.exception(
                    "Vesting listener %r failed for %s",
                    listener,
                    event.event_type,
                    extra={"event": "vesting.listener_failed", "schedule_id": event.schedule_id},
                )

    # ==================== Helpers ====================

    def _find_schedule(self, beneficiary: str, schedule_id: int) -> Optional[VestingSchedule]:
        schedules = self.vesting_schedules.get(beneficiary)
        if not schedules or not _is_int(schedule_id) or not 0 <= schedule_id < len(schedules):
            return None
        return schedules[schedule_id]

    def _require_schedule(self, beneficiary: str, schedule_id: int) -> VestingSchedule:
        schedule = self._find_schedule(beneficiary, schedule_id)
        if schedule is None:
            raise ScheduleNotFoundError(
                f"Vesting schedule {schedule_id} not found for {beneficiary}.",
                details={"beneficiary": beneficiary, "schedule_id": schedule_id},
            )
        return schedule

    def _lookup_for_query(self, beneficiary: str, schedule_id: int) -> Optional[VestingSchedule]:
        if self.strict_queries:
            return self._require_schedule(beneficiary, schedule_id)
        return self._find_schedule(beneficiary, schedule_id)

    def _validate_beneficiary(self, beneficiary: str) -> None:
        if not isinstance(beneficiary, str) or not beneficiary.strip():
            raise InvalidBeneficiaryError("Beneficiary cannot be empty.")
        if beneficiary.lower() == ZERO_ADDRESS:
            raise InvalidBeneficiaryError("Beneficiary cannot be the zero address.")
        if self._is_escrow(beneficiary):
            raise InvalidBeneficiaryError("Beneficiary cannot be the escrow account.")

    def _validate_caller(self, caller: str) -> None:
        if not isinstance(caller, str) or not caller.strip():
            raise InvalidCallerError("Caller cannot be empty.")
        if caller.lower() == ZERO_ADDRESS:
            raise InvalidCallerError("Caller cannot be the zero address.")
        if self._is_escrow(caller):
            raise InvalidCallerError(
                "Escrowed funds cannot back a new schedule.", details={"caller": caller}
            )

    def _is_escrow(self, account: str) -> bool:
        return account.lower() == self.escrow_address.lower()

    def _validate_amount(self, amount: int) -> None:
        if not _is_int(amount) or amount <= 0:
            raise InvalidAmountError(
                "Amount must be a positive integer.", details={"amount": amount}
            )

    def _validate_duration(self, duration: int, cliff_period: int) -> None:
        if not _is_int(duration) or not _is_int(cliff_period):
            raise InvalidDurationError("Duration and cliff period must be integer seconds.")
        if cliff_period < 0:
            raise InvalidDurationError("Cliff period cannot be negative.")
        if duration <= cliff_period:
            raise InvalidDurationError(
                f"Duration {duration} must exceed cliff period {cliff_period}.",
                details={"duration": duration, "cliff_period": cliff_period},
            )

    def _reject(self, operation: str, error: VestingError, **context: Any) -> None:
        logger.warning(
            "Vesting %s rejected: %s",
            operation,
            error.message,
            extra={"event": f"vesting.{operation}_rejected", "error": type(error).__name__, **context},
        )
        if self.metrics_enabled:
            vesting_metrics.record_rejection(operation, error)


__all__ = [
    "VestingLedger",
    "VestingEvent",
    "EventListener",
    "SCHEDULE_CREATED",
    "TOKENS_RELEASED",
]
