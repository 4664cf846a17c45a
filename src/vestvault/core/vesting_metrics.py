"""
Vesting ledger instrumentation.

Prometheus metrics tracking how much is escrowed into and released out of
vesting schedules, with helpers that are safe to call from inside the
ledger's critical section.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge

schedules_created_counter = Counter(
    "vestvault_schedules_created_total", "Total vesting schedules created"
)

tokens_escrowed_counter = Counter(
    "vestvault_tokens_escrowed_total", "Total amount moved into vesting escrow"
)

tokens_released_counter = Counter(
    "vestvault_tokens_released_total", "Total amount released from vesting escrow"
)

rejected_operations_counter = Counter(
    "vestvault_rejected_operations_total",
    "Vesting operations rejected by a precondition",
    ["operation", "error"],
)

escrow_outstanding_gauge = Gauge(
    "vestvault_escrow_outstanding", "Amount still held in escrow across all schedules", ["escrow"]
)


def record_schedule_created(amount: int) -> None:
    schedules_created_counter.inc()
    tokens_escrowed_counter.inc(amount)


def record_release(amount: int) -> None:
    if amount <= 0:
        return
    tokens_released_counter.inc(amount)


def record_rejection(operation: str, error: Exception) -> None:
    rejected_operations_counter.labels(operation=operation, error=type(error).__name__).inc()


def update_escrow_outstanding(escrow_address: str, outstanding: int) -> None:
    """Refresh the outstanding escrow gauge."""
    escrow_outstanding_gauge.labels(escrow=escrow_address).set(outstanding)
