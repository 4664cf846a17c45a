"""
Tests for environment configuration, structured logging and metrics wiring.
"""

import importlib
import json
import logging

import pytest
from prometheus_client import REGISTRY

from vestvault.core import config, vesting_ledger
from vestvault.core.logging_config import setup_logging
from vestvault.core.vesting_exceptions import InvalidAmountError
from vestvault.core.vesting_ledger import VestingLedger


@pytest.fixture
def reload_config(monkeypatch):
    """Reload the config module under a patched environment, then restore it."""
    yield lambda: importlib.reload(config)
    monkeypatch.undo()
    importlib.reload(config)


@pytest.mark.parametrize("raw, expected", [("1", True), ("true", True), ("ON", True), ("0", False), ("", False), ("no", False)])
def test_boolean_flags(monkeypatch, raw, expected):
    monkeypatch.setenv("VESTVAULT_TEST_FLAG", raw)
    assert config._get_bool("VESTVAULT_TEST_FLAG", "0") is expected


def test_invalid_boolean_flag(monkeypatch):
    monkeypatch.setenv("VESTVAULT_TEST_FLAG", "maybe")
    with pytest.raises(config.ConfigurationError):
        config._get_bool("VESTVAULT_TEST_FLAG", "0")


def test_mainnet_selection(monkeypatch, reload_config):
    monkeypatch.setenv("VESTVAULT_NETWORK", "mainnet")
    monkeypatch.setenv("VESTVAULT_ESCROW_ADDRESS", "0xvault")
    monkeypatch.setenv("VESTVAULT_STRICT_QUERIES", "1")
    module = reload_config()

    assert module.Config is module.MainnetConfig
    assert module.Config.NETWORK_TYPE is module.NetworkType.MAINNET
    assert module.Config.ESCROW_ADDRESS == "0xvault"
    assert module.Config.STRICT_QUERIES is True


def test_testnet_is_default(monkeypatch, reload_config):
    monkeypatch.delenv("VESTVAULT_NETWORK", raising=False)
    monkeypatch.delenv("VESTVAULT_ESCROW_ADDRESS", raising=False)
    module = reload_config()

    assert module.Config is module.TestnetConfig
    assert module.Config.ESCROW_ADDRESS == "tvest_escrow"


@pytest.mark.parametrize("env_var, value", [("VESTVAULT_NETWORK", "devnet"), ("VESTVAULT_LOG_LEVEL", "LOUD")])
def test_invalid_environment_rejected(monkeypatch, reload_config, env_var, value):
    monkeypatch.setenv(env_var, value)
    # Reloading redefines the exception class, so match it by name
    with pytest.raises(Exception) as excinfo:
        reload_config()
    assert type(excinfo.value).__name__ == "ConfigurationError"


def test_ledger_defaults_come_from_config(asset_ledger):
    ledger = VestingLedger(asset_ledger, metrics_enabled=False)
    assert ledger.escrow_address == vesting_ledger.Config.ESCROW_ADDRESS
    assert ledger.strict_queries == vesting_ledger.Config.STRICT_QUERIES


def test_setup_logging_writes_json(tmp_path):
    log_file = tmp_path / "logs" / "vesting.json"
    logger = setup_logging(
        name="vestvault_logtest",
        log_file=str(log_file),
        level="INFO",
        environment="test",
        enable_console=False,
    )
    logger.debug("hidden")
    logger.info("Schedule created", extra={"event": "vesting.schedule_created", "schedule_id": 3})
    for handler in logger.handlers:
        handler.flush()

    lines = log_file.read_text().strip().splitlines()
    assert len(lines) == 1
    record = json.loads(lines[0])
    assert record["message"] == "Schedule created"
    assert record["event"] == "vesting.schedule_created"
    assert record["schedule_id"] == 3
    assert record["environment"] == "test"
    assert record["service"] == "vestvault_logtest"
    assert record["level"] == "info"
    assert record["timestamp"]
    assert record["source"]["function"] == "test_setup_logging_writes_json"

    # Reconfiguring does not duplicate handlers
    logger = setup_logging(name="vestvault_logtest", level="INFO", enable_console=False)
    assert logger.handlers == []
    assert logger.level == logging.INFO


def _sample(name, labels=None):
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


def test_ledger_records_prometheus_metrics(asset_ledger, clock):
    ledger = VestingLedger(asset_ledger, escrow_address="0xmetrics", time_provider=clock.now, metrics_enabled=True)
    created_before = _sample("vestvault_schedules_created_total")
    escrowed_before = _sample("vestvault_tokens_escrowed_total")
    released_before = _sample("vestvault_tokens_released_total")
    rejected_labels = {"operation": "create_schedule", "error": "InvalidAmountError"}
    rejected_before = _sample("vestvault_rejected_operations_total", rejected_labels)

    ledger.create_schedule("0xfunder", "0xalice", 1000, 1000, 100)
    clock.set(550)
    ledger.release("0xalice", 0)
    with pytest.raises(InvalidAmountError):
        ledger.create_schedule("0xfunder", "0xalice", 0, 1000, 100)

    assert _sample("vestvault_schedules_created_total") == created_before + 1
    assert _sample("vestvault_tokens_escrowed_total") == escrowed_before + 1000
    assert _sample("vestvault_tokens_released_total") == released_before + 500
    assert _sample("vestvault_rejected_operations_total", rejected_labels) == rejected_before + 1
    assert _sample("vestvault_escrow_outstanding", {"escrow": "0xmetrics"}) == 500
