"""
vestvault Configuration

Supports testnet and mainnet with separate defaults. Every value can be
overridden through VESTVAULT_* environment variables, and explicit
VestingLedger constructor arguments take precedence over both.
"""

from __future__ import annotations

import logging
import os
from enum import Enum

logger = logging.getLogger(__name__)


class NetworkType(Enum):
    TESTNET = "testnet"
    MAINNET = "mainnet"


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _get_bool(env_var: str, default: str) -> bool:
    """Parse a boolean flag from the environment."""
    value = os.getenv(env_var, default).strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{env_var} must be a boolean flag (0/1, true/false), got {value!r}")


# Get network type from environment variable
NETWORK = os.getenv("VESTVAULT_NETWORK", "testnet").strip().lower()  # Default to testnet for safety
if NETWORK not in {n.value for n in NetworkType}:
    raise ConfigurationError(f"VESTVAULT_NETWORK must be 'testnet' or 'mainnet', got {NETWORK!r}")

ESCROW_ADDRESS = os.getenv("VESTVAULT_ESCROW_ADDRESS", "").strip()
STRICT_QUERIES = _get_bool("VESTVAULT_STRICT_QUERIES", "0")
LOG_LEVEL = os.getenv("VESTVAULT_LOG_LEVEL", "INFO").strip().upper()
if LOG_LEVEL not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
    raise ConfigurationError(f"VESTVAULT_LOG_LEVEL is not a logging level: {LOG_LEVEL!r}")
LOG_FILE = os.getenv("VESTVAULT_LOG_FILE", "").strip()
METRICS_ENABLED = _get_bool("VESTVAULT_METRICS_ENABLED", "1")


class TestnetConfig:
    """Testnet Configuration (for local testing before mainnet)"""

    NETWORK_TYPE = NetworkType.TESTNET
    ENVIRONMENT = "testnet"
    ESCROW_ADDRESS = ESCROW_ADDRESS or "tvest_escrow"
    STRICT_QUERIES = STRICT_QUERIES
    LOG_LEVEL = LOG_LEVEL
    LOG_FILE = LOG_FILE
    METRICS_ENABLED = METRICS_ENABLED


class MainnetConfig:
    """Mainnet Configuration (production ledger)"""

    NETWORK_TYPE = NetworkType.MAINNET
    ENVIRONMENT = "production"
    ESCROW_ADDRESS = ESCROW_ADDRESS or "vest_escrow"
    STRICT_QUERIES = STRICT_QUERIES
    LOG_LEVEL = LOG_LEVEL
    LOG_FILE = LOG_FILE
    METRICS_ENABLED = METRICS_ENABLED


# Select config based on network
if NETWORK == NetworkType.MAINNET.value:
    Config = MainnetConfig
else:
    Config = TestnetConfig

# Export config
__all__ = [
    "Config",
    "ConfigurationError",
    "NetworkType",
    "TestnetConfig",
    "MainnetConfig",
    "NETWORK",
    "ESCROW_ADDRESS",
    "STRICT_QUERIES",
    "LOG_LEVEL",
    "LOG_FILE",
    "METRICS_ENABLED",
]
