"""Application configuration helpers."""

from __future__ import annotations

from trackr.common.logging import configure_logging

from .engine import (
    LicensingConfig,
    ReconciliationConfig,
    get_licensing_config,
    get_reconciliation_config,
)
from .env import env_bool, env_float, env_int
from .errors import ConfigurationError
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "LicensingConfig",
    "ReconciliationConfig",
    "StorageConfig",
    "configure_logging",
    "env_bool",
    "env_float",
    "env_int",
    "get_database_config",
    "get_licensing_config",
    "get_reconciliation_config",
    "get_storage_config",
]
