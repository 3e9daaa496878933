"""Application configuration helpers."""

from __future__ import annotations

from .bepaid import BepaidConfig, bepaid_resilience, get_bepaid_config
from .env import optional_env_int, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .reconcile import ReconcileSettings, default_settings, get_reconcile_settings
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "BepaidConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ReconcileSettings",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "bepaid_resilience",
    "configure_logging",
    "default_settings",
    "get_bepaid_config",
    "get_database_config",
    "get_reconcile_settings",
    "get_storage_config",
    "optional_env_int",
    "require_env_vars",
]
