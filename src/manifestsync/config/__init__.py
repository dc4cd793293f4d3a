"""Application configuration helpers."""

from __future__ import annotations

from .discovery import (
    CredentialsConfig,
    DiscoveryConfig,
    ScheduleConfig,
    get_discovery_config,
)
from .env import env_bool, env_float, optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "CacheConfig",
    "ConfigurationError",
    "CredentialsConfig",
    "DatabaseConfig",
    "DiscoveryConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "ScheduleConfig",
    "StorageConfig",
    "configure_logging",
    "env_bool",
    "env_float",
    "get_database_config",
    "get_discovery_config",
    "get_storage_config",
    "optional_env_var",
    "require_env_vars",
]
