"""Manifest discovery configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Final

from .env import env_bool, env_float, optional_env_var, require_env_vars
from .errors import ConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig
from .storage import StorageConfig, get_storage_config

DEFAULT_BRANCH: Final[str] = "main"
DEFAULT_CATALOG_INFO_PATH: Final[str] = "catalog-info.yaml"
DEFAULT_FREQUENCY_MINUTES: Final[float] = 60.0
DEFAULT_TIMEOUT_MINUTES: Final[float] = 5.0
MANIFEST_TIMEOUT_SECONDS: Final[float] = 30.0
SINK_TIMEOUT_SECONDS: Final[float] = 30.0


@dataclass(frozen=True, slots=True)
class CredentialsConfig:
    """Basic-auth credentials for the host serving the manifest."""

    username: str
    secret: str


@dataclass(frozen=True, slots=True)
class ScheduleConfig:
    frequency: timedelta = timedelta(minutes=DEFAULT_FREQUENCY_MINUTES)
    timeout: timedelta = timedelta(minutes=DEFAULT_TIMEOUT_MINUTES)


@dataclass(frozen=True, slots=True)
class DiscoveryConfig:
    """Everything a discovery pass needs, resolved once at startup."""

    manifest_url: str
    default_branch: str = DEFAULT_BRANCH
    default_catalog_info_path: str = DEFAULT_CATALOG_INFO_PATH
    credentials: CredentialsConfig | None = None
    schedule: ScheduleConfig = field(default_factory=ScheduleConfig)
    sink_url: str | None = None
    debug: bool = False
    manifest_resilience: ResilienceConfig = field(
        default_factory=lambda: ResilienceConfig(
            name="manifest",
            timeout_seconds=MANIFEST_TIMEOUT_SECONDS,
        )
    )
    sink_resilience: ResilienceConfig = field(
        default_factory=lambda: ResilienceConfig(
            name="catalog-sink",
            timeout_seconds=SINK_TIMEOUT_SECONDS,
        )
    )


def _load_credentials() -> CredentialsConfig | None:
    username = optional_env_var("BITBUCKET_USERNAME")
    secret = optional_env_var("BITBUCKET_APP_PASSWORD")
    if username is None and secret is None:
        return None
    if username is None or secret is None:
        raise ConfigurationError(
            "BITBUCKET_USERNAME and BITBUCKET_APP_PASSWORD must be set together"
        )
    return CredentialsConfig(username=username, secret=secret)


def _load_cache_config(storage: StorageConfig) -> CacheConfig | None:
    backend = (optional_env_var("MANIFESTSYNC_HTTP_CACHE", "off") or "off").lower()
    if backend == "off":
        return None
    if backend == "memory":
        return CacheConfig(backend="memory")
    if backend == "sqlite":
        return CacheConfig(backend="sqlite", sqlite_path=str(storage.http_cache_path()))
    raise ConfigurationError(
        f"MANIFESTSYNC_HTTP_CACHE must be one of off, memory, sqlite; got {backend!r}"
    )


def get_discovery_config(*, storage: StorageConfig | None = None) -> DiscoveryConfig:
    values = require_env_vars(("MANIFEST_URL",))
    storage_config = storage or get_storage_config()
    schedule = ScheduleConfig(
        frequency=timedelta(
            minutes=env_float("SCHEDULE_FREQUENCY_MINUTES", DEFAULT_FREQUENCY_MINUTES)
        ),
        timeout=timedelta(minutes=env_float("SCHEDULE_TIMEOUT_MINUTES", DEFAULT_TIMEOUT_MINUTES)),
    )
    return DiscoveryConfig(
        manifest_url=values["MANIFEST_URL"],
        default_branch=optional_env_var("MANIFEST_DEFAULT_BRANCH", DEFAULT_BRANCH)
        or DEFAULT_BRANCH,
        default_catalog_info_path=optional_env_var(
            "MANIFEST_CATALOG_INFO_PATH", DEFAULT_CATALOG_INFO_PATH
        )
        or DEFAULT_CATALOG_INFO_PATH,
        credentials=_load_credentials(),
        schedule=schedule,
        sink_url=optional_env_var("CATALOG_SINK_URL"),
        debug=env_bool("MANIFESTSYNC_DEBUG"),
        manifest_resilience=ResilienceConfig(
            name="manifest",
            timeout_seconds=MANIFEST_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=2, per_seconds=1.0),
            cache=_load_cache_config(storage_config),
            default_headers={"Accept": "application/yaml"},
        ),
    )
