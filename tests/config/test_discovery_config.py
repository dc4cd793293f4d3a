from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

import pytest

from manifestsync.config import (
    ConfigurationError,
    CredentialsConfig,
    MissingConfigurationError,
    StorageConfig,
    get_database_config,
    get_discovery_config,
)
from tests.helpers.fakes import MANIFEST_URL

if TYPE_CHECKING:
    from pathlib import Path

_DISCOVERY_VARS = (
    "MANIFEST_URL",
    "MANIFEST_DEFAULT_BRANCH",
    "MANIFEST_CATALOG_INFO_PATH",
    "BITBUCKET_USERNAME",
    "BITBUCKET_APP_PASSWORD",
    "SCHEDULE_FREQUENCY_MINUTES",
    "SCHEDULE_TIMEOUT_MINUTES",
    "CATALOG_SINK_URL",
    "MANIFESTSYNC_DEBUG",
    "MANIFESTSYNC_HTTP_CACHE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _DISCOVERY_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def storage(tmp_path: Path) -> StorageConfig:
    return StorageConfig(data_dir=tmp_path)


def test_defaults_apply_when_only_manifest_url_is_set(
    monkeypatch: pytest.MonkeyPatch, storage: StorageConfig
) -> None:
    monkeypatch.setenv("MANIFEST_URL", MANIFEST_URL)

    config = get_discovery_config(storage=storage)

    assert config.manifest_url == MANIFEST_URL
    assert config.default_branch == "main"
    assert config.default_catalog_info_path == "catalog-info.yaml"
    assert config.credentials is None
    assert config.schedule.frequency == timedelta(minutes=60)
    assert config.schedule.timeout == timedelta(minutes=5)
    assert config.sink_url is None
    assert config.debug is False
    assert config.manifest_resilience.cache is None


def test_missing_manifest_url_raises(storage: StorageConfig) -> None:
    with pytest.raises(MissingConfigurationError, match="MANIFEST_URL"):
        get_discovery_config(storage=storage)


def test_overrides_are_read_from_environment(
    monkeypatch: pytest.MonkeyPatch, storage: StorageConfig
) -> None:
    monkeypatch.setenv("MANIFEST_URL", MANIFEST_URL)
    monkeypatch.setenv("MANIFEST_DEFAULT_BRANCH", "develop")
    monkeypatch.setenv("MANIFEST_CATALOG_INFO_PATH", "docs/catalog.yaml")
    monkeypatch.setenv("BITBUCKET_USERNAME", "bot")
    monkeypatch.setenv("BITBUCKET_APP_PASSWORD", "s3cret")
    monkeypatch.setenv("SCHEDULE_FREQUENCY_MINUTES", "15")
    monkeypatch.setenv("SCHEDULE_TIMEOUT_MINUTES", "0.5")
    monkeypatch.setenv("CATALOG_SINK_URL", "https://catalog.example.com/locations")
    monkeypatch.setenv("MANIFESTSYNC_DEBUG", "true")

    config = get_discovery_config(storage=storage)

    assert config.default_branch == "develop"
    assert config.default_catalog_info_path == "docs/catalog.yaml"
    assert config.credentials == CredentialsConfig(username="bot", secret="s3cret")
    assert config.schedule.frequency == timedelta(minutes=15)
    assert config.schedule.timeout == timedelta(seconds=30)
    assert config.sink_url == "https://catalog.example.com/locations"
    assert config.debug is True


def test_partial_credentials_are_rejected(
    monkeypatch: pytest.MonkeyPatch, storage: StorageConfig
) -> None:
    monkeypatch.setenv("MANIFEST_URL", MANIFEST_URL)
    monkeypatch.setenv("BITBUCKET_USERNAME", "bot")

    with pytest.raises(ConfigurationError, match="set together"):
        get_discovery_config(storage=storage)


@pytest.mark.parametrize(("raw", "backend"), [("memory", "memory"), ("SQLite", "sqlite")])
def test_http_cache_backend_selection(
    monkeypatch: pytest.MonkeyPatch, storage: StorageConfig, raw: str, backend: str
) -> None:
    monkeypatch.setenv("MANIFEST_URL", MANIFEST_URL)
    monkeypatch.setenv("MANIFESTSYNC_HTTP_CACHE", raw)

    cache = get_discovery_config(storage=storage).manifest_resilience.cache

    assert cache is not None
    assert cache.backend == backend


def test_unknown_http_cache_backend_is_rejected(
    monkeypatch: pytest.MonkeyPatch, storage: StorageConfig
) -> None:
    monkeypatch.setenv("MANIFEST_URL", MANIFEST_URL)
    monkeypatch.setenv("MANIFESTSYNC_HTTP_CACHE", "redis")

    with pytest.raises(ConfigurationError, match="MANIFESTSYNC_HTTP_CACHE"):
        get_discovery_config(storage=storage)


def test_database_config_prefers_database_uri(
    monkeypatch: pytest.MonkeyPatch, storage: StorageConfig
) -> None:
    monkeypatch.setenv("DATABASE_URI", "postgresql+psycopg://localhost/catalog")
    assert get_database_config(storage=storage).uri == "postgresql+psycopg://localhost/catalog"

    monkeypatch.delenv("DATABASE_URI")
    uri = get_database_config(storage=storage).uri
    assert uri.startswith("sqlite+pysqlite:///")
    assert uri.endswith("manifestsync.db")
