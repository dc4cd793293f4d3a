"""Where the version store and HTTP cache live on disk."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

APP_DIR_NAME: Final[str] = "manifestsync"
DEFAULT_DB_FILENAME: Final[str] = "manifestsync.db"
HTTP_CACHE_FILENAME: Final[str] = "http_cache.db"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path

    def _directory(self, *, ensure: bool) -> Path:
        directory = self.data_dir.expanduser().resolve()
        if ensure:
            directory.mkdir(parents=True, exist_ok=True)
        return directory

    def database_path(self, *, ensure: bool = True) -> Path:
        return self._directory(ensure=ensure) / DEFAULT_DB_FILENAME

    def http_cache_path(self, *, ensure: bool = True) -> Path:
        return self._directory(ensure=ensure) / HTTP_CACHE_FILENAME

    def database_uri(self) -> str:
        return f"sqlite+pysqlite:///{self.database_path()}"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def _default_data_dir() -> Path:
    xdg_data_home = os.getenv("XDG_DATA_HOME")
    base = Path(xdg_data_home) if xdg_data_home else Path.home() / ".local" / "share"
    return base / APP_DIR_NAME


def get_storage_config() -> StorageConfig:
    """``MANIFESTSYNC_DATA_DIR`` or ``$XDG_DATA_HOME/manifestsync``."""

    override = os.getenv("MANIFESTSYNC_DATA_DIR")
    return StorageConfig(data_dir=Path(override) if override else _default_data_dir())


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    """``DATABASE_URI`` wins; otherwise a SQLite file in the data directory."""

    uri = os.getenv("DATABASE_URI")
    if uri:
        return DatabaseConfig(uri=uri)
    return DatabaseConfig(uri=(storage or get_storage_config()).database_uri())
