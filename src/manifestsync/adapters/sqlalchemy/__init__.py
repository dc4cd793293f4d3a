"""SQLAlchemy adapter package for the version store."""

from __future__ import annotations

from .mappings import manifest_version_table, metadata
from .repositories import SqlAlchemyVersionRepository
from .unit_of_work import (
    SqlAlchemyVersionUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyVersionRepository",
    "SqlAlchemyVersionUnitOfWork",
    "StartupError",
    "configured_engine",
    "is_started",
    "manifest_version_table",
    "metadata",
    "shutdown",
    "startup",
]
