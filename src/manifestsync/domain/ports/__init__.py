"""Domain port definitions for adapters."""

from __future__ import annotations

from .fetching import Credentials, CredentialsResolver, ManifestFetcher
from .persistence import VersionRepository
from .publishing import LocationSink
from .unit_of_work import (
    RepositoryCollection,
    UnitOfWork,
    VersionRepositories,
    VersionUnitOfWork,
)

__all__ = [
    "Credentials",
    "CredentialsResolver",
    "LocationSink",
    "ManifestFetcher",
    "RepositoryCollection",
    "UnitOfWork",
    "VersionRepositories",
    "VersionRepository",
    "VersionUnitOfWork",
]
