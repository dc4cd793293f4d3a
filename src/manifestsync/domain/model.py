"""Domain types shared by the reconciler, the store and the adapters."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from datetime import datetime

LOCATION_API_VERSION: Final[str] = "backstage.io/v1alpha1"
MANAGED_BY_LOCATION_ANNOTATION: Final[str] = "backstage.io/managed-by-location"
REPO_KEY_ANNOTATION: Final[str] = "bitbucket.org/repo-key"
MANIFEST_VERSION_ANNOTATION: Final[str] = "bitbucket.org/manifest-version"


def make_repo_key(workspace: str, repo_slug: str) -> str:
    return f"{workspace}/{repo_slug}"


@dataclass(frozen=True, slots=True)
class RepositoryDescriptor:
    """One manifest entry: a repository and the version it is declared at."""

    id: str
    workspace: str
    repo_slug: str
    version: str

    @property
    def repo_key(self) -> str:
        return make_repo_key(self.workspace, self.repo_slug)


@dataclass(frozen=True, slots=True)
class Manifest:
    repositories: tuple[RepositoryDescriptor, ...]
    name: str | None = None
    api_version: str | None = None
    kind: str | None = None


@dataclass(frozen=True, slots=True)
class VersionRecord:
    """Durable record of the last manifest version seen for a repository."""

    repo_key: str
    manifest_version: str
    last_seen_at: datetime
    last_registered_at: datetime | None = None


class Classification(StrEnum):
    NEW = "new"
    CHANGED = "changed"
    UNCHANGED = "unchanged"


def classify(prior: VersionRecord | None, version: str) -> Classification:
    """Compare a declared version with the stored one using exact string equality."""

    if prior is None:
        return Classification.NEW
    if prior.manifest_version == version:
        return Classification.UNCHANGED
    return Classification.CHANGED


@dataclass(frozen=True, slots=True)
class LocationPointer:
    """A catalog location telling the downstream catalog where to read a repository."""

    name: str
    target: str
    # compared but not hashed: pointers hash by name and target
    annotations: dict[str, str] = field(default_factory=dict[str, str], hash=False)

    @property
    def repo_key(self) -> str | None:
        return self.annotations.get(REPO_KEY_ANNOTATION)

    @property
    def manifest_version(self) -> str | None:
        return self.annotations.get(MANIFEST_VERSION_ANNOTATION)

    def to_entity(self) -> dict[str, object]:
        return {
            "apiVersion": LOCATION_API_VERSION,
            "kind": "Location",
            "metadata": {
                "name": self.name,
                "annotations": dict(self.annotations),
            },
            "spec": {
                "type": "url",
                "target": self.target,
            },
        }


@dataclass(frozen=True, slots=True)
class LocationDelta:
    """Additive mutation handed to the publication sink. Nothing is ever removed."""

    location_key: str
    added: tuple[LocationPointer, ...]
    removed: tuple[LocationPointer, ...] = ()

    @property
    def repo_keys(self) -> tuple[str, ...]:
        return tuple(location.repo_key or location.name for location in self.added)

    def to_payload(self) -> dict[str, object]:
        return {
            "type": "delta",
            "locationKey": self.location_key,
            "added": [location.to_entity() for location in self.added],
            "removed": [location.to_entity() for location in self.removed],
        }

    def __bool__(self) -> bool:
        return bool(self.added or self.removed)
