"""Reusable fakes and helpers for discovery tests."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Literal

from manifestsync.domain.errors import MissingVersionRecordError, SinkError, StoreError
from manifestsync.domain.model import Manifest, RepositoryDescriptor, VersionRecord
from manifestsync.domain.ports.fetching import ManifestFetcher
from manifestsync.domain.ports.publishing import LocationSink
from manifestsync.domain.ports.unit_of_work import VersionRepositories

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from types import TracebackType

    from manifestsync.domain.model import LocationDelta

MANIFEST_URL = "https://api.bitbucket.org/2.0/repositories/acme/manifests/src/main/repos.yaml"


def make_descriptor(
    repo_slug: str,
    version: str,
    *,
    workspace: str = "acme",
    descriptor_id: str | None = None,
) -> RepositoryDescriptor:
    return RepositoryDescriptor(
        id=descriptor_id or repo_slug,
        workspace=workspace,
        repo_slug=repo_slug,
        version=version,
    )


def make_manifest(*descriptors: RepositoryDescriptor) -> Manifest:
    return Manifest(repositories=tuple(descriptors), name="test-manifest")


class TickingClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2026, 1, 10, 12, tzinfo=UTC)

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


class FakeVersionRepository:
    """In-memory implementation of the version repository port."""

    def __init__(
        self,
        records: Iterable[VersionRecord] = (),
        *,
        clock: TickingClock | None = None,
    ) -> None:
        self.records: dict[str, VersionRecord] = {record.repo_key: record for record in records}
        self.clock = clock or TickingClock()
        self.fail_upsert_for: set[str] = set()
        self.fail_register_for: set[str] = set()
        self.calls: list[tuple[str, str]] = []

    def get(self, repo_key: str) -> VersionRecord | None:
        self.calls.append(("get", repo_key))
        return self.records.get(repo_key)

    def upsert_seen(self, repo_key: str, version: str) -> None:
        self.calls.append(("upsert_seen", repo_key))
        if repo_key in self.fail_upsert_for:
            raise StoreError(f"simulated upsert failure for {repo_key}")
        now = self.clock()
        existing = self.records.get(repo_key)
        if existing is None:
            self.records[repo_key] = VersionRecord(
                repo_key=repo_key,
                manifest_version=version,
                last_seen_at=now,
            )
        else:
            self.records[repo_key] = replace(existing, manifest_version=version, last_seen_at=now)

    def mark_registered(self, repo_key: str) -> None:
        self.calls.append(("mark_registered", repo_key))
        if repo_key in self.fail_register_for:
            raise StoreError(f"simulated register failure for {repo_key}")
        existing = self.records.get(repo_key)
        if existing is None:
            raise MissingVersionRecordError(repo_key)
        self.records[repo_key] = replace(existing, last_registered_at=self.clock())

    def list_all(self) -> Sequence[VersionRecord]:
        return [self.records[key] for key in sorted(self.records)]

    def mutated_keys(self) -> set[str]:
        return {key for call, key in self.calls if call != "get"}


class FakeVersionUnitOfWork:
    """Unit of work over a shared in-memory repository.

    Writes become durable on ``commit``; ``rollback`` and leaving the block
    restore the records as of the last commit, like a closed session.
    """

    def __init__(self, repository: FakeVersionRepository, *, fail_rollback: bool = False) -> None:
        self._repository = repository
        self._repositories = VersionRepositories(versions=repository)
        self._committed = dict(repository.records)
        self.fail_rollback = fail_rollback
        self.commits = 0
        self.rollbacks = 0
        self.entered = False

    @property
    def repositories(self) -> VersionRepositories:
        return self._repositories

    def __enter__(self) -> FakeVersionUnitOfWork:
        self.entered = True
        self._committed = dict(self._repository.records)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        try:
            if exc_type is not None:
                self.rollback()
        finally:
            self._restore()
        return False

    def commit(self) -> None:
        self.commits += 1
        self._committed = dict(self._repository.records)

    def rollback(self) -> None:
        self.rollbacks += 1
        if self.fail_rollback:
            raise StoreError("simulated rollback failure")
        self._restore()

    def _restore(self) -> None:
        self._repository.records.clear()
        self._repository.records.update(self._committed)


@dataclass
class FakeManifestFetcher(ManifestFetcher):
    """Returns queued manifests in order, repeating the last one."""

    manifests: list[Manifest] = field(default_factory=list[Manifest])
    error: Exception | None = None
    calls: int = 0

    def __call__(self) -> Manifest:
        self.calls += 1
        if self.error is not None:
            raise self.error
        if len(self.manifests) > 1:
            return self.manifests.pop(0)
        return self.manifests[0]


@dataclass
class RecordingSink(LocationSink):
    deltas: list[LocationDelta] = field(default_factory=list["LocationDelta"])
    fail: bool = False

    def apply_delta(self, delta: LocationDelta) -> None:
        if self.fail:
            raise SinkError("simulated sink failure", repo_keys=delta.repo_keys)
        self.deltas.append(delta)
