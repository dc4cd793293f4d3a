"""Diff a manifest against stored versions and decide what to re-publish."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from manifestsync.domain.errors import PassTimeoutError, StoreError
from manifestsync.domain.locations import pointer_for
from manifestsync.domain.model import Classification, classify

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from manifestsync.domain.locations import LocationSettings
    from manifestsync.domain.model import LocationPointer, RepositoryDescriptor
    from manifestsync.domain.ports.unit_of_work import VersionUnitOfWork

log = getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class DescriptorFailure:
    repo_key: str
    version: str
    error: StoreError


@dataclass(slots=True)
class ReconciliationReport:
    """Per-descriptor outcomes of one reconciliation."""

    locations: list[LocationPointer] = field(default_factory=list["LocationPointer"])
    unchanged: list[str] = field(default_factory=list[str])
    failures: list[DescriptorFailure] = field(default_factory=list[DescriptorFailure])

    @property
    def failed_keys(self) -> tuple[str, ...]:
        return tuple(failure.repo_key for failure in self.failures)

    @property
    def processed(self) -> int:
        return len(self.locations) + len(self.unchanged) + len(self.failures)


class Reconciler:
    """Classify descriptors against the version store and record new versions.

    Descriptors are handled sequentially in manifest order. Each new or changed
    descriptor is committed on its own, so a store failure only drops that
    descriptor from the delta and progress made before an abandoned pass is kept.
    """

    def __init__(
        self,
        *,
        unit_of_work_factory: Callable[[], VersionUnitOfWork],
        settings: LocationSettings,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._unit_of_work_factory = unit_of_work_factory
        self._settings = settings
        self._clock = clock

    def reconcile(self, descriptors: Iterable[RepositoryDescriptor]) -> list[LocationPointer]:
        """Return the location pointers that must be published for ``descriptors``."""

        return list(self.run(descriptors).locations)

    def run(
        self,
        descriptors: Iterable[RepositoryDescriptor],
        *,
        deadline: datetime | None = None,
    ) -> ReconciliationReport:
        report = ReconciliationReport()
        with self._unit_of_work_factory() as uow:
            for descriptor in descriptors:
                if deadline is not None and self._clock() >= deadline:
                    raise PassTimeoutError(
                        f"Reconciliation deadline passed after {report.processed} repositories",
                        report=report,
                    )
                self._process(uow, descriptor, report)

        if report.failures:
            log.warning(
                "Reconciliation finished with %s failed repositories: %s",
                len(report.failures),
                ", ".join(report.failed_keys),
            )
        return report

    def _process(
        self,
        uow: VersionUnitOfWork,
        descriptor: RepositoryDescriptor,
        report: ReconciliationReport,
    ) -> None:
        repo_key = descriptor.repo_key
        versions = uow.repositories.versions
        log.debug("Processing %s version %s", repo_key, descriptor.version)

        try:
            prior = versions.get(repo_key)
            classification = classify(prior, descriptor.version)
            if classification is Classification.UNCHANGED:
                log.debug(
                    "%s version unchanged (%s), skipping registration",
                    repo_key,
                    descriptor.version,
                )
                report.unchanged.append(repo_key)
                return

            log.info(
                "%s version changed: %s -> %s",
                repo_key,
                prior.manifest_version if prior is not None else "new",
                descriptor.version,
            )
            versions.upsert_seen(repo_key, descriptor.version)
            versions.mark_registered(repo_key)
            uow.commit()
        except StoreError as exc:
            log.error(  # noqa: TRY400
                "Failed to record %s at version %s: %s", repo_key, descriptor.version, exc
            )
            report.failures.append(
                DescriptorFailure(repo_key=repo_key, version=descriptor.version, error=exc)
            )
            self._rollback(uow, repo_key)
            return

        report.locations.append(pointer_for(descriptor, self._settings))

    @staticmethod
    def _rollback(uow: VersionUnitOfWork, repo_key: str) -> None:
        # the failure is already recorded; later descriptors still get their turn
        try:
            uow.rollback()
        except StoreError:
            log.exception("Rollback after failed %s did not complete", repo_key)
