"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from manifestsync.adapters.bitbucket import BitbucketManifestFetcher, HostCredentialsResolver
from manifestsync.adapters.catalog import HttpCatalogSink, LoggingCatalogSink
from manifestsync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyVersionUnitOfWork,
    is_started,
    startup,
)
from manifestsync.config import get_discovery_config
from manifestsync.domain.discovery import DiscoveryResult, run_discovery_pass
from manifestsync.domain.locations import LocationSettings
from manifestsync.domain.ports.unit_of_work import VersionUnitOfWork
from manifestsync.domain.reconciliation import Reconciler
from manifestsync.scheduling import DiscoveryScheduler

if TYPE_CHECKING:
    import threading
    from collections.abc import Sequence
    from datetime import datetime

    from manifestsync.config import DiscoveryConfig
    from manifestsync.domain.model import VersionRecord
    from manifestsync.domain.ports.fetching import ManifestFetcher
    from manifestsync.domain.ports.publishing import LocationSink

UnitOfWorkFactory = Callable[[], VersionUnitOfWork]


log = getLogger(__name__)


def ensure_store_started() -> None:
    """Start the SQLAlchemy adapter once per process."""

    if not is_started():
        startup()


def build_fetcher(config: DiscoveryConfig) -> ManifestFetcher:
    return BitbucketManifestFetcher(
        manifest_url=config.manifest_url,
        credentials=HostCredentialsResolver.from_config(config),
        resilience=config.manifest_resilience,
    )


def build_sink(config: DiscoveryConfig) -> LocationSink:
    if config.sink_url is None:
        log.info("No CATALOG_SINK_URL configured; locations will only be logged")
        return LoggingCatalogSink()
    return HttpCatalogSink(endpoint=config.sink_url, resilience=config.sink_resilience)


def build_reconciler(
    config: DiscoveryConfig,
    *,
    unit_of_work_factory: UnitOfWorkFactory,
) -> Reconciler:
    return Reconciler(
        unit_of_work_factory=unit_of_work_factory,
        settings=LocationSettings(
            manifest_url=config.manifest_url,
            default_branch=config.default_branch,
            catalog_info_path=config.default_catalog_info_path,
        ),
    )


def _resolve_unit_of_work_factory(factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if factory is not None:
        return factory
    ensure_store_started()
    return SqlAlchemyVersionUnitOfWork


def discover_manifest_locations(
    *,
    config: DiscoveryConfig | None = None,
    fetcher: ManifestFetcher | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    sink: LocationSink | None = None,
    deadline: datetime | None = None,
) -> DiscoveryResult:
    """Run one discovery pass using the configured adapters."""

    effective_config = config or get_discovery_config()
    effective_uow = _resolve_unit_of_work_factory(unit_of_work_factory)
    log.info(
        "Starting discovery: manifest=%s, branch=%s, catalog_path=%s",
        effective_config.manifest_url,
        effective_config.default_branch,
        effective_config.default_catalog_info_path,
    )

    result = run_discovery_pass(
        fetcher=fetcher or build_fetcher(effective_config),
        reconciler=build_reconciler(effective_config, unit_of_work_factory=effective_uow),
        sink=sink or build_sink(effective_config),
        deadline=deadline,
    )

    log.info(
        f"Finished discovery: fetched={result.fetched}, registered={len(result.registered)}, "
        f"unchanged={result.unchanged}, failed={len(result.failed)}"
    )
    return result


def schedule_discovery(
    *,
    stop_event: threading.Event,
    config: DiscoveryConfig | None = None,
    fetcher: ManifestFetcher | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    sink: LocationSink | None = None,
    once: bool = False,
) -> DiscoveryScheduler:
    """Run discovery passes on the configured schedule until ``stop_event`` is set.

    With ``once`` a single pass runs under the scheduler's timeout and overlap guard.
    """

    effective_config = config or get_discovery_config()
    effective_uow = _resolve_unit_of_work_factory(unit_of_work_factory)
    effective_fetcher = fetcher or build_fetcher(effective_config)
    effective_sink = sink or build_sink(effective_config)

    def task(deadline: datetime) -> DiscoveryResult:
        return discover_manifest_locations(
            config=effective_config,
            fetcher=effective_fetcher,
            unit_of_work_factory=effective_uow,
            sink=effective_sink,
            deadline=deadline,
        )

    scheduler = DiscoveryScheduler(
        task,
        frequency=effective_config.schedule.frequency,
        timeout=effective_config.schedule.timeout,
    )
    if once:
        scheduler.run_once()
    else:
        scheduler.run_forever(stop_event)
    return scheduler


def list_version_records(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Sequence[VersionRecord]:
    """Return every stored version record, ordered by repository key."""

    effective_uow = _resolve_unit_of_work_factory(unit_of_work_factory)
    with effective_uow() as uow:
        return uow.repositories.versions.list_all()
