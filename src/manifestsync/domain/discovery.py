"""A single discovery pass: fetch the manifest, reconcile it, publish the delta."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from manifestsync.domain.errors import PassTimeoutError, SinkError
from manifestsync.domain.locations import PROVIDER_NAME
from manifestsync.domain.model import LocationDelta

if TYPE_CHECKING:
    from datetime import datetime

    from manifestsync.domain.model import LocationPointer
    from manifestsync.domain.ports.fetching import ManifestFetcher
    from manifestsync.domain.ports.publishing import LocationSink
    from manifestsync.domain.reconciliation import Reconciler

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DiscoveryResult:
    """Outcome of one discovery pass."""

    fetched: int
    registered: tuple[str, ...]
    unchanged: int
    failed: tuple[str, ...]
    published: bool


def run_discovery_pass(
    *,
    fetcher: ManifestFetcher,
    reconciler: Reconciler,
    sink: LocationSink,
    location_key: str = PROVIDER_NAME,
    deadline: datetime | None = None,
) -> DiscoveryResult:
    """Run one reconciliation pass and hand the resulting delta to ``sink``.

    Fetch errors propagate before the version store is touched. Versions are
    marked registered before the sink is called, so a ``SinkError`` leaves the
    store ahead of the sink until those repositories change version again.
    """

    log.info("Starting manifest discovery")
    manifest = fetcher()
    log.info("Found %s repositories in manifest", len(manifest.repositories))

    try:
        report = reconciler.run(manifest.repositories, deadline=deadline)
    except PassTimeoutError as exc:
        # what is already registered is published before the pass is abandoned
        if exc.report.locations:
            _publish(sink, exc.report.locations, location_key)
        raise

    published = False
    if report.locations:
        _publish(sink, report.locations, location_key)
        published = True
        log.info(
            "Discovery completed: %s locations registered/updated",
            len(report.locations),
        )
    else:
        log.info("Discovery completed: no version changes detected")

    return DiscoveryResult(
        fetched=len(manifest.repositories),
        registered=tuple(
            location.repo_key or location.name for location in report.locations
        ),
        unchanged=len(report.unchanged),
        failed=report.failed_keys,
        published=published,
    )


def _publish(sink: LocationSink, locations: list[LocationPointer], location_key: str) -> None:
    delta = LocationDelta(location_key=location_key, added=tuple(locations))
    try:
        sink.apply_delta(delta)
    except SinkError:
        log.error(  # noqa: TRY400
            "Publishing failed; these repositories are recorded as registered but were "
            "not delivered: %s",
            ", ".join(delta.repo_keys),
        )
        raise
