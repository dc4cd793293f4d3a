"""Publication sinks receiving location deltas."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from manifestsync.adapters.http_resilience import (
    ResilienceConfig,
    ResilientClient,
    default_client_factory,
)
from manifestsync.domain.errors import SinkError
from manifestsync.domain.ports.publishing import LocationSink

if TYPE_CHECKING:
    from collections.abc import Callable

    from manifestsync.domain.model import LocationDelta

log = getLogger(__name__)


def _default_resilience_config() -> ResilienceConfig:
    return ResilienceConfig(name="catalog-sink")


@dataclass(slots=True)
class HttpCatalogSink:
    """POST each delta as JSON to a catalog ingestion endpoint."""

    endpoint: str
    resilience: ResilienceConfig = field(default_factory=_default_resilience_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=default_client_factory
    )

    def apply_delta(self, delta: LocationDelta) -> None:
        asyncio.run(self._apply_delta_async(delta))

    async def _apply_delta_async(self, delta: LocationDelta) -> None:
        async with self.client_factory(self.resilience) as client:
            try:
                response = await client.post(self.endpoint, json=delta.to_payload())
            except httpx.HTTPError as exc:
                raise SinkError(
                    f"Failed to publish {len(delta.added)} locations: {exc}",
                    repo_keys=delta.repo_keys,
                ) from exc

        if response.is_error:
            raise SinkError(
                f"Catalog rejected delta: {response.status_code} {response.reason_phrase}",
                repo_keys=delta.repo_keys,
            )
        log.debug("Published %s locations to %s", len(delta.added), self.endpoint)


class LoggingCatalogSink:
    """Dry-run sink that only logs what would be published."""

    def apply_delta(self, delta: LocationDelta) -> None:
        for location in delta.added:
            log.info(
                "Would register %s -> %s (version %s)",
                location.name,
                location.target,
                location.manifest_version,
            )


if TYPE_CHECKING:
    _http_sink_check: LocationSink = HttpCatalogSink(endpoint="https://example.invalid")
    _logging_sink_check: LocationSink = LoggingCatalogSink()
