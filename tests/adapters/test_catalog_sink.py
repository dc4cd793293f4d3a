from __future__ import annotations

import json
import logging
from collections.abc import Callable  # noqa: TC003

import httpx
import pytest

from manifestsync.adapters.catalog import HttpCatalogSink, LoggingCatalogSink
from manifestsync.adapters.http_resilience import ResilienceConfig, ResilientClient
from manifestsync.domain.errors import SinkError
from manifestsync.domain.locations import LocationSettings, pointer_for
from manifestsync.domain.model import LocationDelta
from tests.helpers.fakes import MANIFEST_URL, make_descriptor

SINK_URL = "https://catalog.example.com/api/locations"


def _make_client_factory(
    handler: Callable[[httpx.Request], httpx.Response],
) -> Callable[[ResilienceConfig], ResilientClient]:
    async def async_handler(request: httpx.Request) -> httpx.Response:
        return handler(request)

    def factory(resilience: ResilienceConfig) -> ResilientClient:
        client = ResilientClient(resilience)
        client._client = httpx.AsyncClient(transport=httpx.MockTransport(async_handler))  # noqa: SLF001  # type: ignore[reportPrivateUsage]
        return client

    return factory


@pytest.fixture
def delta() -> LocationDelta:
    settings = LocationSettings(manifest_url=MANIFEST_URL)
    return LocationDelta(
        location_key="bitbucket-manifest-discover",
        added=(pointer_for(make_descriptor("billing", "1.4.0"), settings),),
    )


def test_http_sink_posts_delta_payload(delta: LocationDelta) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(202)

    sink = HttpCatalogSink(endpoint=SINK_URL, client_factory=_make_client_factory(handler))

    sink.apply_delta(delta)

    assert len(seen) == 1
    assert seen[0].method == "POST"
    body = json.loads(seen[0].content)
    assert body["type"] == "delta"
    assert body["locationKey"] == "bitbucket-manifest-discover"
    assert body["removed"] == []
    entity = body["added"][0]
    assert entity["kind"] == "Location"
    assert entity["spec"]["target"] == (
        "https://bitbucket.org/acme/billing/raw/main/catalog-info.yaml"
    )


def test_http_sink_raises_on_rejected_delta(delta: LocationDelta) -> None:
    sink = HttpCatalogSink(
        endpoint=SINK_URL,
        client_factory=_make_client_factory(lambda _request: httpx.Response(400)),
    )

    with pytest.raises(SinkError) as excinfo:
        sink.apply_delta(delta)

    assert excinfo.value.repo_keys == ("acme/billing",)


def test_http_sink_wraps_transport_errors(delta: LocationDelta) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    sink = HttpCatalogSink(endpoint=SINK_URL, client_factory=_make_client_factory(handler))

    with pytest.raises(SinkError, match="unreachable"):
        sink.apply_delta(delta)


def test_logging_sink_logs_each_location(
    delta: LocationDelta, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.INFO, logger="manifestsync.adapters.catalog"):
        LoggingCatalogSink().apply_delta(delta)

    assert "bitbucket-manifest-acme-billing" in caplog.text
    assert "1.4.0" in caplog.text
