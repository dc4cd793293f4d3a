"""HTTP fetcher for manifests hosted on Bitbucket."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from manifestsync.adapters.http_resilience import (
    RateLimit,
    RequestOptions,
    ResilienceConfig,
    ResilientClient,
    default_client_factory,
)
from manifestsync.domain.errors import FetchError
from manifestsync.domain.ports.fetching import ManifestFetcher

from .translator import parse_manifest

if TYPE_CHECKING:
    from collections.abc import Callable

    from manifestsync.domain.model import Manifest
    from manifestsync.domain.ports.fetching import CredentialsResolver

log = getLogger(__name__)

_DEFAULT_TIMEOUT_SECONDS = 30.0
_ACCEPT_YAML = "application/yaml"


def _default_resilience_config() -> ResilienceConfig:
    return ResilienceConfig(
        name="manifest",
        timeout_seconds=_DEFAULT_TIMEOUT_SECONDS,
        ratelimit=RateLimit(max_calls=2, per_seconds=1.0),
    )


@dataclass(slots=True)
class BitbucketManifestFetcher:
    manifest_url: str
    credentials: CredentialsResolver | None = None
    resilience: ResilienceConfig = field(default_factory=_default_resilience_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=default_client_factory
    )

    def __call__(self) -> Manifest:
        return asyncio.run(self.fetch_async())

    async def fetch_async(self) -> Manifest:
        log.debug("Fetching manifest from %s", self.manifest_url)

        options: RequestOptions = {"headers": {"Accept": _ACCEPT_YAML}}
        auth = self._resolve_auth()
        if auth is not None:
            options["auth"] = auth

        async with self.client_factory(self.resilience) as client:
            try:
                response = await client.get(self.manifest_url, **options)
            except httpx.HTTPError as exc:
                raise FetchError(f"Failed to fetch manifest: {exc}") from exc

        if response.is_error:
            raise FetchError(
                f"Failed to fetch manifest: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        return parse_manifest(response.text)

    def _resolve_auth(self) -> httpx.BasicAuth | None:
        if self.credentials is None:
            return None
        credentials = self.credentials.resolve_credentials(self.manifest_url)
        if credentials is None:
            log.debug("No credentials configured for %s, requesting anonymously", self.manifest_url)
            return None
        return httpx.BasicAuth(credentials.username, credentials.secret)


if TYPE_CHECKING:
    _fetcher_check: ManifestFetcher = BitbucketManifestFetcher(
        manifest_url="https://example.invalid"
    )
