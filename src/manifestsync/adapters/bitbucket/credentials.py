"""Credential lookup for manifest hosts."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx

from manifestsync.domain.ports.fetching import Credentials, CredentialsResolver

if TYPE_CHECKING:
    from collections.abc import Mapping

    from manifestsync.config import DiscoveryConfig


class HostCredentialsResolver:
    """Resolve credentials by the host name of the requested URL."""

    def __init__(self, credentials_by_host: Mapping[str, Credentials] | None = None) -> None:
        self._by_host = {host.lower(): creds for host, creds in (credentials_by_host or {}).items()}

    @classmethod
    def from_config(cls, config: DiscoveryConfig) -> HostCredentialsResolver:
        if config.credentials is None:
            return cls()
        host = httpx.URL(config.manifest_url).host
        return cls(
            {
                host: Credentials(
                    username=config.credentials.username,
                    secret=config.credentials.secret,
                )
            }
        )

    def resolve_credentials(self, url: str) -> Credentials | None:
        host = httpx.URL(url).host.lower()
        return self._by_host.get(host)


if TYPE_CHECKING:
    _resolver_check: CredentialsResolver = HostCredentialsResolver()
