"""Ports for fetching the remote manifest."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from manifestsync.domain.model import Manifest


@dataclass(frozen=True, slots=True)
class Credentials:
    username: str
    secret: str


@runtime_checkable
class CredentialsResolver(Protocol):
    """Look up credentials for a URL, or ``None`` to request it anonymously."""

    def resolve_credentials(self, url: str) -> Credentials | None: ...


@runtime_checkable
class ManifestFetcher(Protocol):
    """Callable port returning the parsed manifest.

    Implementations raise ``FetchError`` or ``ManifestShapeError``.
    """

    def __call__(self) -> Manifest: ...


__all__ = ["Credentials", "CredentialsResolver", "ManifestFetcher"]
