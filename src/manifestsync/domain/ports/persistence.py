"""Ports for persisting version state."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from manifestsync.domain.model import VersionRecord


@runtime_checkable
class VersionRepository(Protocol):
    """Persistence contract for last-seen manifest versions.

    Every method raises ``StoreError`` on storage failures and never retries.
    """

    def get(self, repo_key: str) -> VersionRecord | None: ...

    def upsert_seen(self, repo_key: str, version: str) -> None: ...

    def mark_registered(self, repo_key: str) -> None: ...

    def list_all(self) -> Sequence[VersionRecord]: ...
