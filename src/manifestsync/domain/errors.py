"""Error taxonomy for discovery passes."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from manifestsync.domain.reconciliation import ReconciliationReport


class DiscoveryError(RuntimeError):
    """Base class for failures raised by a discovery pass."""


class FetchError(DiscoveryError):
    """The manifest could not be retrieved or parsed. Fatal for the pass."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ManifestShapeError(FetchError):
    """The manifest parsed but lacks the required structure."""


class StoreError(DiscoveryError):
    """A version store operation failed."""


class MissingVersionRecordError(StoreError):
    """``mark_registered`` was called for a key that was never upserted."""

    def __init__(self, repo_key: str) -> None:
        super().__init__(f"No version record for {repo_key}; upsert_seen must come first")
        self.repo_key = repo_key


class SinkError(DiscoveryError):
    """Publishing the delta failed after the version store already committed it."""

    def __init__(self, message: str, *, repo_keys: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.repo_keys = tuple(repo_keys)


class PassTimeoutError(DiscoveryError):
    """The pass deadline passed before every descriptor was processed."""

    def __init__(self, message: str, *, report: ReconciliationReport) -> None:
        super().__init__(message)
        self.report = report
