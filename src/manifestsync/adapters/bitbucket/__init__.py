"""Public interface for the Bitbucket manifest adapter."""

from __future__ import annotations

from .client import BitbucketManifestFetcher
from .credentials import HostCredentialsResolver
from .schema import ManifestDocument, RepositoryEntry
from .translator import parse_manifest, parse_manifest_document

__all__ = [
    "BitbucketManifestFetcher",
    "HostCredentialsResolver",
    "ManifestDocument",
    "RepositoryEntry",
    "parse_manifest",
    "parse_manifest_document",
]
