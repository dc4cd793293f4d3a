"""Translate raw manifest text into domain objects."""

from __future__ import annotations

from collections.abc import Mapping
from typing import cast

import yaml
from pydantic import ValidationError

from manifestsync.domain.errors import FetchError, ManifestShapeError
from manifestsync.domain.model import Manifest, RepositoryDescriptor

from .schema import ManifestDocument, RepositoryEntry


def parse_manifest(content: str) -> Manifest:
    """Parse YAML manifest text.

    Raises ``FetchError`` when the text is not YAML and ``ManifestShapeError``
    when it lacks ``spec.repositories`` or an entry is malformed.
    """

    try:
        # BaseLoader resolves no implicit types: 010, 1.10 and true stay text
        raw = yaml.load(content, Loader=yaml.BaseLoader)  # noqa: S506
    except yaml.YAMLError as exc:
        raise FetchError(f"Malformed manifest content: {exc}") from exc

    return parse_manifest_document(raw)


def parse_manifest_document(raw: object) -> Manifest:
    if not isinstance(raw, Mapping):
        raise ManifestShapeError("Invalid manifest: expected a mapping at the top level")
    document_map = cast(Mapping[str, object], raw)
    spec = document_map.get("spec")
    if not isinstance(spec, Mapping) or "repositories" not in spec:
        raise ManifestShapeError("Invalid manifest: missing spec.repositories")

    try:
        document = ManifestDocument.model_validate(document_map)
    except ValidationError as exc:
        raise ManifestShapeError(f"Invalid manifest: {exc}") from exc

    return Manifest(
        repositories=tuple(to_descriptor(entry) for entry in document.spec.repositories),
        name=document.metadata.name if document.metadata else None,
        api_version=document.api_version,
        kind=document.kind,
    )


def to_descriptor(entry: RepositoryEntry) -> RepositoryDescriptor:
    return RepositoryDescriptor(
        id=entry.id,
        workspace=entry.workspace,
        repo_slug=entry.repo_slug,
        version=entry.version,
    )
