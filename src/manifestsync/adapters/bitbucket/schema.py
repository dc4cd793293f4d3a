"""Pydantic models describing the manifest document.

The document is loaded with every scalar kept as text, so a value such as
``version: 010`` reaches these models exactly as written.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    # an empty YAML value loads as "" when scalars are not resolved
    return None if value == "" else value


class ManifestBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


class RepositoryEntry(ManifestBaseModel):
    id: str
    workspace: str = Field(min_length=1)
    repo_slug: str = Field(alias="repoSlug", min_length=1)
    version: str


class ManifestMetadata(ManifestBaseModel):
    name: str | None = None

    _normalize_blank = field_validator("name", mode="before")(_blank_to_none)


class ManifestSpec(ManifestBaseModel):
    repositories: list[RepositoryEntry]


class ManifestDocument(ManifestBaseModel):
    api_version: str | None = Field(default=None, alias="apiVersion")
    kind: str | None = None
    metadata: ManifestMetadata | None = None
    spec: ManifestSpec

    _normalize_blank = field_validator("api_version", "kind", "metadata", mode="before")(
        _blank_to_none
    )
