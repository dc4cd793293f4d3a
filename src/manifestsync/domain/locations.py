"""Construction of catalog location pointers from manifest descriptors."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from manifestsync.domain.model import (
    MANAGED_BY_LOCATION_ANNOTATION,
    MANIFEST_VERSION_ANNOTATION,
    REPO_KEY_ANNOTATION,
    LocationPointer,
)

if TYPE_CHECKING:
    from manifestsync.domain.model import RepositoryDescriptor

PROVIDER_NAME: Final[str] = "bitbucket-manifest-discover"
RAW_URL_TEMPLATE: Final[str] = "https://bitbucket.org/{workspace}/{repo_slug}/raw/{branch}/{path}"
LOCATION_NAME_TEMPLATE: Final[str] = "bitbucket-manifest-{workspace}-{repo_slug}"


@dataclass(frozen=True, slots=True)
class LocationSettings:
    manifest_url: str
    default_branch: str = "main"
    catalog_info_path: str = "catalog-info.yaml"


def build_location_pointer(
    descriptor: RepositoryDescriptor,
    *,
    default_branch: str,
    catalog_info_path: str,
    manifest_url: str,
) -> LocationPointer:
    """Return the location pointer for a descriptor. Pure; performs no I/O."""

    target = RAW_URL_TEMPLATE.format(
        workspace=descriptor.workspace,
        repo_slug=descriptor.repo_slug,
        branch=default_branch,
        path=catalog_info_path.lstrip("/"),
    )
    return LocationPointer(
        name=LOCATION_NAME_TEMPLATE.format(
            workspace=descriptor.workspace,
            repo_slug=descriptor.repo_slug,
        ),
        target=target,
        annotations={
            MANAGED_BY_LOCATION_ANNOTATION: f"url:{manifest_url}",
            REPO_KEY_ANNOTATION: descriptor.repo_key,
            MANIFEST_VERSION_ANNOTATION: descriptor.version,
        },
    )


def pointer_for(descriptor: RepositoryDescriptor, settings: LocationSettings) -> LocationPointer:
    return build_location_pointer(
        descriptor,
        default_branch=settings.default_branch,
        catalog_info_path=settings.catalog_info_path,
        manifest_url=settings.manifest_url,
    )
