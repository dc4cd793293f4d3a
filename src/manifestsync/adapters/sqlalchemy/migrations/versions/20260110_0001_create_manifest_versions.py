"""Create manifest_versions table.

Tracks the last seen version for each repository in the manifest to detect
when its catalog file should be re-registered.

Revision ID: 20260110_0001
Revises:
Create Date: 2026-01-10 00:00:00

"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

from manifestsync.adapters.sqlalchemy.mappings import UTCDateTime

revision: str = "20260110_0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "manifest_versions",
        sa.Column(
            "repo_key",
            sa.Text(),
            nullable=False,
            comment="Stable identifier: workspace/repoSlug",
        ),
        sa.Column(
            "manifest_version",
            sa.Text(),
            nullable=False,
            comment="Version declared in the manifest",
        ),
        sa.Column(
            "last_seen_at",
            UTCDateTime(),
            nullable=False,
            server_default=sa.func.now(),
            comment="When this version was last seen in the manifest",
        ),
        sa.Column(
            "last_registered_at",
            UTCDateTime(),
            nullable=True,
            comment="When this location was last published to the catalog",
        ),
        sa.PrimaryKeyConstraint("repo_key", name=op.f("pk_manifest_versions")),
    )
    op.create_index(
        "ix_manifest_versions_last_seen_at",
        "manifest_versions",
        ["last_seen_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_manifest_versions_last_seen_at", table_name="manifest_versions")
    op.drop_table("manifest_versions")
