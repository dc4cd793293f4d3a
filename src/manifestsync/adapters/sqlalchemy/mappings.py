"""SQLAlchemy table metadata for the version store."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import (
    Column,
    DateTime,
    Dialect,
    Index,
    MetaData,
    Table,
    Text,
    TypeDecorator,
    func,
)


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_label)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

manifest_version_table = Table(
    "manifest_versions",
    metadata,
    Column("repo_key", Text, primary_key=True, comment="Stable identifier: workspace/repoSlug"),
    Column("manifest_version", Text, nullable=False, comment="Version declared in the manifest"),
    Column(
        "last_seen_at",
        UTCDateTime,
        nullable=False,
        server_default=func.now(),
        comment="When this version was last seen in the manifest",
    ),
    Column(
        "last_registered_at",
        UTCDateTime,
        nullable=True,
        comment="When this location was last published to the catalog",
    ),
    Index("ix_manifest_versions_last_seen_at", "last_seen_at"),
)
