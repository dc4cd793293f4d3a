"""Version repository backed by a SQLAlchemy session."""

from __future__ import annotations

from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import select, update
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError

from manifestsync.adapters.sqlalchemy.mappings import manifest_version_table
from manifestsync.domain.errors import MissingVersionRecordError, StoreError
from manifestsync.domain.model import VersionRecord

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from sqlalchemy import Row
    from sqlalchemy.orm import Session
    from sqlalchemy.sql.dml import Insert

log = getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _row_to_record(row: Row[Any]) -> VersionRecord:
    return VersionRecord(
        repo_key=row.repo_key,
        manifest_version=row.manifest_version,
        last_seen_at=row.last_seen_at,
        last_registered_at=row.last_registered_at,
    )


class SqlAlchemyVersionRepository:
    """Persist last-seen manifest versions.

    ``upsert_seen`` is a single ``INSERT ... ON CONFLICT`` statement, so two
    writers racing on the same key cannot leave a half-written row.
    """

    def __init__(self, session: Session, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self.session = session
        self._clock = clock

    def get(self, repo_key: str) -> VersionRecord | None:
        stmt = select(manifest_version_table).where(manifest_version_table.c.repo_key == repo_key)
        try:
            row = self.session.execute(stmt).one_or_none()
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to read version for {repo_key}: {exc}") from exc
        return _row_to_record(row) if row is not None else None

    def upsert_seen(self, repo_key: str, version: str) -> None:
        now = self._clock()
        stmt = self._upsert_statement(
            values={
                "repo_key": repo_key,
                "manifest_version": version,
                "last_seen_at": now,
                "last_registered_at": None,
            },
            updates={"manifest_version": version, "last_seen_at": now},
        )
        try:
            self.session.execute(stmt)
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to record version for {repo_key}: {exc}") from exc
        log.debug("Updated version for %s to %s", repo_key, version)

    def mark_registered(self, repo_key: str) -> None:
        stmt = (
            update(manifest_version_table)
            .where(manifest_version_table.c.repo_key == repo_key)
            .values(last_registered_at=self._clock())
        )
        try:
            result = self.session.execute(stmt)
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to mark {repo_key} as registered: {exc}") from exc
        if cast("int", getattr(result, "rowcount", 0)) == 0:
            raise MissingVersionRecordError(repo_key)
        log.debug("Marked %s as registered", repo_key)

    def list_all(self) -> Sequence[VersionRecord]:
        stmt = select(manifest_version_table).order_by(manifest_version_table.c.repo_key)
        try:
            rows = self.session.execute(stmt).all()
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to list versions: {exc}") from exc
        return [_row_to_record(row) for row in rows]

    def _upsert_statement(
        self,
        *,
        values: dict[str, object],
        updates: dict[str, object],
    ) -> Insert:
        dialect = self.session.get_bind().dialect.name
        if dialect == "sqlite":
            stmt = sqlite.insert(manifest_version_table).values(**values)
            return stmt.on_conflict_do_update(index_elements=["repo_key"], set_=updates)
        if dialect == "postgresql":
            stmt = postgresql.insert(manifest_version_table).values(**values)
            return stmt.on_conflict_do_update(index_elements=["repo_key"], set_=updates)
        if dialect in {"mysql", "mariadb"}:
            stmt = mysql.insert(manifest_version_table).values(**values)
            return stmt.on_duplicate_key_update(**updates)
        raise StoreError(f"Dialect {dialect!r} has no atomic upsert support")


if TYPE_CHECKING:
    from manifestsync.domain.ports.persistence import VersionRepository

    _session_stub = cast("Session", object())
    _repo_check: VersionRepository = SqlAlchemyVersionRepository(_session_stub)
