"""SQLAlchemy-backed unit of work for the version store."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from manifestsync.adapters.sqlalchemy.migrations import upgrade_head
from manifestsync.adapters.sqlalchemy.repositories import SqlAlchemyVersionRepository
from manifestsync.config import get_database_config
from manifestsync.domain.errors import StoreError
from manifestsync.domain.ports.unit_of_work import VersionRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the version store is used before ``startup()`` or reconfigured twice."""


@dataclass(slots=True)
class _AdapterState:
    engine: Engine | None = None
    session_factory: sessionmaker[Session] | None = None


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Bind the adapter to an engine and migrate the schema to head.

    Migrations skip applied revisions, so this runs on every process start.
    """

    if _STATE.engine is not None and not force:
        raise StartupError("Version store already started; pass force=True to rebind it")

    resolved_engine = engine or create_engine(
        database_uri or get_database_config().uri,
        future=True,
    )
    log.info("Migrating version store on %s", resolved_engine.url.render_as_string())
    upgrade_head(engine=resolved_engine)

    _STATE.engine = resolved_engine
    _STATE.session_factory = sessionmaker(bind=resolved_engine, expire_on_commit=False)


def configured_engine() -> Engine | None:
    return _STATE.engine


def is_started() -> bool:
    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the engine and forget it."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None
    _STATE.session_factory = None


class SqlAlchemyVersionUnitOfWork:
    """One session per ``with`` block; commits are explicit, exceptions roll back."""

    def __init__(self) -> None:
        if _STATE.session_factory is None:
            raise StartupError(
                "Version store not started. Call "
                "manifestsync.adapters.sqlalchemy.unit_of_work.startup() first."
            )
        self._session_factory = _STATE.session_factory
        self._session: Session | None = None
        self._repositories: VersionRepositories | None = None

    def __enter__(self) -> SqlAlchemyVersionUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work already entered")
        self._session = self._session_factory()
        self._repositories = VersionRepositories(
            versions=SqlAlchemyVersionRepository(self._session)
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        try:
            if exc_type is not None:
                self.rollback()
        finally:
            self.session.close()
            self._session = None
            self._repositories = None
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work used outside its with block")
        return self._session

    @property
    def repositories(self) -> VersionRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work used outside its with block")
        return self._repositories

    def commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to commit version store transaction: {exc}") from exc

    def rollback(self) -> None:
        try:
            self.session.rollback()
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to roll back version store transaction: {exc}") from exc


if TYPE_CHECKING:
    from manifestsync.domain.ports.unit_of_work import VersionUnitOfWork

    _uow_check: VersionUnitOfWork = SqlAlchemyVersionUnitOfWork()
