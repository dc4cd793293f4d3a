from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker

from manifestsync.adapters.sqlalchemy.migrations import upgrade_head
from manifestsync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyVersionUnitOfWork,
    shutdown,
    startup,
)
from manifestsync.domain.locations import LocationSettings
from tests.helpers.fakes import (
    MANIFEST_URL,
    FakeVersionRepository,
    FakeVersionUnitOfWork,
    TickingClock,
)

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    upgrade_head(engine=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine, future=True)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyVersionUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyVersionUnitOfWork:
        return SqlAlchemyVersionUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def version_repository(clock: TickingClock) -> FakeVersionRepository:
    return FakeVersionRepository(clock=clock)


@pytest.fixture
def fake_unit_of_work(
    version_repository: FakeVersionRepository,
) -> Callable[[], FakeVersionUnitOfWork]:
    def factory() -> FakeVersionUnitOfWork:
        return FakeVersionUnitOfWork(version_repository)

    return factory


@pytest.fixture
def location_settings() -> LocationSettings:
    return LocationSettings(manifest_url=MANIFEST_URL)
