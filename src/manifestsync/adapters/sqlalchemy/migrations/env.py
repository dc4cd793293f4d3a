"""Alembic environment for the version store schema."""

from __future__ import annotations

from typing import Any

from alembic import context
from sqlalchemy import create_engine, pool

from manifestsync.adapters.sqlalchemy.mappings import metadata
from manifestsync.config import get_database_config

config = context.config


def _configure(**kwargs: Any) -> None:
    context.configure(
        target_metadata=metadata,
        render_as_batch=True,
        compare_type=True,
        version_table=config.get_main_option("version_table") or "alembic_version",
        **kwargs,
    )
    with context.begin_transaction():
        context.run_migrations()


def _database_url() -> str:
    return config.get_main_option("sqlalchemy.url") or get_database_config().uri


def run_migrations_offline() -> None:
    _configure(url=_database_url(), literal_binds=True)


def run_migrations_online() -> None:
    # upgrade_head(engine=...) hands over a connection inside an open transaction
    connection = config.attributes.get("connection")
    if connection is not None:
        _configure(connection=connection)
        return

    engine = create_engine(_database_url(), poolclass=pool.NullPool, future=True)
    try:
        with engine.connect() as fresh_connection:
            _configure(connection=fresh_connection)
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
