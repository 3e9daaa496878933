"""Alembic environment for the payment store."""

from __future__ import annotations

import logging
from typing import Any

from alembic import context
from sqlalchemy import create_engine, pool

from payrecon.adapters.sqlalchemy.mappings import mapper_registry, start_mappers
from payrecon.config import get_database_config

log = logging.getLogger("alembic.env")

config = context.config
start_mappers()
target_metadata = mapper_registry.metadata


def _database_url() -> str:
    return config.get_main_option("sqlalchemy.url") or get_database_config().uri


def _migrate(**options: Any) -> None:
    # Batch mode lets SQLite rebuild tables for ALTER operations.
    context.configure(
        target_metadata=target_metadata,
        render_as_batch=True,
        compare_type=True,
        **options,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_offline() -> None:
    log.info("Rendering payment store migrations as SQL")
    _migrate(url=_database_url(), literal_binds=True)


def run_migrations_online() -> None:
    shared = config.attributes.get("connection")
    if shared is not None:
        _migrate(connection=shared)
        return

    engine = create_engine(_database_url(), poolclass=pool.NullPool, future=True)
    try:
        with engine.connect() as connection:
            _migrate(connection=connection)
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
