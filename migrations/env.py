from __future__ import annotations

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from env_helpers import database_url

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Migrations are plain SQL; there is no model metadata to diff against.
target_metadata = None


def run_offline(url: str) -> None:
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_online(url: str) -> None:
    engine = create_engine(url, poolclass=pool.NullPool)
    try:
        with engine.connect() as connection:
            context.configure(connection=connection, target_metadata=target_metadata)
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


_url = database_url()
if context.is_offline_mode():
    run_offline(_url)
else:
    run_online(_url)
