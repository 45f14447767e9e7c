"""Alembic environment. Reads DATABASE_URL through orgsync settings."""

from alembic import context
from sqlalchemy import create_engine, pool

from orgsync.config.settings import load_settings
from orgsync.db_base import Base
import orgsync.models  # noqa: F401

target_metadata = Base.metadata


def _database_url() -> str:
    url = load_settings().database_url
    if not url:
        raise RuntimeError("DATABASE_URL must be set to run migrations")
    return url


def run_migrations_offline() -> None:
    context.configure(
        url=_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = create_engine(_database_url(), poolclass=pool.NullPool)
    with engine.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
