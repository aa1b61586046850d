"""
Migrations for the plan tables. They run on a sync driver derived from DATABASE_URL;
`alembic -x url=<sqlalchemy url> upgrade head` targets another database.
"""
from logging.config import fileConfig

from sqlalchemy import create_engine, pool
from alembic import context

from planrun.config import settings
from planrun.db.base import Base
from planrun.models import *  # noqa: F401 - plan tables must be registered

config = context.config
if config.config_file_name is not None:
    # Keep planrun loggers alive when migrations run inside a worker
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = Base.metadata


def migration_url() -> str:
    return context.get_x_argument(as_dictionary=True).get("url") or settings.sync_database_url


def run_migrations_offline() -> None:
    context.configure(
        url=migration_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = create_engine(migration_url(), poolclass=pool.NullPool)
    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            # SQLite alters tables by copying them
            render_as_batch=connection.dialect.name == "sqlite",
        )
        with context.begin_transaction():
            context.run_migrations()
    connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
