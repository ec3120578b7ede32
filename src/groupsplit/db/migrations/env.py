from __future__ import annotations

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from groupsplit.config import get_settings
from groupsplit.db.urls import sync_database_url

# this is the Alembic Config object, which provides
# access to the values within the .ini file in use.
config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# migrations are hand-written, there is no ORM metadata to autogenerate from
target_metadata = None


def _database_url() -> str:
    # "-x url=..." or sqlalchemy.url in alembic.ini win over DATABASE_URL
    raw = context.get_x_argument(as_dictionary=True).get("url") or config.get_main_option("sqlalchemy.url")
    return sync_database_url(raw or get_settings().database_url)


def run_migrations_offline() -> None:
    context.configure(url=_database_url(), literal_binds=True)

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = create_engine(_database_url(), poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(connection=connection)

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
