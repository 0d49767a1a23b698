"""
Alembic environment configuration
"""
import sys
from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from contactbook.core.config import get_settings
# Import Base and models for autogenerate
from contactbook.core.database import Base
import contactbook.models  # noqa: F401 - registers every model on Base.metadata

# this is the Alembic Config object
config = context.config

try:
    settings = get_settings()
except Exception as exc:  # pragma: no cover - helpful runtime error path
    sys.stderr.write(
        "Failed to load application settings required by Alembic.\n"
        "Check the `.env` file at the project root (or `backend/.env`) and the\n"
        "DATABASE_URL / POSTGRES_* variables (see `contactbook/core/config.py`).\n\n"
        f"Original error: {exc}\n"
    )
    raise

# An explicit sqlalchemy.url in alembic.ini wins over the application settings
if not config.get_main_option("sqlalchemy.url"):
    config.set_main_option("sqlalchemy.url", settings.sqlalchemy_url.replace("%", "%%"))

# Interpret the config file for Python logging.
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection, target_metadata=target_metadata
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
