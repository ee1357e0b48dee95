from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

from tripsync.config import get_settings  # noqa: E402
from tripsync.db.engine import sqlalchemy_url  # noqa: E402
from tripsync.db.models import Base  # noqa: E402

target_metadata = Base.metadata

# DATABASE_URL wins over alembic.ini
config.set_main_option(
    "sqlalchemy.url",
    sqlalchemy_url(get_settings().database_url or config.get_main_option("sqlalchemy.url") or ""),
)


def run_migrations_offline() -> None:
    """Emit the schedule schema as SQL without a database connection."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
