"""Database engine and session factory."""

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from tripsync.config import Settings

PSYCOPG_SCHEME = "postgresql+psycopg://"


def sqlalchemy_url(database_url: str) -> str:
    """Route plain postgresql:// URLs to the psycopg 3 driver.

    Other URLs (sqlite, explicit drivers) pass through unchanged.
    """
    for scheme in ("postgresql://", "postgres://"):
        if database_url.startswith(scheme):
            return PSYCOPG_SCHEME + database_url[len(scheme) :]
    return database_url


def create_engine_from_settings(settings: Settings) -> Engine:
    """Create SQLAlchemy engine for the configured schedule database.

    Raises:
        ValueError: If DATABASE_URL is unset or empty. Callers that can run
            without a database check the setting first and use the
            in-memory repositories instead.
    """
    if not settings.database_url:
        raise ValueError("DATABASE_URL is not configured")

    return create_engine(sqlalchemy_url(settings.database_url), pool_pre_ping=True)


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Sessions keep loaded rows usable after commit; repositories return them as records."""
    return sessionmaker(bind=engine, expire_on_commit=False)
