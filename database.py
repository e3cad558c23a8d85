from functools import lru_cache
from typing import Optional

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine, SQLModel, Session

from config import get_settings


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create a SQLAlchemy engine for the given database URL

    SQLite engines are usable across FastAPI's worker threads and enforce
    foreign keys, so the tasks -> users cascade holds there too.
    """
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, echo=echo, pool_pre_ping=True)

    kwargs = {"connect_args": {"check_same_thread": False}}
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        # One shared connection, otherwise every checkout is a new empty database
        kwargs["poolclass"] = StaticPool

    engine = create_engine(database_url, echo=echo, **kwargs)
    event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


@lru_cache
def get_engine() -> Engine:
    settings = get_settings()
    return build_engine(settings.database_url, echo=settings.database_echo)


def create_db_and_tables(engine: Optional[Engine] = None):
    """Create all tables in the database"""
    # Register the table models on SQLModel.metadata
    import models  # noqa: F401

    SQLModel.metadata.create_all(engine or get_engine())


def get_session():
    """Get database session - used as FastAPI dependency"""
    with Session(get_engine()) as session:
        yield session
