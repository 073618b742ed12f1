"""Database session management for tmsync.

Provides engine factory, session management, and database initialization.
Default database: data/catalog.db (SQLite).
"""

from __future__ import annotations

from pathlib import Path

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from tmsync.db.models import Base


DEFAULT_DB_PATH = Path("data") / "catalog.db"
MEMORY = ":memory:"


def get_engine(db_path: str | Path | None = None, echo: bool = False) -> Engine:
    """Create a SQLAlchemy engine for the SQLite catalog.

    Args:
        db_path: Path to the SQLite file, or ":memory:". Defaults to data/catalog.db.
        echo: If True, log all SQL statements.
    """
    if str(db_path) == MEMORY:
        engine = create_engine("sqlite://", echo=echo)
    else:
        path = Path(db_path) if db_path else DEFAULT_DB_PATH
        path.parent.mkdir(parents=True, exist_ok=True)
        engine = create_engine(f"sqlite:///{path}", echo=echo)

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


def get_session(engine: Engine | None = None) -> Session:
    """Create a new database session. Creates the default engine if None."""
    if engine is None:
        engine = get_engine()
    session_factory = sessionmaker(bind=engine)
    return session_factory()


def init_db(engine: Engine | None = None) -> Engine:
    """Create all tables and return the engine used."""
    if engine is None:
        engine = get_engine()
    Base.metadata.create_all(engine)
    return engine
