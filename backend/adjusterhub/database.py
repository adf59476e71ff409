"""Database engine, session factory, and table initialization.

Nothing here touches Settings at import time; the engine is built by the
DI container (see ``adjusterhub.container``) on first use.
"""

from datetime import datetime, timezone
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all models."""
    pass


def utcnow() -> datetime:
    """Naive UTC timestamp used for every DateTime column."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _is_memory_sqlite(database_url: str) -> bool:
    return database_url in ("sqlite://", "sqlite:///:memory:")


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Create a SQLAlchemy engine.

    SQLite gets check_same_thread=False so FastAPI's threadpool can share
    connections; in-memory databases also get a StaticPool so every session
    sees the same data.
    """
    connect_args = {}
    kwargs = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
        if _is_memory_sqlite(database_url):
            kwargs["poolclass"] = StaticPool
        else:
            db_path = Path(database_url.replace("sqlite:///", "", 1))
            db_path.parent.mkdir(parents=True, exist_ok=True)
    return create_engine(database_url, echo=echo, connect_args=connect_args, **kwargs)


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


def init_db(engine: Engine) -> Engine:
    """Create all tables that don't exist yet."""
    # Import models so they register with Base.metadata
    import adjusterhub.models  # noqa: F401
    Base.metadata.create_all(bind=engine)
    return engine
