# src/quillpost/db/session.py
"""Engine and session wiring for the Quillpost database."""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from quillpost.core.settings import settings


class Base(DeclarativeBase):
    """Declarative base for users, posts, tags, likes and comments."""


# Models must be registered on Base.metadata before create_all or Alembic use it.
import quillpost.models  # noqa: E402,F401


def enable_sqlite_foreign_keys(engine: Engine) -> None:
    """Make SQLite enforce the schema's foreign keys on every new connection.

    SQLite ignores ``ON DELETE CASCADE`` and ``SET NULL`` unless the pragma is
    set per connection.
    """

    @event.listens_for(engine, "connect")
    def _set_foreign_keys_pragma(dbapi_connection: Any, connection_record: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(url: str, *, echo: bool = False) -> Engine:
    """Create the engine for ``url``, with SQLite tuned for the threaded app server."""
    kwargs: dict[str, Any] = {"pool_pre_ping": True, "echo": echo}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
    engine = create_engine(url, **kwargs)
    if engine.dialect.name == "sqlite":
        enable_sqlite_foreign_keys(engine)
    return engine


engine = build_engine(settings.effective_database_url, echo=settings.sql_debug)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a request-scoped session, rolling back on database errors."""
    db = SessionLocal()
    try:
        yield db
    except SQLAlchemyError:
        db.rollback()
        raise
    finally:
        db.close()
