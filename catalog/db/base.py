"""Database engine and session helpers for the catalog."""

from __future__ import annotations

from collections.abc import Callable
import logging

from sqlalchemy import Engine
from sqlalchemy import create_engine
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm import sessionmaker

from catalog.core.errors import StorageError

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], Session]


def build_engine(database_url: str, **kwargs) -> Engine:
    """Create an engine with liveness checks on pooled connections."""
    kwargs.setdefault("pool_pre_ping", True)
    return create_engine(database_url, **kwargs)


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Return a session factory bound to ``engine``."""
    return sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
        class_=Session,
    )


def check_database(session_factory: SessionFactory) -> None:
    """Run a trivial query, raising ``StorageError`` when storage is unreachable."""
    try:
        with session_factory() as session:
            session.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.error("Database health check failed: %s", type(exc).__name__)
        raise StorageError(exc) from exc
