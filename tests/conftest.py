"""Shared pytest fixtures for catalog test suites."""

from collections.abc import Generator
from pathlib import Path
import sys

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import Engine
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from catalog.application import create_app  # noqa: E402
from catalog.core.config import Settings  # noqa: E402
from catalog.db.base import SessionFactory  # noqa: E402
from catalog.db.base import build_session_factory  # noqa: E402
from catalog.db.models import Base  # noqa: E402

SQLITE_MEMORY_URL = "sqlite+pysqlite:///:memory:"


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """Provide an in-memory SQLite engine shared across threads."""
    engine = create_engine(
        SQLITE_MEMORY_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> SessionFactory:
    return build_session_factory(engine)


@pytest.fixture
def settings() -> Settings:
    return Settings(database_url=SQLITE_MEMORY_URL, environment="development")


@pytest.fixture
def app(settings: Settings, session_factory: SessionFactory) -> FastAPI:
    return create_app(settings, session_factory)


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    """Provide an API test client for contract and integration suites."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def broken_session_factory() -> SessionFactory:
    """Session factory whose connections always fail to open."""
    missing = PROJECT_ROOT / "does-not-exist" / "nested" / "catalog.sqlite3"
    return build_session_factory(create_engine(f"sqlite+pysqlite:///{missing}"))
