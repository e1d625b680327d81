import os
import uuid
from collections.abc import Generator
from typing import Any

import psycopg
import pytest

from app.config.settings import Settings
from app.database.connection import close_pool, get_connection, init_pool
from app.queue.postgres_client import PostgresDocumentClient


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "audit_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        PostgresDocumentClient().create_schema()
    except Exception as e:
        close_pool()
        pytest.skip(
            f"PostgreSQL test DB not available: {e}. "
            "Set DB_* env to point at a disposable database"
        )
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def document_client(integration_pool: None) -> PostgresDocumentClient:
    return PostgresDocumentClient()


@pytest.fixture
def collection(integration_pool: None) -> Generator[str, None, None]:
    """A unique collection name, emptied after the test."""
    name = f"audit-tasks-{uuid.uuid4().hex[:8]}"
    yield name
    with get_connection() as conn:
        conn.execute("DELETE FROM documents WHERE collection = %s", (name,))
        conn.commit()
