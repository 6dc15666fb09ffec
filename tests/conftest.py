"""
Pytest configuration for the inventory query layer.

Provides fixtures for:
- A recording in-memory store client for unit tests
- Database connection management and schema setup for integration tests
- Store clients for both drivers against the test database
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import AsyncGenerator, Generator

import psycopg
import pytest
import pytest_asyncio

from inventory_queries.config import Settings
from inventory_queries.infrastructure.db_factory import create_store
from inventory_queries.infrastructure.store import TracedStoreClient
from tests.factories import FakeStore

SCHEMA_PATH = Path(__file__).parent.parent / "db" / "init.sql"


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "inventory"),
        database_url=None,
        pool_min_size=1,
        pool_max_size=4,
        connect_attempts=1,
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return (
        f"postgresql://{test_settings.db_user}:{test_settings.db_password}"
        f"@{test_settings.db_host}:{test_settings.db_port}/{test_settings.db_name}"
    )


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture(scope="session")
def db_connection(
    test_dsn: str, db_connection_available: bool
) -> Generator[psycopg.Connection, None, None]:
    """
    Provide a session-scoped autocommit connection for setup and cleanup.

    Skips tests if database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    conn = psycopg.connect(test_dsn, autocommit=True)
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="session")
def db_schema_initialized(db_connection: psycopg.Connection) -> bool:
    """
    Ensure the items, transactions and users tables exist.
    """
    with db_connection.cursor() as cur:
        cur.execute(SCHEMA_PATH.read_text(encoding="utf-8"))
    return True


@pytest.fixture(scope="function")
def clean_tables(db_connection: psycopg.Connection, db_schema_initialized: bool):
    """
    Empty all three tables before and after each test function.
    """
    truncate = "TRUNCATE TABLE public.transactions, public.items, public.users RESTART IDENTITY CASCADE;"
    with db_connection.cursor() as cur:
        cur.execute(truncate)
    yield
    with db_connection.cursor() as cur:
        cur.execute(truncate)


@pytest_asyncio.fixture(params=["psycopg", "asyncpg"])
async def store(
    request: pytest.FixtureRequest, test_settings: Settings, test_dsn: str, clean_tables
) -> AsyncGenerator[TracedStoreClient, None]:
    """
    A store for each driver, against freshly truncated tables.
    """
    client = await create_store(test_settings, driver=request.param, dsn_override=test_dsn)
    try:
        yield client
    finally:
        await client.close()
