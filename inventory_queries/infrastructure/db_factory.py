"""
Database connection factory utilities for the inventory query layer.

Provides centralized creation of the psycopg and asyncpg pools that back the
store clients, with lifecycle management through `PoolManager` and the
`open_store` context manager.

Opening a pool is retried with tenacity on transient connection failures.
Statements executed through an open store are never retried.
"""

from __future__ import annotations

import asyncio
import threading
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional

import asyncpg
import psycopg
from psycopg_pool import AsyncConnectionPool, PoolTimeout
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from inventory_queries.config import Settings, get_settings
from inventory_queries.infrastructure.store import (
    AsyncpgStore,
    PsycopgStore,
    TracedStoreClient,
    configure_asyncpg_connection,
    configure_psycopg_connection,
)
from inventory_queries.utils.logging import get_logger

log = get_logger(__name__)

DRIVERS = ("psycopg", "asyncpg")

_PSYCOPG_TRANSIENT = (psycopg.OperationalError, psycopg.InterfaceError, PoolTimeout)
_ASYNCPG_TRANSIENT = (
    OSError,
    ConnectionError,
    asyncpg.CannotConnectNowError,
    asyncpg.TooManyConnectionsError,
)


def build_dsn(settings: Optional[Settings] = None) -> str:
    """Compose a DSN string from settings; `POSTGRESQL_URL` wins when set."""
    settings = settings or get_settings()
    if settings.database_url:
        return settings.database_url
    return (
        f"postgresql://{settings.db_user}:{settings.db_password}"
        f"@{settings.db_host}:{settings.db_port}/{settings.db_name}"
    )


def _retrying(settings: Settings, transient: tuple) -> AsyncRetrying:
    return AsyncRetrying(
        stop=stop_after_attempt(settings.connect_attempts),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(transient),
        reraise=True,
    )


async def create_psycopg_store(
    settings: Optional[Settings] = None, dsn_override: Optional[str] = None
) -> PsycopgStore:
    """
    Open a psycopg `AsyncConnectionPool` and wrap it in a `PsycopgStore`.

    Raises
    ------
    psycopg.OperationalError
        If the pool cannot be opened after all retry attempts.
    """
    settings = settings or get_settings()
    pool: Optional[AsyncConnectionPool] = None
    async for attempt in _retrying(settings, _PSYCOPG_TRANSIENT):
        with attempt:
            pool = AsyncConnectionPool(
                conninfo=dsn_override or build_dsn(settings),
                min_size=settings.pool_min_size,
                max_size=settings.pool_max_size,
                max_idle=settings.pool_max_idle_seconds,
                max_lifetime=settings.pool_max_lifetime_seconds,
                kwargs={"autocommit": True},
                configure=configure_psycopg_connection,
                open=False,
            )
            try:
                await pool.open(wait=True)
            except BaseException:
                await pool.close()
                raise
    log.debug(
        "psycopg pool open",
        extra={"min_size": settings.pool_min_size, "max_size": settings.pool_max_size},
    )
    return PsycopgStore(pool, trace=settings.query_trace)


async def create_asyncpg_store(
    settings: Optional[Settings] = None, dsn_override: Optional[str] = None
) -> AsyncpgStore:
    """
    Open an asyncpg pool and wrap it in an `AsyncpgStore`.

    Raises
    ------
    OSError
        If the pool cannot be opened after all retry attempts.
    """
    settings = settings or get_settings()
    pool: Optional[asyncpg.Pool] = None
    async for attempt in _retrying(settings, _ASYNCPG_TRANSIENT):
        with attempt:
            pool = await asyncpg.create_pool(
                dsn_override or build_dsn(settings),
                min_size=settings.pool_min_size,
                max_size=settings.pool_max_size,
                max_inactive_connection_lifetime=settings.pool_max_idle_seconds,
                init=configure_asyncpg_connection,
            )
    log.debug(
        "asyncpg pool open",
        extra={"min_size": settings.pool_min_size, "max_size": settings.pool_max_size},
    )
    return AsyncpgStore(pool, trace=settings.query_trace)


async def create_store(
    settings: Optional[Settings] = None,
    driver: Optional[str] = None,
    dsn_override: Optional[str] = None,
) -> TracedStoreClient:
    """
    Create a store for `driver` (defaults to `settings.db_driver`).

    Raises
    ------
    ValueError
        If the driver name is unknown.
    """
    settings = settings or get_settings()
    driver = driver or settings.db_driver
    if driver == "psycopg":
        return await create_psycopg_store(settings, dsn_override=dsn_override)
    if driver == "asyncpg":
        return await create_asyncpg_store(settings, dsn_override=dsn_override)
    raise ValueError(f"Unknown DB driver {driver!r}; expected one of {', '.join(DRIVERS)}")


class PoolManager:
    """
    Process-wide singleton holding at most one open store per driver.

    Long-lived callers (a hosting layer, a worker) share stores through
    `get_store`; `close_all` releases every pool. Stores belong to the event
    loop that opened them, so `close_all` also resets the open lock.
    """

    _instance: Optional["PoolManager"] = None
    _lock = threading.Lock()

    def __new__(cls) -> "PoolManager":
        """Create or return the singleton instance."""
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._stores: Dict[str, TracedStoreClient] = {}
                cls._instance._open_lock = asyncio.Lock()
            return cls._instance

    async def get_store(
        self, driver: Optional[str] = None, settings: Optional[Settings] = None
    ) -> TracedStoreClient:
        """Return the shared store for `driver`, opening it on first use."""
        settings = settings or get_settings()
        driver = driver or settings.db_driver
        # Held across the open so concurrent first calls share one pool.
        async with self._open_lock:
            store = self._stores.get(driver)
            if store is None:
                store = await create_store(settings, driver=driver)
                self._stores[driver] = store
        return store

    async def close_all(self) -> None:
        """Close every managed store and forget it."""
        stores = list(self._stores.values())
        self._stores.clear()
        self._open_lock = asyncio.Lock()
        for store in stores:
            await store.close()


@asynccontextmanager
async def open_store(
    settings: Optional[Settings] = None,
    driver: Optional[str] = None,
    dsn_override: Optional[str] = None,
) -> AsyncIterator[TracedStoreClient]:
    """
    Async context manager yielding a dedicated, ready-to-use store.

    Example
    -------
        async with open_store() as store:
            item = await get_item_by_id(store, GetItemByIDArgs(id="1"))
    """
    store = await create_store(settings, driver=driver, dsn_override=dsn_override)
    try:
        yield store
    finally:
        await store.close()


__all__ = [
    "DRIVERS",
    "PoolManager",
    "build_dsn",
    "create_asyncpg_store",
    "create_psycopg_store",
    "create_store",
    "open_store",
]
