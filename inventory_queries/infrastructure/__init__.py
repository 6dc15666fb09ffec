"""
Infrastructure package for the inventory query layer.

Centralizes database connectivity concerns (store clients, pool factories).
Keep this layer focused on I/O and resource management, decoupled from the
query modules.
"""

from inventory_queries.infrastructure.db_factory import (
    PoolManager,
    build_dsn,
    create_store,
    open_store,
)
from inventory_queries.infrastructure.store import (
    AsyncpgStore,
    PsycopgStore,
    StoreClient,
    TracedStoreClient,
)

__all__ = [
    "AsyncpgStore",
    "PoolManager",
    "PsycopgStore",
    "StoreClient",
    "TracedStoreClient",
    "build_dsn",
    "create_store",
    "open_store",
]
