"""
Inventory Queries - typed, single-statement data access for PostgreSQL.

This package wraps fixed, parameterized SQL statements against the `items`,
`transactions` and `users` tables:

- Literal statements with positional `$n` placeholders
- Frozen argument records bound in placeholder order
- Positional row mapping into frozen pydantic records
- psycopg and asyncpg store clients with identical type coercion

Each call is one stateless round trip; composition into larger units of work
belongs to the caller.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from inventory_queries.config import Settings, get_settings
from inventory_queries.domain.models import (
    CountRow,
    Item,
    Transaction,
    User,
    UserTransactionSummary,
)
from inventory_queries.infrastructure.db_factory import PoolManager, build_dsn, create_store, open_store
from inventory_queries.infrastructure.store import AsyncpgStore, PsycopgStore, StoreClient
from inventory_queries.queries import items, transactions, users
from inventory_queries.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Records
    "CountRow",
    "Item",
    "Transaction",
    "User",
    "UserTransactionSummary",
    # Store
    "AsyncpgStore",
    "PoolManager",
    "PsycopgStore",
    "StoreClient",
    "build_dsn",
    "create_store",
    "open_store",
    # Query modules
    "items",
    "transactions",
    "users",
    # Logging
    "configure_logging",
    "get_logger",
]
