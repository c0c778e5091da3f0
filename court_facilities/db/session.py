"""
PostgreSQL connection utilities.
"""

from __future__ import annotations

from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from court_facilities.config import Settings

_POOL: ConnectionPool | None = None


def get_connection_pool(settings: Settings) -> ConnectionPool:
    """Return the process-wide ConnectionPool; the app lifespan opens it."""
    global _POOL
    if _POOL is None:
        _POOL = ConnectionPool(
            conninfo=settings.database_url,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            open=False,
            kwargs={"row_factory": dict_row},
        )
    return _POOL


def close_connection_pool() -> None:
    global _POOL
    if _POOL is not None:
        _POOL.close()
        _POOL = None

