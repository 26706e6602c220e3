"""PostgreSQL connection string generation and connection management.

Connections go to the Supabase Postgres instance. Request handlers borrow from
a psycopg_pool.AsyncConnectionPool opened in the application lifespan; when no
pool is open (maintenance commands, tests, early startup) a direct connection
is used instead.
"""

from __future__ import annotations

import os
import threading
import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

import psycopg
from psycopg_pool import AsyncConnectionPool

from mindgrid.config.settings import (
    CONNECT_TIMEOUT,
    DEFAULT_MAX_IDLE,
    DEFAULT_MAX_LIFETIME,
    DEFAULT_POOL_MAX_SIZE,
    DEFAULT_POOL_MIN_SIZE,
    DEFAULT_POOL_TIMEOUT,
    KEEPALIVES_COUNT,
    KEEPALIVES_IDLE,
    KEEPALIVES_INTERVAL,
    TCP_USER_TIMEOUT,
    get_db_config,
)
from mindgrid.utils.debug import print__db_debug

_CONNECTION_STRING_CACHE: Optional[str] = None
_POOL: Optional[AsyncConnectionPool] = None


# ==============================================================================
# CONNECTION STRING AND PARAMETERS
# ==============================================================================
def get_connection_string():
    """Generate the PostgreSQL connection string with cloud-tuned parameters.

    The string is cached for the life of the process so every connection
    reports the same ``application_name`` in ``pg_stat_activity``.

    Returns:
        str: ``postgresql://`` URL with sslmode=require, timeouts and keepalives.
    """
    global _CONNECTION_STRING_CACHE

    if _CONNECTION_STRING_CACHE is not None:
        print__db_debug("CONNECTION STRING CACHED: Using cached connection string")
        return _CONNECTION_STRING_CACHE

    config = get_db_config()

    process_id = os.getpid()
    thread_id = threading.get_ident()
    startup_time = int(time.time())
    random_id = uuid.uuid4().hex[:8]

    app_name = f"mindgrid_{process_id}_{thread_id}_{startup_time}_{random_id}"
    print__db_debug(f"CONNECTION STRING APP NAME: {app_name}")

    _CONNECTION_STRING_CACHE = (
        f"postgresql://{config['user']}:{config['password']}@"
        f"{config['host']}:{config['port']}/{config['dbname']}?"
        f"sslmode=require"
        f"&application_name={app_name}"
        f"&connect_timeout={CONNECT_TIMEOUT}"
        f"&keepalives_idle={KEEPALIVES_IDLE}"
        f"&keepalives_interval={KEEPALIVES_INTERVAL}"
        f"&keepalives_count={KEEPALIVES_COUNT}"
        f"&tcp_user_timeout={TCP_USER_TIMEOUT}"
    )
    return _CONNECTION_STRING_CACHE


def clear_connection_string_cache():
    global _CONNECTION_STRING_CACHE
    _CONNECTION_STRING_CACHE = None


def get_connection_kwargs(autocommit: bool = False):
    """Connection kwargs shared by pooled and direct connections.

    Prepared statements are disabled because the Supabase transaction pooler
    does not keep them across checkouts. ``autocommit=True`` is used by the
    maintenance commands so each statement stands on its own.
    """
    return {
        "autocommit": autocommit,
        "prepare_threshold": None,
    }


async def check_connection_health(connection):
    """Return True when ``SELECT 1`` succeeds on the connection.

    Used as the pool ``check`` callback, so it never raises.
    """
    try:
        async with connection.cursor() as cur:
            await cur.execute("SELECT 1")
            result = await cur.fetchone()
            return result is not None and result[0] == 1
    except Exception as exc:
        print__db_debug(f"Connection health check failed: {exc}")
        return False


# ==============================================================================
# DIRECT CONNECTIONS
# ==============================================================================
@asynccontextmanager
async def get_direct_connection(autocommit: bool = False):
    """Open a dedicated connection outside the pool.

    With ``autocommit=False`` the connection context commits on a clean exit
    and rolls back when the body raises.
    """
    connection_string = get_connection_string()
    connection_kwargs = get_connection_kwargs(autocommit=autocommit)

    async with await psycopg.AsyncConnection.connect(
        connection_string, **connection_kwargs
    ) as conn:
        yield conn


# ==============================================================================
# POOL LIFECYCLE
# ==============================================================================
async def open_pool():
    """Create and open the shared pool. Called once from the app lifespan."""
    global _POOL

    if _POOL is not None:
        return _POOL

    print__db_debug("POOL START: Creating AsyncConnectionPool")
    pool = AsyncConnectionPool(
        conninfo=get_connection_string(),
        min_size=DEFAULT_POOL_MIN_SIZE,
        max_size=DEFAULT_POOL_MAX_SIZE,
        timeout=DEFAULT_POOL_TIMEOUT,
        max_idle=DEFAULT_MAX_IDLE,
        max_lifetime=DEFAULT_MAX_LIFETIME,
        kwargs={
            **get_connection_kwargs(),
            "connect_timeout": CONNECT_TIMEOUT,
        },
        check=check_connection_health,
        open=False,
    )
    await pool.open()
    _POOL = pool
    print__db_debug(
        f"POOL READY: min_size={DEFAULT_POOL_MIN_SIZE} max_size={DEFAULT_POOL_MAX_SIZE}"
    )
    return _POOL


async def close_pool():
    global _POOL

    if _POOL is None:
        return
    print__db_debug("POOL CLOSE: Closing AsyncConnectionPool")
    try:
        await _POOL.close()
    finally:
        _POOL = None
        clear_connection_string_cache()


def get_pool() -> Optional[AsyncConnectionPool]:
    return _POOL


@asynccontextmanager
async def get_db_connection():
    """Borrow a connection for one request.

    Uses the shared pool when it is open, otherwise a direct connection. Both
    commit on a clean exit and roll back on error.
    """
    pool = _POOL
    if pool is not None:
        async with pool.connection() as conn:
            yield conn
    else:
        print__db_debug("No pool open, using direct connection")
        async with get_direct_connection() as conn:
            yield conn
