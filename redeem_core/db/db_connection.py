import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import gconf
from psycopg import AsyncConnection
from psycopg.conninfo import make_conninfo
from psycopg_pool import AsyncConnectionPool

log = logging.getLogger(__name__)

_CONNINFO_KEYS = ("host", "port", "dbname", "user", "password")

# noinspection PyTypeChecker
connection_pool: AsyncConnectionPool = None


def get_conninfo() -> str:
    db = gconf.get("db")
    return make_conninfo(**{k: db[k] for k in _CONNINFO_KEYS if k in db})


async def make_and_open_connection_pool() -> AsyncConnectionPool:
    global connection_pool
    connection_pool = AsyncConnectionPool(
        conninfo=get_conninfo(),
        min_size=gconf.get("db.pool_min_size", default=2),
        max_size=gconf.get("db.pool_max_size", default=10),
        open=False,
    )
    await connection_pool.open()
    log.debug("opened connection pool")
    return connection_pool


async def close_connection_pool() -> None:
    global connection_pool
    if connection_pool is not None:
        await connection_pool.close()
        connection_pool = None
        log.debug("closed connection pool")


def get_connection_pool() -> AsyncConnectionPool:
    if connection_pool is None:
        raise RuntimeError("No connection pool available")
    return connection_pool


@asynccontextmanager
async def db_conn() -> AsyncGenerator[AsyncConnection, None]:
    """
    Borrow a connection from the pool.
    The surrounding transaction is committed when the block exits normally
    and rolled back if it raises.
    """
    async with get_connection_pool().connection() as conn:
        yield conn
