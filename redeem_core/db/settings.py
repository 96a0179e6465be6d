"""
Database access methods for campaign settings
"""
from typing import Dict

from psycopg import AsyncConnection


async def get_all(conn: AsyncConnection) -> Dict[str, str]:
    """Get all settings as a key-value dict"""
    async with conn.cursor() as cur:
        await cur.execute("SELECT key, value FROM settings")
        return {key: value for key, value in await cur.fetchall()}


async def set_many(conn: AsyncConnection, values: Dict[str, str]) -> None:
    """Set or update several settings at once"""
    async with conn.cursor() as cur:
        await cur.executemany(
            """
            INSERT INTO settings (key, value)
            VALUES (%s, %s)
            ON CONFLICT (key) DO UPDATE SET value = EXCLUDED.value
            """,
            list(values.items()),
        )
