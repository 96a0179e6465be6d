"""
Database access methods for admin users
"""
from typing import List, Optional

from psycopg import AsyncConnection
from psycopg.rows import class_row

from redeem_core.data_model.admin import AdminUser


async def get_all(conn: AsyncConnection) -> List[AdminUser]:
    async with conn.cursor(row_factory=class_row(AdminUser)) as cur:
        await cur.execute("SELECT * FROM admin_users ORDER BY id")
        return await cur.fetchall()


async def get_by_email(conn: AsyncConnection, email: str) -> Optional[AdminUser]:
    """Get admin by email, compared case-insensitively"""
    async with conn.cursor(row_factory=class_row(AdminUser)) as cur:
        await cur.execute(
            "SELECT * FROM admin_users WHERE LOWER(email) = LOWER(%s) LIMIT 1", (email,)
        )
        return await cur.fetchone()


async def insert_if_absent(conn: AsyncConnection, name: str, email: str) -> bool:
    """Insert an admin unless the email is taken, returns True if inserted"""
    async with conn.cursor() as cur:
        await cur.execute(
            """
            INSERT INTO admin_users (name, email)
            VALUES (%s, %s)
            ON CONFLICT (email) DO NOTHING
            RETURNING id
            """,
            (name, email),
        )
        return await cur.fetchone() is not None
