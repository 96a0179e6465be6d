"""
Database access methods for one-time admin login codes
"""
from datetime import datetime
from typing import Optional

from psycopg import AsyncConnection
from psycopg.rows import class_row

from redeem_core.data_model.admin import AdminLoginCode


async def insert(conn: AsyncConnection, email: str, code: str, expires_at: datetime) -> None:
    async with conn.cursor() as cur:
        await cur.execute(
            "INSERT INTO admin_login_codes (email, code, expires_at) VALUES (%s, %s, %s)",
            (email, code, expires_at),
        )


async def find_valid(
    conn: AsyncConnection, email: str, code: str, now: datetime
) -> Optional[AdminLoginCode]:
    async with conn.cursor(row_factory=class_row(AdminLoginCode)) as cur:
        await cur.execute(
            """
            SELECT * FROM admin_login_codes
            WHERE LOWER(email) = LOWER(%s) AND code = %s AND expires_at > %s
            ORDER BY created_at DESC LIMIT 1
            """,
            (email, code, now),
        )
        return await cur.fetchone()


async def delete(conn: AsyncConnection, code_id: int) -> None:
    async with conn.cursor() as cur:
        await cur.execute("DELETE FROM admin_login_codes WHERE id = %s", (code_id,))


async def delete_expired(conn: AsyncConnection, now: datetime) -> int:
    async with conn.cursor() as cur:
        await cur.execute("DELETE FROM admin_login_codes WHERE expires_at <= %s", (now,))
        return cur.rowcount
