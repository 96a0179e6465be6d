"""
Database access methods for failed redemption attempts per ip
"""
from datetime import datetime
from typing import Optional

from psycopg import AsyncConnection
from psycopg.rows import class_row

from redeem_core.data_model.brute_force import BruteForceRecord


async def get(conn: AsyncConnection, ip: str) -> Optional[BruteForceRecord]:
    async with conn.cursor(row_factory=class_row(BruteForceRecord)) as cur:
        await cur.execute("SELECT * FROM brute_force_attempts WHERE ip = %s", (ip,))
        return await cur.fetchone()


async def upsert(conn: AsyncConnection, record: BruteForceRecord) -> None:
    async with conn.cursor() as cur:
        await cur.execute(
            """
            INSERT INTO brute_force_attempts (ip, attempts, last_attempt, blocked_until)
            VALUES (%s, %s, %s, %s)
            ON CONFLICT (ip) DO UPDATE SET
                attempts = EXCLUDED.attempts,
                last_attempt = EXCLUDED.last_attempt,
                blocked_until = EXCLUDED.blocked_until
            """,
            (record.ip, record.attempts, record.last_attempt, record.blocked_until),
        )


async def delete(conn: AsyncConnection, ip: str) -> None:
    async with conn.cursor() as cur:
        await cur.execute("DELETE FROM brute_force_attempts WHERE ip = %s", (ip,))


async def delete_stale(conn: AsyncConnection, last_attempt_before: datetime, now: datetime) -> int:
    """Delete records that are not blocked and saw no attempt since the given time"""
    async with conn.cursor() as cur:
        await cur.execute(
            """
            DELETE FROM brute_force_attempts
            WHERE last_attempt < %s AND (blocked_until IS NULL OR blocked_until <= %s)
            """,
            (last_attempt_before, now),
        )
        return cur.rowcount
