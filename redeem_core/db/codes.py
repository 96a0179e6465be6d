"""
Database access methods for redemption codes
"""
from datetime import datetime
from typing import AsyncIterator, List, Optional, Sequence

from psycopg import AsyncConnection
from psycopg.rows import class_row

from redeem_core.data_model.code import Code, CodeEntry, RecentRedeem, RedeemedCode


async def get_by_code(conn: AsyncConnection, code: str) -> Optional[Code]:
    """Get code by its (normalized) value"""
    async with conn.cursor(row_factory=class_row(Code)) as cur:
        await cur.execute("SELECT * FROM codes WHERE code = %s", (code,))
        return await cur.fetchone()


async def get_by_id(conn: AsyncConnection, code_id: int) -> Optional[Code]:
    """Get code by id"""
    async with conn.cursor(row_factory=class_row(Code)) as cur:
        await cur.execute("SELECT * FROM codes WHERE id = %s", (code_id,))
        return await cur.fetchone()


async def mark_used(conn: AsyncConnection, code_id: int, ip: str, used_at: datetime) -> bool:
    """Mark an unused code as used, returns False if it was already used"""
    async with conn.cursor() as cur:
        await cur.execute(
            """
            UPDATE codes SET is_used = TRUE, used_at = %s, ip_address = %s
            WHERE id = %s AND is_used = FALSE
            RETURNING id
            """,
            (used_at, ip, code_id),
        )
        return await cur.fetchone() is not None


async def insert_batch(conn: AsyncConnection, entries: Sequence[CodeEntry]) -> int:
    """Insert codes that do not exist yet, returns the number of inserted rows"""
    if not entries:
        return 0
    async with conn.cursor() as cur:
        await cur.execute(
            """
            INSERT INTO codes (code, link)
            SELECT * FROM unnest(%s::text[], %s::text[])
            ON CONFLICT (code) DO NOTHING
            """,
            ([e.code for e in entries], [e.link for e in entries]),
        )
        return cur.rowcount


async def get_page(
    conn: AsyncConnection, *, limit: int, offset: int, search: Optional[str] = None
) -> List[Code]:
    """Get one page of codes, newest first, optionally filtered by code or ip"""
    async with conn.cursor(row_factory=class_row(Code)) as cur:
        if search:
            pattern = _like_pattern(search)
            await cur.execute(
                """
                SELECT * FROM codes
                WHERE code ILIKE %s OR ip_address ILIKE %s
                ORDER BY id DESC LIMIT %s OFFSET %s
                """,
                (pattern, pattern, limit, offset),
            )
        else:
            await cur.execute(
                "SELECT * FROM codes ORDER BY id DESC LIMIT %s OFFSET %s",
                (limit, offset),
            )
        return await cur.fetchall()


async def count(conn: AsyncConnection, search: Optional[str] = None) -> int:
    """Count codes, optionally filtered like get_page"""
    async with conn.cursor() as cur:
        if search:
            pattern = _like_pattern(search)
            await cur.execute(
                "SELECT COUNT(*) FROM codes WHERE code ILIKE %s OR ip_address ILIKE %s",
                (pattern, pattern),
            )
        else:
            await cur.execute("SELECT COUNT(*) FROM codes")
        result = await cur.fetchone()
        return result[0]


async def count_used(conn: AsyncConnection) -> int:
    """Count redeemed codes"""
    async with conn.cursor() as cur:
        await cur.execute("SELECT COUNT(*) FROM codes WHERE is_used = TRUE")
        result = await cur.fetchone()
        return result[0]


async def get_recent_redeemed(conn: AsyncConnection, limit: int) -> List[RecentRedeem]:
    async with conn.cursor(row_factory=class_row(RecentRedeem)) as cur:
        await cur.execute(
            """
            SELECT code, ip_address, used_at FROM codes
            WHERE is_used = TRUE
            ORDER BY used_at DESC LIMIT %s
            """,
            (limit,),
        )
        return await cur.fetchall()


async def iter_redeemed(conn: AsyncConnection) -> AsyncIterator[RedeemedCode]:
    """
    Iterate over all redeemed codes, newest first.
    Rows are fetched through a server-side cursor, so this must run
    inside a transaction.
    """
    async with conn.cursor(name="export_redeemed", row_factory=class_row(RedeemedCode)) as cur:
        await cur.execute(
            """
            SELECT code, link, used_at, ip_address FROM codes
            WHERE is_used = TRUE
            ORDER BY used_at DESC
            """
        )
        async for row in cur:
            yield row


def _like_pattern(search: str) -> str:
    escaped = search.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
