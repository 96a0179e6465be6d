"""
Database access methods for csv import jobs
"""
from typing import Optional

from psycopg import AsyncConnection
from psycopg.rows import class_row

from redeem_core.data_model.import_job import ImportJob, ImportStatus


async def get(conn: AsyncConnection, job_id: str) -> Optional[ImportJob]:
    async with conn.cursor(row_factory=class_row(ImportJob)) as cur:
        await cur.execute("SELECT * FROM import_jobs WHERE id = %s", (job_id,))
        return await cur.fetchone()


async def insert(conn: AsyncConnection, job_id: str, total_lines: int) -> None:
    async with conn.cursor() as cur:
        await cur.execute(
            """
            INSERT INTO import_jobs
                (id, status, total_lines, processed_lines, successful_lines, failed_lines)
            VALUES (%s, %s, %s, 0, 0, 0)
            """,
            (job_id, ImportStatus.PROCESSING.value, total_lines),
        )


async def update_progress(
    conn: AsyncConnection,
    job_id: str,
    *,
    processed_lines: int,
    successful_lines: int,
    failed_lines: int,
) -> None:
    async with conn.cursor() as cur:
        await cur.execute(
            """
            UPDATE import_jobs
            SET processed_lines = %s, successful_lines = %s, failed_lines = %s
            WHERE id = %s
            """,
            (processed_lines, successful_lines, failed_lines, job_id),
        )


async def mark_completed(
    conn: AsyncConnection,
    job_id: str,
    *,
    total_lines: int,
    successful_lines: int,
    failed_lines: int,
) -> None:
    async with conn.cursor() as cur:
        await cur.execute(
            """
            UPDATE import_jobs
            SET status = %s, completed_at = NOW(),
                processed_lines = %s, successful_lines = %s, failed_lines = %s
            WHERE id = %s
            """,
            (ImportStatus.COMPLETED.value, total_lines, successful_lines, failed_lines, job_id),
        )


async def mark_failed(conn: AsyncConnection, job_id: str, error_message: str) -> None:
    async with conn.cursor() as cur:
        await cur.execute(
            """
            UPDATE import_jobs
            SET status = %s, completed_at = NOW(), error_message = %s
            WHERE id = %s
            """,
            (ImportStatus.FAILED.value, error_message, job_id),
        )
