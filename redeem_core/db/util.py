"""
Utility methods for database operations
"""
import logging

from psycopg import AsyncConnection

log = logging.getLogger(__name__)


async def truncate_all_tables(conn: AsyncConnection) -> None:
    """Truncate all tables and restore default settings - useful for tests"""
    async with conn.cursor() as cur:
        await cur.execute(
            """
            TRUNCATE TABLE
                codes,
                settings,
                brute_force_attempts,
                import_jobs,
                admin_users,
                admin_login_codes
            RESTART IDENTITY CASCADE
            """
        )
        await cur.execute(
            "INSERT INTO settings (key, value) VALUES ('start_date', ''), ('end_date', '')"
        )
    log.debug("All tables truncated")
