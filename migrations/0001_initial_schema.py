"""
Initial database schema for redeem-core
"""

from yoyo import step

__depends__ = {}

steps = [
    step(
        """
        CREATE TABLE codes (
            id SERIAL PRIMARY KEY,
            code TEXT NOT NULL UNIQUE,
            link TEXT NOT NULL,
            is_used BOOLEAN NOT NULL DEFAULT FALSE,
            used_at TIMESTAMPTZ,
            ip_address TEXT
        )
        """,
        """
        DROP TABLE codes
        """,
    ),
    step(
        """
        CREATE TABLE settings (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL DEFAULT ''
        )
        """,
        """
        DROP TABLE settings
        """,
    ),
    step(
        """
        INSERT INTO settings (key, value)
        VALUES ('start_date', ''), ('end_date', '')
        ON CONFLICT (key) DO NOTHING
        """,
        """
        DELETE FROM settings WHERE key IN ('start_date', 'end_date')
        """,
    ),
    step(
        """
        CREATE TABLE brute_force_attempts (
            ip TEXT PRIMARY KEY,
            attempts INTEGER NOT NULL DEFAULT 0,
            last_attempt TIMESTAMPTZ NOT NULL,
            blocked_until TIMESTAMPTZ
        )
        """,
        """
        DROP TABLE brute_force_attempts
        """,
    ),
    step(
        """
        CREATE TABLE import_jobs (
            id TEXT PRIMARY KEY,
            status TEXT NOT NULL DEFAULT 'pending',
            total_lines INTEGER NOT NULL DEFAULT 0,
            processed_lines INTEGER NOT NULL DEFAULT 0,
            successful_lines INTEGER NOT NULL DEFAULT 0,
            failed_lines INTEGER NOT NULL DEFAULT 0,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            completed_at TIMESTAMPTZ,
            error_message TEXT
        )
        """,
        """
        DROP TABLE import_jobs
        """,
    ),
    step(
        """
        CREATE TABLE admin_users (
            id SERIAL PRIMARY KEY,
            name TEXT NOT NULL,
            email TEXT NOT NULL UNIQUE,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
        """,
        """
        DROP TABLE admin_users
        """,
    ),
    step(
        """
        CREATE TABLE admin_login_codes (
            id SERIAL PRIMARY KEY,
            email TEXT NOT NULL,
            code TEXT NOT NULL,
            expires_at TIMESTAMPTZ NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
        """,
        """
        DROP TABLE admin_login_codes
        """,
    ),
    step(
        """
        CREATE INDEX idx_codes_used_at ON codes(used_at DESC) WHERE is_used = TRUE
        """,
        """
        DROP INDEX idx_codes_used_at
        """,
    ),
    step(
        """
        CREATE INDEX idx_admin_login_codes_email ON admin_login_codes(email)
        """,
        """
        DROP INDEX idx_admin_login_codes_email
        """,
    ),
    step(
        """
        CREATE INDEX idx_admin_login_codes_expires ON admin_login_codes(expires_at)
        """,
        """
        DROP INDEX idx_admin_login_codes_expires
        """,
    ),
]
