"""
Database module - table access functions, connection pool and migrations
"""
from redeem_core.db import (
    codes,
    settings,
    brute_force,
    import_jobs,
    admin_users,
    admin_login_codes,
    util,
    db_connection,
    migration,
)

from redeem_core.db.db_connection import (
    make_and_open_connection_pool,
    close_connection_pool,
    db_conn,
)
from redeem_core.db.migration import migrate

__all__ = [
    'codes',
    'settings',
    'brute_force',
    'import_jobs',
    'admin_users',
    'admin_login_codes',
    'util',
    'db_connection',
    'migration',
    'make_and_open_connection_pool',
    'close_connection_pool',
    'db_conn',
    'migrate',
]
