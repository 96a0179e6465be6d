import logging
from pathlib import Path

import gconf
import psycopg
from yoyo import get_backend
from yoyo import read_migrations

log = logging.getLogger(__name__)


def migrate():
    db = gconf.get("db")
    conn_string = f"postgresql+psycopg://{db['user']}:{db['password']}@{db['host']}:{db['port']}/{db['dbname']}"
    try:
        backend = get_backend(conn_string)
    except psycopg.OperationalError:
        log.exception(f"failed to connect to {db['host']}:{db['port']}/{db['dbname']}")
        raise
    migrations_path = Path(db.get("migrations_path", "migrations"))
    if not migrations_path.is_absolute():
        migrations_path = Path.cwd() / migrations_path
    migrations = read_migrations(str(migrations_path))
    with backend.lock():
        to_apply = backend.to_apply(migrations)
        log.debug(f"applying {len(to_apply)} migrations from {migrations_path}")
        backend.apply_migrations(to_apply)
    log.info("database schema is up to date")
