"""
Database connection helper.

This module centralizes how connections are created. Right now we use
`psycopg.connect(settings.db_url)` which opens a new connection per call.
Only `PostgresEventRepo` and the DDL script use it; the default in-memory
store never opens a connection.

Usage:
    from db import get_conn
    with get_conn() as conn:
        with conn.cursor() as cur:
            cur.execute("SELECT 1;")
"""

import psycopg
from settings import settings


def get_conn(db_url: str | None = None):
    """Return a new psycopg connection using `settings.db_url`.

    We add a short `connect_timeout` so HTTP requests don't hang
    indefinitely if the database is unreachable.
    """

    return psycopg.connect(db_url or settings.db_url, connect_timeout=5)
