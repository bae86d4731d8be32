from __future__ import annotations

import psycopg2
from psycopg2.extensions import connection as PgConnection

APPLICATION_NAME = "cfpurge"


def get_connection(dsn: str, connect_timeout: int) -> PgConnection:
    """Open a read-only autocommit connection to the hub database."""
    conn = psycopg2.connect(
        dsn,
        connect_timeout=connect_timeout,
        application_name=APPLICATION_NAME,
    )
    try:
        conn.set_session(readonly=True, autocommit=True)
    except psycopg2.Error:
        conn.close()
        raise
    return conn
