from __future__ import annotations

import psycopg2

from cfpurge.core.config import RETENTION_DAYS
from cfpurge.core.errors import QueryError
from cfpurge.core.hostkeys import is_hostkey
from cfpurge.infrastructure.db.postgres import get_connection

_PURGEABLE_HOST_SQL = """
SELECT hostkey FROM __hosts
WHERE hostkey = %s AND deleted < NOW() - %s * INTERVAL '1 day'
"""


class HostRepo:
    def __init__(self, dsn: str, connect_timeout: int) -> None:
        self.dsn = dsn
        self.connect_timeout = connect_timeout

    def find_purgeable(self, hostkey: str, retention_days: int = RETENTION_DAYS) -> list[str]:
        """Return the hostkeys in ``__hosts`` deleted more than ``retention_days`` ago."""
        if not is_hostkey(hostkey):
            raise QueryError(f"Refusing to query PostgreSQL for malformed hostkey {hostkey!r}")
        try:
            conn = get_connection(self.dsn, self.connect_timeout)
            try:
                with conn.cursor() as cur:
                    cur.execute(_PURGEABLE_HOST_SQL, (hostkey, retention_days))
                    rows = cur.fetchall()
            finally:
                conn.close()
        except psycopg2.Error as exc:
            raise QueryError(f"Error querying PostgreSQL for {hostkey}: {str(exc).strip()}") from exc
        return [str(row[0]) for row in rows if row[0] is not None]
