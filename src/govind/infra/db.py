"""psycopg2 helpers for the processed-updates store and the health probe."""

from contextlib import contextmanager
from typing import Iterator

import psycopg2
from psycopg2.extensions import connection as PgConnection, cursor as PgCursor

CONNECT_TIMEOUT = 5  # seconds


def get_conn(dsn: str) -> PgConnection:
    """Connect to dsn. Raises RuntimeError when no DSN is configured."""
    if not dsn:
        raise RuntimeError("DATABASE_URL not configured")
    return psycopg2.connect(dsn, connect_timeout=CONNECT_TIMEOUT)


@contextmanager
def txn(dsn: str, conn: PgConnection | None = None) -> Iterator[PgCursor]:
    """Yield a cursor inside one transaction.

    Commit on clean exit, roll back and re-raise otherwise. A connection
    opened here from dsn is closed afterwards; a passed-in conn is left open.
    """
    own = conn is None
    active = get_conn(dsn) if own else conn
    try:
        with active.cursor() as cur:
            yield cur
    except Exception:
        active.rollback()
        raise
    else:
        active.commit()
    finally:
        if own:
            active.close()


def ping(dsn: str) -> None:
    with txn(dsn) as cur:
        cur.execute("SELECT 1")
        cur.fetchone()
