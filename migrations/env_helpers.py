"""Database URL helpers for Alembic migrations.

Kept apart from env.py so they can be tested without an alembic context.
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from psycopg2.extensions import parse_dsn
from sqlalchemy.engine import URL

_DRIVER = "postgresql+psycopg2"


def dsn_to_url(dsn: str) -> str:
    """Convert a libpq key=value DSN into a SQLAlchemy URL string.

    A host starting with "/" is a unix socket directory and is passed as
    the ``host`` query parameter.
    """
    params = parse_dsn(dsn)
    host = params.get("host", "localhost")
    socket = host.startswith("/")
    url = URL.create(
        _DRIVER,
        username=params.get("user") or None,
        password=params.get("password") or None,
        host=None if socket else host,
        port=None if socket else int(params.get("port", "5432")),
        database=params.get("dbname") or None,
        query={"host": host} if socket else {},
    )
    return url.render_as_string(hide_password=False)


def database_url(environ: Mapping[str, str] | None = None) -> str:
    """Return DATABASE_URL in a form SQLAlchemy's psycopg2 dialect accepts."""
    env = os.environ if environ is None else environ
    url = env.get("DATABASE_URL", "")
    if not url:
        raise RuntimeError("DATABASE_URL is required to run migrations")
    if "://" not in url:
        return dsn_to_url(url)
    for prefix in ("postgres://", "postgresql://"):
        if url.startswith(prefix):
            return _DRIVER + "://" + url[len(prefix):]
    return url
