"""
core/db.py -- SQLAlchemy engine factory shared by auth/store.py and catalog/store.py.

Both repositories take a database URL and build their own engine through
make_engine(). SQLite gets two tweaks:

  check_same_thread=False -- FastAPI runs sync route handlers in a threadpool,
      so one pooled connection may be used from several threads over its life.

  WAL journal mode -- readers proceed without blocking during writes. Set per
      connection because SQLite PRAGMAs are not inherited by new connections
      from the pool.

Swapping SQLite for PostgreSQL is a connection string change, not a rewrite.
"""

from __future__ import annotations

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def make_engine(db_url: str) -> Engine:
    """Return an Engine for db_url with SQLite-specific connection settings applied."""
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(db_url, connect_args=connect_args)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _set_wal_mode)
    return engine
