"""
auth/store.py -- SQLAlchemy Core persistence layer for identities.

Pattern: Repository + Data Mapper (same as catalog/store.py).
IdentityStore is the repository; _row_to_identity is the mapper.
Route and dependency code never touches SQL directly.

IdentityRepository is the capability the auth core depends on:
get_by_username (find by key), create_identity (insert unique) and
list_identities (find all). Any backend that honours those three contracts
can stand in for IdentityStore.

Uniqueness: the UNIQUE constraint on username is the single source of truth.
create_identity() translates the resulting IntegrityError into
DuplicateIdentity, so concurrent registrations of the same name cannot both
succeed and the caller never needs a find-before-insert.

Security: all queries use bound parameters. No f-strings in SQL.

Layer rule: no imports from api/ or catalog/.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Protocol

from sqlalchemy import Column, Integer, MetaData, String, Table, Text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from auth.models import Identity, Role
from core.db import make_engine
from core.errors import DuplicateIdentity, StorageFailure

logger = logging.getLogger("tienda.auth")

_DEFAULT_DB_URL = "sqlite:///tienda.db"

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_identities = Table(
    "identities",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("username", String(255), nullable=False, unique=True),
    Column("hashed_password", Text, nullable=False),
    Column("role", String(30), nullable=False, server_default=Role.standard.value),
    Column("created_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# Capability interface
# ---------------------------------------------------------------------------


class IdentityRepository(Protocol):
    def get_by_username(self, username: str) -> Identity | None: ...

    def create_identity(self, identity: Identity) -> int: ...

    def list_identities(self) -> list[Identity]: ...


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class IdentityStore:
    """SQLAlchemy-backed IdentityRepository.

    Usage:
        store = IdentityStore("sqlite:///tienda.db")
        store.create_identity(Identity(username="alice", hashed_password=hasher.hash("pw"), role=Role.admin))
        identity = store.get_by_username("alice")
        store.close()
    """

    def __init__(self, db_url: str = _DEFAULT_DB_URL) -> None:
        self.engine: Engine = make_engine(db_url)
        _metadata.create_all(self.engine)

    def create_identity(self, identity: Identity) -> int:
        """Insert a new identity and return its assigned database ID.

        Raises DuplicateIdentity if the username already exists and
        StorageFailure for any other database error.
        """
        try:
            with self.engine.connect() as conn:
                result = conn.execute(
                    _identities.insert().values(
                        username=identity.username,
                        hashed_password=identity.hashed_password,
                        role=Role(identity.role).value,
                        created_at=_now_iso(),
                    )
                )
                conn.commit()
                return result.inserted_primary_key[0]
        except IntegrityError as exc:
            raise DuplicateIdentity() from exc
        except SQLAlchemyError as exc:
            logger.error("Identity insert failed: %s", exc)
            raise StorageFailure() from exc

    def get_by_username(self, username: str) -> Identity | None:
        """Look up an identity by exact username (case-sensitive). Returns None if not found."""
        try:
            with self.engine.connect() as conn:
                row = conn.execute(_identities.select().where(_identities.c.username == username)).fetchone()
        except SQLAlchemyError as exc:
            logger.error("Identity lookup failed: %s", exc)
            raise StorageFailure() from exc
        return _row_to_identity(row) if row is not None else None

    def list_identities(self) -> list[Identity]:
        """Return all identities ordered by username."""
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(_identities.select().order_by(_identities.c.username)).fetchall()
        except SQLAlchemyError as exc:
            logger.error("Identity listing failed: %s", exc)
            raise StorageFailure() from exc
        return [_row_to_identity(r) for r in rows]

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_identity(row) -> Identity:
    return Identity(
        id=row.id,
        username=row.username,
        hashed_password=row.hashed_password,
        role=Role(row.role),
        created_at=row.created_at,
    )
