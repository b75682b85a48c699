"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach in
catalog/models.py -- dataclasses own domain shape; stores and routes do the work.

Layer rule: no imports from api/ or catalog/.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Role(str, Enum):
    admin = "admin"
    standard = "standard"


@dataclass
class Identity:
    """A registered principal.

    hashed_password is a bcrypt hash -- the plaintext never reaches the store.
    Identities are created on registration and never updated or deleted.

    id is None before the record is written to the database.
    """

    username: str
    hashed_password: str
    role: Role = Role.standard
    id: int | None = None
    created_at: str | None = None


@dataclass(frozen=True)
class Claims:
    """The verified payload of an access token.

    Reconstructed from the signed token on every request and never persisted.
    subject_id is the stringified Identity.id (JWT "sub" must be a string).
    """

    subject_id: str
    role: Role
    issued_at: datetime
    expires_at: datetime
