"""
auth/accounts.py -- Registration and login, independent of HTTP.

register_identity() does one insert and lets the store's UNIQUE constraint
decide duplicates. authenticate_identity() does one lookup and always runs
bcrypt, even for unknown usernames, so response time does not reveal whether
a username exists. Both failure paths raise the same InvalidCredentials.

Layer rule: no imports from api/ or catalog/.
"""

from __future__ import annotations

import logging

from auth.models import Identity, Role
from auth.passwords import PasswordHasher
from auth.store import IdentityRepository
from auth.tokens import TokenCodec
from core.errors import DuplicateIdentity, InvalidCredentials, ValidationError

logger = logging.getLogger("tienda.auth")

MAX_USERNAME_LENGTH = 255


def register_identity(
    store: IdentityRepository,
    hasher: PasswordHasher,
    username: str,
    password: str,
    role: Role | str | None = None,
) -> Identity:
    """Hash the password and create a new identity. Role defaults to standard.

    Raises ValidationError for a blank or oversized username, an unusable
    password or an unknown role; DuplicateIdentity if the username is taken.
    """
    if not username or not username.strip() or len(username) > MAX_USERNAME_LENGTH:
        raise ValidationError("Username must be 1-255 characters.")
    try:
        resolved_role = Role(role) if role is not None else Role.standard
    except ValueError as exc:
        raise ValidationError(f"Unknown role: {role!r}") from exc

    identity = Identity(
        username=username,
        hashed_password=hasher.hash(password),
        role=resolved_role,
    )
    try:
        identity.id = store.create_identity(identity)
    except DuplicateIdentity:
        logger.info("Registration rejected: duplicate username")
        raise
    logger.info("Registered identity id=%s role=%s", identity.id, identity.role.value)
    return identity


def authenticate_identity(
    store: IdentityRepository,
    hasher: PasswordHasher,
    username: str,
    password: str,
) -> Identity:
    """Return the identity for a correct username/password pair.

    Raises InvalidCredentials for an unknown username and for a wrong
    password alike.
    """
    identity = store.get_by_username(username)
    if identity is None:
        # Equalize timing -- do NOT return early before running bcrypt.
        hasher.verify_dummy(password)
        logger.info("Login failed")
        raise InvalidCredentials()
    if not hasher.verify(password, identity.hashed_password):
        logger.info("Login failed")
        raise InvalidCredentials()
    return identity


def login(
    store: IdentityRepository,
    hasher: PasswordHasher,
    codec: TokenCodec,
    username: str,
    password: str,
) -> tuple[str, Identity]:
    """Authenticate and issue an access token. Returns (token, identity)."""
    identity = authenticate_identity(store, hasher, username, password)
    token = codec.issue(str(identity.id), identity.role)
    logger.info("Issued token for identity id=%s", identity.id)
    return token, identity
