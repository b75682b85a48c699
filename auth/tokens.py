"""
auth/tokens.py -- Access token issue and verification.

Security design decisions:
  JWT: python-jose with HS256. Tokens carry the identity id ("sub"), role,
       issue time and expiry. The signing key, TTL and clock are constructor
       arguments of TokenCodec -- there is no module-level key, so tests can
       run against fixed clocks and throwaway keys.

  Expiry: checked here, not by python-jose. jose treats a token as valid at
       exactly now == exp; we reject at now >= exp so the validity window is
       [iat, exp) with no extra second. It also lets verify() take an explicit
       evaluation time.

  Signature encoding: a base64url signature segment has spare low bits in its
       final character, so two different strings can decode to the same MAC.
       verify() rejects any signature segment that is not the canonical
       encoding of its bytes, which makes every single-character change to a
       token fail verification.

  Failure reporting: every rejection raises InvalidToken. The sub-case is
       logged, never returned -- callers see one failure kind.

Layer rule: no imports from api/ or catalog/.
"""

from __future__ import annotations

import binascii
import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from jose import jwt
from jose.exceptions import JOSEError
from jose.utils import base64url_decode, base64url_encode

from auth.models import Claims, Role

logger = logging.getLogger("tienda.auth")

_ALGORITHM = "HS256"
_DEFAULT_TTL = timedelta(hours=1)


class InvalidToken(Exception):
    """The token is malformed, forged or expired."""


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(moment: datetime) -> datetime:
    # Naive datetimes are taken to be UTC.
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def _has_canonical_signature(token: str) -> bool:
    parts = token.split(".")
    if len(parts) != 3 or not parts[2]:
        return False
    try:
        segment = parts[2].encode("ascii")
        return base64url_encode(base64url_decode(segment)) == segment
    except (binascii.Error, ValueError):
        return False


class TokenCodec:
    """Signs and verifies access tokens.

    Usage:
        codec = TokenCodec(secret_key=settings.secret_key, ttl=timedelta(hours=1))
        token = codec.issue("42", Role.admin)
        claims = codec.verify(token)          # raises InvalidToken on any failure
    """

    def __init__(
        self,
        secret_key: str,
        ttl: timedelta = _DEFAULT_TTL,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        if not secret_key:
            raise ValueError("secret_key must not be empty")
        if ttl <= timedelta(0):
            raise ValueError("ttl must be positive")
        self._secret_key = secret_key
        self.ttl = ttl
        self._clock = clock

    def issue(self, subject_id: str, role: Role, ttl: timedelta | None = None) -> str:
        """Return a signed, URL-safe token for subject_id with the given role.

        iat is the codec clock truncated to whole seconds; exp = iat + ttl.
        """
        lifetime = ttl if ttl is not None else self.ttl
        issued_at = int(_as_utc(self._clock()).timestamp())
        payload = {
            "sub": str(subject_id),
            "role": Role(role).value,
            "iat": issued_at,
            "exp": issued_at + int(lifetime.total_seconds()),
        }
        return jwt.encode(payload, self._secret_key, algorithm=_ALGORITHM)

    def verify(self, token: str, at: datetime | None = None) -> Claims:
        """Return the Claims carried by token, evaluated at time `at` (default: now).

        Raises InvalidToken for bad encoding, bad signature, missing or
        mistyped claims, and expiry (at >= exp).
        """
        if not _has_canonical_signature(token):
            logger.info("Token rejected: malformed encoding")
            raise InvalidToken("malformed token")
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[_ALGORITHM],
                options={"verify_exp": False},
            )
        except JOSEError as exc:
            logger.info("Token rejected: %s", exc)
            raise InvalidToken("signature or encoding check failed") from exc

        try:
            subject_id = payload["sub"]
            role = Role(payload["role"])
            issued_at = int(payload["iat"])
            expires_at = int(payload["exp"])
        except (KeyError, TypeError, ValueError) as exc:
            logger.info("Token rejected: missing or invalid claims")
            raise InvalidToken("missing or invalid claims") from exc
        if not isinstance(subject_id, str) or not subject_id:
            logger.info("Token rejected: missing or invalid claims")
            raise InvalidToken("missing or invalid claims")

        now = _as_utc(at if at is not None else self._clock())
        if now.timestamp() >= expires_at:
            logger.info("Token rejected: expired (subject=%s)", subject_id)
            raise InvalidToken("token expired")

        return Claims(
            subject_id=subject_id,
            role=role,
            issued_at=datetime.fromtimestamp(issued_at, tz=timezone.utc),
            expires_at=datetime.fromtimestamp(expires_at, tz=timezone.utc),
        )
