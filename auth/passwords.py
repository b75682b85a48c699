"""
auth/passwords.py -- bcrypt password hashing.

bcrypt is used directly rather than through passlib. passlib's wrap-bug
detection probes with a password longer than 72 bytes, which bcrypt 4.x+
rejects with an explicit error.

The work factor is a constructor argument (BCRYPT_ROUNDS in production, 4 in
tests). The cost and salt are embedded in each hash, so raising the rounds
later does not invalidate existing hashes.

Layer rule: no imports from api/ or catalog/.
"""

from __future__ import annotations

import bcrypt

from core.errors import ValidationError

# bcrypt only looks at the first 72 bytes of input; newer releases refuse
# anything longer instead of truncating.
MAX_PASSWORD_BYTES = 72

_DEFAULT_ROUNDS = 12


class PasswordHasher:
    """Salted one-way hashing with a tunable work factor.

    Usage:
        hasher = PasswordHasher(rounds=12)
        stored = hasher.hash("pw123")
        hasher.verify("pw123", stored)   # True
    """

    def __init__(self, rounds: int = _DEFAULT_ROUNDS) -> None:
        self.rounds = rounds
        # Timing equalization hash. Computed once here so the first login
        # attempt is not measurably slower than later ones.
        self._dummy_hash = self.hash("tienda_timing_dummy")

    def hash(self, secret: str) -> str:
        """Return a bcrypt hash of secret.

        Raises ValidationError for an empty secret or one longer than 72
        UTF-8 bytes. The API layer enforces the same limits on request bodies.
        """
        encoded = secret.encode("utf-8")
        if not encoded:
            raise ValidationError("Password must not be empty.")
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes.")
        return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, secret: str, hashed: str) -> bool:
        """Return True if secret matches hashed. Never raises on mismatch or bad input."""
        try:
            return bcrypt.checkpw(secret.encode("utf-8"), hashed.encode("utf-8"))
        except (ValueError, TypeError):
            return False

    def verify_dummy(self, secret: str) -> bool:
        """Burn one verification's worth of CPU for a login with no stored hash.

        Always returns False. Call it when the username does not exist so the
        response time matches a wrong-password attempt.
        """
        self.verify(secret, self._dummy_hash)
        return False
