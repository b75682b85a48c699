"""Unit tests for auth/passwords.py -- bcrypt hashing and verification."""

import pytest

from auth.passwords import MAX_PASSWORD_BYTES, PasswordHasher
from core.errors import ValidationError


class TestHashAndVerify:
    @pytest.mark.parametrize("secret", ["pw123", "correct horse battery staple", "contraseña-ñ", " padded "])
    def test_verify_accepts_own_hash(self, hasher: PasswordHasher, secret: str) -> None:
        assert hasher.verify(secret, hasher.hash(secret)) is True

    def test_verify_rejects_other_secret(self, hasher: PasswordHasher) -> None:
        hashed = hasher.hash("pw123")
        assert hasher.verify("pw124", hashed) is False
        assert hasher.verify("PW123", hashed) is False
        assert hasher.verify("pw123 ", hashed) is False

    def test_hash_is_never_the_plaintext(self, hasher: PasswordHasher) -> None:
        hashed = hasher.hash("pw123")
        assert hashed != "pw123"
        assert "pw123" not in hashed

    def test_hash_is_salted(self, hasher: PasswordHasher) -> None:
        """Two hashes of the same secret differ but both verify."""
        first, second = hasher.hash("pw123"), hasher.hash("pw123")
        assert first != second
        assert hasher.verify("pw123", first)
        assert hasher.verify("pw123", second)

    def test_work_factor_is_embedded(self) -> None:
        hashed = PasswordHasher(rounds=5).hash("pw123")
        assert hashed.startswith("$2b$05$")
        # A hasher configured with a different cost still verifies it.
        assert PasswordHasher(rounds=4).verify("pw123", hashed)

    def test_max_length_secret_is_accepted(self, hasher: PasswordHasher) -> None:
        secret = "x" * MAX_PASSWORD_BYTES
        assert hasher.verify(secret, hasher.hash(secret))


class TestMalformedInput:
    def test_empty_secret_rejected(self, hasher: PasswordHasher) -> None:
        with pytest.raises(ValidationError):
            hasher.hash("")

    def test_oversized_secret_rejected(self, hasher: PasswordHasher) -> None:
        with pytest.raises(ValidationError):
            hasher.hash("x" * (MAX_PASSWORD_BYTES + 1))

    def test_multibyte_length_counts_bytes(self, hasher: PasswordHasher) -> None:
        # 37 two-byte characters = 74 bytes
        with pytest.raises(ValidationError):
            hasher.hash("ñ" * 37)

    def test_verify_never_raises_on_garbage_hash(self, hasher: PasswordHasher) -> None:
        assert hasher.verify("pw123", "not-a-bcrypt-hash") is False
        assert hasher.verify("pw123", "") is False

    def test_verify_never_raises_on_oversized_secret(self, hasher: PasswordHasher) -> None:
        hashed = hasher.hash("pw123")
        assert hasher.verify("x" * 200, hashed) is False

    def test_verify_dummy_always_false(self, hasher: PasswordHasher) -> None:
        assert hasher.verify_dummy("tienda_timing_dummy") is False
        assert hasher.verify_dummy("anything") is False
