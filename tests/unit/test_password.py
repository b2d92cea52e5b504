"""Unit tests for password confirmation hashing."""

import pytest

from thesis_tracker.kernel.identity.password import (
    PasswordHasher,
    hash_password,
    verify_password,
)


class TestPasswordHasher:
    """Tests for PasswordHasher."""

    def test_hash_creates_different_hashes(self):
        """Same password should create different hashes (due to salt)."""
        password = "TestPassword123"
        hash1 = PasswordHasher.hash(password, rounds=4)
        hash2 = PasswordHasher.hash(password, rounds=4)

        assert hash1 != hash2
        assert hash1.startswith("$2b$")  # bcrypt prefix

    def test_verify_correct_password(self):
        hashed = PasswordHasher.hash("TestPassword123", rounds=4)

        assert PasswordHasher.verify("TestPassword123", hashed) is True

    def test_verify_wrong_password(self):
        hashed = PasswordHasher.hash("TestPassword123", rounds=4)

        assert PasswordHasher.verify("WrongPassword", hashed) is False

    def test_malformed_hash_does_not_verify(self):
        """An account imported without a bcrypt hash never confirms."""
        assert PasswordHasher.verify("anything", "not-a-bcrypt-hash") is False

    def test_long_passwords_use_first_72_bytes(self):
        base = "x" * 72
        hashed = hash_password(base + "suffix-one", rounds=4)

        assert verify_password(base + "suffix-two", hashed) is True

    @pytest.mark.parametrize("password", ["", "pässwörd", "with spaces in it"])
    def test_convenience_functions(self, password):
        hashed = hash_password(password, rounds=4)

        assert verify_password(password, hashed) is True
        assert verify_password(password + "!", hashed) is False
