# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for password hashing."""

import pytest

from gymstudio.domains.auth.password import PasswordHasher


@pytest.fixture
def hasher() -> PasswordHasher:
    """Create a fast hasher for tests."""
    return PasswordHasher(rounds=4)


class TestPasswordHasher:
    """Tests for PasswordHasher."""

    def test_hash_password_returns_bcrypt_hash(self, hasher: PasswordHasher) -> None:
        """Test that hashing produces a bcrypt string."""
        hashed = hasher.hash("Secret-pass1")

        assert hashed.startswith("$2b$04$")
        assert "Secret-pass1" not in hashed

    def test_hash_produces_different_hashes_for_same_password(self, hasher: PasswordHasher) -> None:
        """Test that salts differ between hashes."""
        assert hasher.hash("Secret-pass1") != hasher.hash("Secret-pass1")

    def test_verify_correct_password(self, hasher: PasswordHasher) -> None:
        """Test the right password verifies."""
        assert hasher.verify("Secret-pass1", hasher.hash("Secret-pass1")) is True

    def test_verify_incorrect_password(self, hasher: PasswordHasher) -> None:
        """Test a wrong password does not verify."""
        assert hasher.verify("Wrong-pass1", hasher.hash("Secret-pass1")) is False

    def test_verify_empty_inputs_return_false(self, hasher: PasswordHasher) -> None:
        """Test empty password or hash never verify."""
        assert hasher.verify("", hasher.hash("Secret-pass1")) is False
        assert hasher.verify("Secret-pass1", "") is False

    def test_verify_invalid_hash_returns_false(self, hasher: PasswordHasher) -> None:
        """Test a malformed hash never verifies."""
        assert hasher.verify("Secret-pass1", "not-a-bcrypt-hash") is False

    def test_hash_empty_password_raises_error(self, hasher: PasswordHasher) -> None:
        """Test an empty password cannot be hashed."""
        with pytest.raises(ValueError):
            hasher.hash("")

    def test_hash_overlong_password_raises_error(self, hasher: PasswordHasher) -> None:
        """Test passwords past the bcrypt input limit are refused."""
        with pytest.raises(ValueError):
            hasher.hash("é" * 40)

    def test_needs_rehash_same_rounds(self, hasher: PasswordHasher) -> None:
        """Test a hash with the current work factor is kept."""
        assert hasher.needs_rehash(hasher.hash("Secret-pass1")) is False

    def test_needs_rehash_other_rounds(self, hasher: PasswordHasher) -> None:
        """Test a hash with another work factor is flagged."""
        stronger = PasswordHasher(rounds=5)

        assert hasher.needs_rehash(stronger.hash("Secret-pass1")) is True

    def test_needs_rehash_malformed(self, hasher: PasswordHasher) -> None:
        """Test an unparseable hash is flagged."""
        assert hasher.needs_rehash("not-a-bcrypt-hash") is True
