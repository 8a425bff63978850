# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""bcrypt password hashing for studio accounts.

The work factor comes from ``BCRYPT_ROUNDS``. Hashes made with another
work factor still verify, and ``needs_rehash`` tells the login flow to
upgrade them.

Example:
    >>> hasher = PasswordHasher(rounds=4)
    >>> stored = hasher.hash("Secure-pass1")
    >>> hasher.verify("Secure-pass1", stored), hasher.needs_rehash(stored)
    (True, False)
"""

import logging

import bcrypt

logger = logging.getLogger(__name__)

# bcrypt ignores input past this many bytes
MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """Hash and check account passwords.

    Attributes:
        rounds: bcrypt work factor for new hashes.
    """

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds

    def hash(self, password: str) -> str:
        """Hash a password with a fresh salt.

        Raises:
            ValueError: If the password is empty or longer than bcrypt
                can take.
        """
        if not password:
            raise ValueError("Password cannot be empty")
        encoded = password.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password cannot exceed {MAX_PASSWORD_BYTES} bytes")
        return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self.rounds)).decode("ascii")

    def verify(self, password: str, password_hash: str) -> bool:
        """Check a password against a stored hash.

        Malformed hashes and empty input never match.
        """
        if not password or not password_hash:
            return False
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("ascii"))
        except ValueError as e:
            logger.warning("Stored password hash is malformed: %s", e)
            return False

    def needs_rehash(self, password_hash: str) -> bool:
        """Check whether a stored hash uses a different work factor.

        Hashes look like ``$2b$12$<salt+digest>``.
        """
        parts = password_hash.split("$")
        if len(parts) < 4 or not parts[2].isdigit():
            return True
        return int(parts[2]) != self.rounds
