# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication domain: password hashing, JWT tokens and accounts."""

from gymstudio.domains.auth.jwt import (
    InvalidTokenError,
    JWTError,
    JWTManager,
    TokenExpiredError,
    TokenPayload,
)
from gymstudio.domains.auth.password import PasswordHasher
from gymstudio.domains.auth.service import (
    AuthenticationError,
    AuthService,
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
)

__all__ = [
    "JWTManager",
    "TokenPayload",
    "JWTError",
    "TokenExpiredError",
    "InvalidTokenError",
    "PasswordHasher",
    "AuthService",
    "AuthenticationError",
    "InvalidCredentialsError",
    "EmailAlreadyRegisteredError",
]
