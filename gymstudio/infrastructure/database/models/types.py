# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Custom column types.

EncryptedString stores medical fields encrypted with Fernet. Values are
loaded back as pydantic SecretStr so they never show up in reprs or logs
unless a caller asks for the secret value explicitly.
"""

import base64
import hashlib
from functools import lru_cache
from typing import Any

from cryptography.fernet import Fernet
from pydantic import SecretStr
from sqlalchemy import Text
from sqlalchemy.types import TypeDecorator

from gymstudio.core.config import get_settings


def derive_key(secret: str) -> bytes:
    """Derive a Fernet key from an arbitrary secret string.

    Args:
        secret: Any secret string.

    Returns:
        A urlsafe base64 encoded 32-byte key.
    """
    digest = hashlib.sha256(secret.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest)


@lru_cache(maxsize=4)
def _cipher_for(key: bytes) -> Fernet:
    return Fernet(key)


def get_cipher() -> Fernet:
    """Get the Fernet cipher for the configured key.

    Uses ENCRYPTION_KEY when set. Outside production a key derived from
    the JWT secret is used so development setups work without one.
    """
    settings = get_settings()
    if settings.security.encryption_key is not None:
        key = settings.security.encryption_key.get_secret_value().encode("utf-8")
    else:
        key = derive_key(settings.jwt.secret_key.get_secret_value())
    return _cipher_for(key)


class EncryptedString(TypeDecorator):
    """Text column encrypted at rest, exposed as SecretStr."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: Any, dialect: Any) -> str | None:
        if value is None:
            return None
        if isinstance(value, SecretStr):
            value = value.get_secret_value()
        return get_cipher().encrypt(str(value).encode("utf-8")).decode("ascii")

    def process_result_value(self, value: Any, dialect: Any) -> SecretStr | None:
        if value is None:
            return None
        return SecretStr(get_cipher().decrypt(value.encode("ascii")).decode("utf-8"))
