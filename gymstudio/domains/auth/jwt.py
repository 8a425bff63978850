# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Signed bearer tokens for studio accounts, via python-jose.

Tokens carry the account id, email and role, and are stamped with the
configured issuer. Decoding rejects tokens from another issuer or with a
role the studio does not know.

Example:
    >>> jwt_manager = JWTManager(get_settings().jwt)
    >>> token = jwt_manager.create_access_token(user_id="user-123", role="admin")
    >>> jwt_manager.decode_token(token).role
    'admin'
"""

import logging
import secrets
from datetime import timedelta

from jose import ExpiredSignatureError, JWTError as JoseJWTError, jwt
from pydantic import BaseModel, ValidationError as PydanticValidationError, field_validator

from gymstudio.core.config.settings import JWTSettings
from gymstudio.models.common import UserRole
from gymstudio.utils.datetime import utc_now

logger = logging.getLogger(__name__)

_ROLES = frozenset(role.value for role in UserRole)


class TokenPayload(BaseModel):
    """Claims of a studio access token.

    Attributes:
        sub: Account id.
        email: Account email.
        role: Account role.
        iss: Issuing service.
        exp: Expiry, seconds since the epoch.
        iat: Issue time, seconds since the epoch.
        jti: Unique token id.
    """

    sub: str
    email: str | None = None
    role: str
    iss: str
    exp: int
    iat: int
    jti: str

    @field_validator("role")
    @classmethod
    def known_role(cls, value: str) -> str:
        if value not in _ROLES:
            raise ValueError(f"Unknown role '{value}'")
        return value


class JWTError(Exception):
    """Base exception for JWT operations."""

    pass


class TokenExpiredError(JWTError):
    """Raised when a token has expired."""

    pass


class InvalidTokenError(JWTError):
    """Raised when a token is forged, malformed or not ours."""

    pass


class JWTManager:
    """Issue and check access tokens."""

    def __init__(self, settings: JWTSettings) -> None:
        self._settings = settings

    @property
    def expires_in(self) -> int:
        """Access token lifetime in seconds."""
        return self._settings.access_token_expire_minutes * 60

    def create_access_token(
        self,
        user_id: str,
        role: str,
        email: str | None = None,
    ) -> str:
        """Sign an access token for an account."""
        issued_at = utc_now()
        claims = {
            "sub": str(user_id),
            "email": email,
            "role": role,
            "iss": self._settings.issuer,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + timedelta(seconds=self.expires_in)).timestamp()),
            "jti": secrets.token_urlsafe(16),
        }
        return jwt.encode(
            claims,
            self._settings.secret_key.get_secret_value(),
            algorithm=self._settings.algorithm,
        )

    def decode_token(self, token: str) -> TokenPayload:
        """Verify a token and return its claims.

        Raises:
            TokenExpiredError: If the token has expired.
            InvalidTokenError: If the signature, issuer or claims are wrong.
        """
        try:
            claims = jwt.decode(
                token,
                self._settings.secret_key.get_secret_value(),
                algorithms=[self._settings.algorithm],
                issuer=self._settings.issuer,
            )
            return TokenPayload.model_validate(claims)
        except ExpiredSignatureError:
            raise TokenExpiredError("Token has expired")
        except (JoseJWTError, PydanticValidationError) as e:
            logger.warning("Rejected access token: %s", e)
            raise InvalidTokenError(f"Invalid token: {e}")
