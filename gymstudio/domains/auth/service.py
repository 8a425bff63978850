# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication service for studio accounts.

Handles:
- Registration of user accounts
- Email and password login issuing bearer tokens
- Creating the bootstrap admin account from configuration
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from gymstudio.domains.auth.jwt import JWTManager
from gymstudio.domains.auth.password import PasswordHasher
from gymstudio.infrastructure.database.models import User
from gymstudio.infrastructure.database.repositories import UserRepository
from gymstudio.models.auth import TokenResponse, UserResponse
from gymstudio.models.common import UserRole, normalize_email

logger = logging.getLogger(__name__)


class AuthenticationError(Exception):
    """Base exception for authentication errors."""

    pass


class InvalidCredentialsError(AuthenticationError):
    """Raised when the email or password is wrong, or the account is inactive."""

    pass


class EmailAlreadyRegisteredError(AuthenticationError):
    """Raised when registering an email that already has an account."""

    pass


class AuthService:
    """Authentication service for login, registration and admin bootstrap.

    Attributes:
        _users: User repository.
        _jwt_manager: JWT token manager.
        _hasher: Password hasher.

    Example:
        >>> auth_service = AuthService(db, jwt_manager)
        >>> tokens = await auth_service.authenticate("admin@example.com", "Secret-pass1")
    """

    def __init__(
        self,
        db: AsyncSession,
        jwt_manager: JWTManager,
        hasher: PasswordHasher | None = None,
    ) -> None:
        self._users = UserRepository(db)
        self._jwt_manager = jwt_manager
        self._hasher = hasher or PasswordHasher()

    async def register(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        role: UserRole = UserRole.USER,
    ) -> TokenResponse:
        """Create an account and log it in.

        Raises:
            EmailAlreadyRegisteredError: If the email is taken.
        """
        user = await self._create_user(email, password, first_name, last_name, role)
        logger.info("User registered: %s (role=%s)", user.id, user.role)
        return self._issue_token(user)

    async def authenticate(self, email: str, password: str) -> TokenResponse:
        """Verify credentials and issue a bearer token.

        Args:
            email: Account email.
            password: Plain text password.

        Returns:
            Token response with the account.

        Raises:
            InvalidCredentialsError: If the credentials do not match an
                active account.
        """
        user = await self._users.get_by_email(normalize_email(email))
        if user is None or not self._hasher.verify(password, user.password_hash):
            logger.info("Failed login attempt")
            raise InvalidCredentialsError("Invalid email or password")
        if not user.is_active:
            raise InvalidCredentialsError("Invalid email or password")

        if self._hasher.needs_rehash(user.password_hash):
            await self._users.update_password_hash(user.id, self._hasher.hash(password))
            logger.info("Password hash upgraded for user %s", user.id)

        await self._users.touch_last_login(user.id)
        logger.info("User logged in: %s", user.id)
        return self._issue_token(user)

    async def get_user(self, user_id: str) -> User | None:
        """Get an account by id."""
        return await self._users.get(user_id)

    async def ensure_admin(self, email: str, password: str) -> User:
        """Create the bootstrap admin account if it does not exist.

        An existing account with the email is returned unchanged.
        """
        email = normalize_email(email)
        existing = await self._users.get_by_email(email)
        if existing is not None:
            if existing.role != UserRole.ADMIN.value:
                logger.warning("Bootstrap admin email belongs to a non-admin account: %s", existing.id)
            return existing

        user = await self._create_user(email, password, "Studio", "Admin", UserRole.ADMIN)
        logger.info("Bootstrap admin account created: %s", user.id)
        return user

    async def _create_user(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        role: UserRole,
    ) -> User:
        user = await self._users.create(
            email=normalize_email(email),
            password_hash=self._hasher.hash(password),
            first_name=first_name,
            last_name=last_name,
            role=role.value,
            is_active=True,
        )
        if user is None:
            raise EmailAlreadyRegisteredError("An account with this email already exists")
        return user

    def _issue_token(self, user: User) -> TokenResponse:
        token = self._jwt_manager.create_access_token(
            user_id=user.id,
            role=user.role,
            email=user.email,
        )
        return TokenResponse(
            access_token=token,
            expires_in=self._jwt_manager.expires_in,
            user=UserResponse.model_validate(user),
        )
