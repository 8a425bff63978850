# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependencies for the studio API.

This module provides dependency injection functions for:
- Database sessions
- Authentication and authorization
- Domain services
- The enrollment submission rate limiter
"""

import logging
from typing import AsyncGenerator

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from gymstudio.api.middleware.auth import CurrentUser, get_current_user
from gymstudio.api.middleware.rate_limit import RateLimiter, build_rate_limiter
from gymstudio.core.config import get_settings
from gymstudio.domains.auth.jwt import JWTManager
from gymstudio.domains.auth.password import PasswordHasher
from gymstudio.domains.auth.service import AuthService
from gymstudio.domains.class_.service import ClassService
from gymstudio.domains.enrollment.service import EnrollmentService
from gymstudio.domains.user.service import UserService
from gymstudio.infrastructure.database.connection import (
    close_database,
    get_session,
    init_database,
)

logger = logging.getLogger(__name__)


async def init_db() -> None:
    """Initialize the database connection.

    Should be called during application startup.
    """
    await init_database(get_settings())
    logger.info("Database initialized")


async def close_db() -> None:
    """Close the database connection.

    Should be called during application shutdown.
    """
    await close_database()
    logger.info("Database connection closed")


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get a database session for the request.

    Yields:
        AsyncSession for the studio database.
    """
    async with get_session() as session:
        yield session


def require_auth(request: Request) -> CurrentUser:
    """Require an authenticated user.

    Raises:
        HTTPException: 401 if the request carries no valid token.
    """
    user = get_current_user(request)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_admin(request: Request) -> CurrentUser:
    """Require an admin user.

    Raises:
        HTTPException: 401 if not authenticated, 403 if not admin.
    """
    user = require_auth(request)
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user


def get_jwt_manager() -> JWTManager:
    """Get JWT manager instance."""
    settings = get_settings()
    return JWTManager(settings.jwt)


def get_password_hasher() -> PasswordHasher:
    """Get password hasher instance."""
    return PasswordHasher(rounds=get_settings().security.bcrypt_rounds)


async def get_auth_service(
    db: AsyncSession = Depends(get_db),
    jwt_manager: JWTManager = Depends(get_jwt_manager),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> AuthService:
    """Get AuthService instance."""
    return AuthService(db, jwt_manager, hasher)


async def get_enrollment_service(
    db: AsyncSession = Depends(get_db),
) -> EnrollmentService:
    """Get EnrollmentService instance."""
    return EnrollmentService(db)


async def get_class_service(
    db: AsyncSession = Depends(get_db),
) -> ClassService:
    """Get ClassService instance."""
    return ClassService(db)


async def get_user_service(
    db: AsyncSession = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> UserService:
    """Get UserService instance."""
    return UserService(db, hasher=hasher)


def get_enrollment_rate_limiter(request: Request) -> RateLimiter:
    """Get the enrollment submission limiter held on the application.

    The limiter is created once per application so its counters survive
    across requests.
    """
    rate_limiter = getattr(request.app.state, "enrollment_rate_limiter", None)
    if rate_limiter is None:
        rate_limiter = build_rate_limiter(get_settings())
        request.app.state.enrollment_rate_limiter = rate_limiter
    return rate_limiter
