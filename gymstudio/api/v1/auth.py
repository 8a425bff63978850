# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication API endpoints.

This module provides endpoints for:
- POST /login - Email and password login
- POST /register - Self-service account registration
- GET /me - Current account
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status

from gymstudio.api.dependencies import get_auth_service, require_auth
from gymstudio.api.middleware.auth import CurrentUser
from gymstudio.api.middleware.rate_limit import RATE_LIMIT_AUTH, get_ip_only, limiter
from gymstudio.domains.auth.service import (
    AuthService,
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
)
from gymstudio.models.auth import LoginRequest, RegisterRequest, TokenResponse, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Log in with email and password",
)
@limiter.limit(RATE_LIMIT_AUTH, key_func=get_ip_only)
async def login(
    request: Request,
    data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    """Exchange credentials for a bearer token.

    Raises:
        HTTPException: 401 if the credentials are wrong.
    """
    try:
        return await auth_service.authenticate(data.email, data.password)
    except InvalidCredentialsError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register an account",
)
@limiter.limit(RATE_LIMIT_AUTH, key_func=get_ip_only)
async def register(
    request: Request,
    data: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    """Create an account with the user role and log it in.

    Raises:
        HTTPException: 409 if the email is already registered.
    """
    try:
        return await auth_service.register(
            email=data.email,
            password=data.password,
            first_name=data.first_name,
            last_name=data.last_name,
        )
    except EmailAlreadyRegisteredError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        )


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get the current account",
)
async def get_me(
    current_user: CurrentUser = Depends(require_auth),
    auth_service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    """Get the account behind the bearer token."""
    user = await auth_service.get_user(current_user.id)
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account no longer exists",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return UserResponse.model_validate(user)
