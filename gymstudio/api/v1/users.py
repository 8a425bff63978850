# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Admin user management API endpoints.

This module provides endpoints for:
- GET / - List accounts (admin)
- PATCH /{user_id} - Change role or activate/deactivate (admin)
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from gymstudio.api.dependencies import get_user_service, require_admin
from gymstudio.api.middleware.auth import CurrentUser
from gymstudio.domains.auth.service import InvalidCredentialsError
from gymstudio.domains.errors import UserNotFoundError, ValidationError
from gymstudio.domains.user.service import UserService
from gymstudio.models.auth import UserListResponse, UserResponse, UserUpdateRequest

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "",
    response_model=UserListResponse,
    summary="List users",
    description="List every account. Requires admin access.",
)
async def list_users(
    current_user: CurrentUser = Depends(require_admin),
    user_service: UserService = Depends(get_user_service),
) -> UserListResponse:
    """List accounts, oldest first."""
    users = await user_service.list_users()
    return UserListResponse(users=users, total=len(users))


@router.patch(
    "/{user_id}",
    response_model=UserResponse,
    summary="Update user",
    description="Change an account's role or active flag. Requires admin access.",
)
async def update_user(
    user_id: str,
    data: UserUpdateRequest,
    current_user: CurrentUser = Depends(require_admin),
    user_service: UserService = Depends(get_user_service),
) -> UserResponse:
    """Change a role or activate/deactivate an account.

    Raises:
        HTTPException: 404 if the account is unknown, 400 for a change to
            the caller's own account, 401 if an admin promotion is not
            confirmed with the caller's password.
    """
    logger.info("Updating user: %s by %s", user_id, current_user.id)

    try:
        return await user_service.update_user(user_id, data, updated_by=current_user.id)
    except UserNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    except InvalidCredentialsError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
        )
