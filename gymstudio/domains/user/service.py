# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User management service.

Admins can list accounts, change roles and activate or deactivate
accounts. Every change is audited.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from gymstudio.domains.audit.service import AuditService
from gymstudio.domains.auth.password import PasswordHasher
from gymstudio.domains.auth.service import InvalidCredentialsError
from gymstudio.domains.errors import UserNotFoundError, ValidationError
from gymstudio.infrastructure.database.repositories import UserRepository
from gymstudio.models.auth import UserResponse, UserUpdateRequest
from gymstudio.models.common import AuditOutcome, UserRole

logger = logging.getLogger(__name__)

_RESOURCE = "user"


class UserService:
    """Service for admin account management.

    Attributes:
        db: Async database session.
    """

    def __init__(
        self,
        db: AsyncSession,
        *,
        users: UserRepository | None = None,
        hasher: PasswordHasher | None = None,
        audit: AuditService | None = None,
    ) -> None:
        self.db = db
        self._users = users or UserRepository(db)
        self._hasher = hasher or PasswordHasher()
        self._audit = audit or AuditService(db)

    async def list_users(self) -> list[UserResponse]:
        """List all accounts, oldest first."""
        users = await self._users.list_all()
        return [UserResponse.model_validate(user) for user in users]

    async def update_user(
        self,
        user_id: str,
        request: UserUpdateRequest,
        updated_by: str,
    ) -> UserResponse:
        """Change an account's role or active flag.

        Args:
            user_id: Account to change.
            request: New role and/or active flag.
            updated_by: ID of the acting admin.

        Returns:
            The account after the change.

        Raises:
            UserNotFoundError: If the account does not exist.
            ValidationError: If an admin would demote or deactivate
                their own account.
            InvalidCredentialsError: If a promotion to admin is not
                confirmed with the acting admin's password.
        """
        user = await self._users.get(user_id)
        if user is None:
            raise UserNotFoundError(f"User {user_id} not found")

        fields = {}
        if request.role is not None and request.role.value != user.role:
            fields["role"] = request.role.value
        if request.is_active is not None and request.is_active != user.is_active:
            fields["is_active"] = request.is_active

        if not fields:
            await self._audit.record(
                action="user.update",
                resource=_RESOURCE,
                outcome=AuditOutcome.NOOP,
                actor_id=updated_by,
                target_id=user_id,
            )
            return UserResponse.model_validate(user)

        if user_id == updated_by and (
            fields.get("is_active") is False or "role" in fields
        ):
            raise ValidationError("Cannot demote or deactivate your own account")

        if fields.get("role") == UserRole.ADMIN.value:
            await self._confirm_admin(updated_by, request.admin_password, user_id)

        changes = {name: [getattr(user, name), value] for name, value in fields.items()}
        updated = await self._users.update(user_id, **fields)
        if updated is None:
            raise UserNotFoundError(f"User {user_id} not found")

        logger.info("Updated user %s by %s: %s", user_id, updated_by, sorted(fields))
        await self._audit.record(
            action=self._action(fields),
            resource=_RESOURCE,
            outcome=AuditOutcome.SUCCESS,
            actor_id=updated_by,
            target_id=user_id,
            details={"changes": changes},
        )
        return UserResponse.model_validate(updated)

    async def _confirm_admin(self, actor_id: str, password: str | None, target_id: str) -> None:
        actor = await self._users.get(actor_id)
        if actor is None or not self._hasher.verify(password or "", actor.password_hash):
            logger.warning("Admin promotion of %s by %s refused: password check failed", target_id, actor_id)
            await self._audit.record(
                action="user.update_role",
                resource=_RESOURCE,
                outcome=AuditOutcome.FAILURE,
                actor_id=actor_id,
                target_id=target_id,
                details={"reason": "admin_password"},
            )
            raise InvalidCredentialsError("Admin password is required to grant the admin role")

    @staticmethod
    def _action(fields: dict) -> str:
        if "role" in fields and "is_active" in fields:
            return "user.update"
        if "role" in fields:
            return "user.update_role"
        return "user.activate" if fields["is_active"] else "user.deactivate"
