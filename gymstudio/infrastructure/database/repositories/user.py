# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User account store."""

from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from gymstudio.infrastructure.database.models import User
from gymstudio.infrastructure.database.repositories.base import BaseRepository
from gymstudio.utils.datetime import utc_now


class UserRepository(BaseRepository):
    """Data access for login accounts."""

    async def get(self, user_id: str) -> User | None:
        try:
            result = await self.db.execute(select(User).where(User.id == user_id))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            await self._fail("get user", e)

    async def get_by_email(self, email: str) -> User | None:
        """Get a user by normalized email, or None."""
        try:
            result = await self.db.execute(select(User).where(User.email == email))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            await self._fail("get user by email", e)

    async def create(self, **fields: Any) -> User | None:
        """Insert a user.

        Returns:
            The new user, or None if the email is already taken.
        """
        user = User(**fields)
        try:
            self.db.add(user)
            await self.db.commit()
            await self.db.refresh(user)
        except IntegrityError:
            await self.db.rollback()
            return None
        except SQLAlchemyError as e:
            await self._fail("create user", e)
        return user

    async def touch_last_login(self, user_id: str) -> None:
        """Record a successful login."""
        try:
            await self.db.execute(
                update(User)
                .where(User.id == user_id)
                .values(last_login_at=utc_now())
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self._fail("update last login", e)

    async def update_password_hash(self, user_id: str, password_hash: str) -> None:
        """Replace a stored password hash."""
        try:
            await self.db.execute(
                update(User)
                .where(User.id == user_id)
                .values(password_hash=password_hash, updated_at=utc_now())
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self._fail("update password hash", e)

    async def list_all(self) -> list[User]:
        """List every account, oldest first."""
        try:
            result = await self.db.execute(select(User).order_by(User.created_at, User.id))
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            await self._fail("list users", e)

    async def update(self, user_id: str, **fields: Any) -> User | None:
        """Set account columns such as role and is_active.

        Returns:
            The refreshed user, or None if it does not exist.
        """
        try:
            await self.db.execute(
                update(User)
                .where(User.id == user_id)
                .values(updated_at=utc_now(), **fields)
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
            result = await self.db.execute(
                select(User).where(User.id == user_id).execution_options(populate_existing=True)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            await self._fail("update user", e)
