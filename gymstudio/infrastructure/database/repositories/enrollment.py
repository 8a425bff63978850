# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment application store."""

from typing import Any

from sqlalchemy import delete, exists, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from gymstudio.domains.errors import DuplicateEnrollmentError
from gymstudio.infrastructure.database.models import ClassEnrollment, EnrollmentApplication
from gymstudio.infrastructure.database.models.enrollment import STUDENT_UNIQUE_INDEX
from gymstudio.infrastructure.database.repositories.base import BaseRepository


class EnrollmentRepository(BaseRepository):
    """Data access for enrollment applications.

    Status changes and deletes are conditional on the stored status being
    ``pending``, so a concurrent second reviewer cannot apply a transition
    twice.
    """

    async def create(self, **fields: Any) -> EnrollmentApplication:
        """Insert a new pending application.

        Args:
            **fields: Column values for the application.

        Returns:
            The persisted application.

        Raises:
            DuplicateEnrollmentError: If the same child is already stored
                under the email, e.g. a concurrent double submission.
            StoreError: If the insert fails.
        """
        application = EnrollmentApplication(status="pending", **fields)
        try:
            self.db.add(application)
            await self.db.commit()
            await self.db.refresh(application)
        except IntegrityError as e:
            if STUDENT_UNIQUE_INDEX not in str(e.orig):
                await self._fail("create enrollment", e)
            await self.db.rollback()
            raise DuplicateEnrollmentError(
                "An enrollment for this student already exists under this email address"
            ) from e
        except SQLAlchemyError as e:
            await self._fail("create enrollment", e)
        return application

    async def get(self, enrollment_id: str) -> EnrollmentApplication | None:
        """Get an application by id, or None."""
        try:
            result = await self.db.execute(
                select(EnrollmentApplication)
                .where(EnrollmentApplication.id == enrollment_id)
                .execution_options(populate_existing=True)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            await self._fail("get enrollment", e)

    async def get_many(self, enrollment_ids: list[str]) -> dict[str, EnrollmentApplication]:
        """Get several applications keyed by id. Missing ids are absent."""
        if not enrollment_ids:
            return {}
        try:
            result = await self.db.execute(
                select(EnrollmentApplication).where(EnrollmentApplication.id.in_(enrollment_ids))
            )
            return {application.id: application for application in result.scalars().all()}
        except SQLAlchemyError as e:
            await self._fail("get enrollments", e)

    async def list_all(
        self,
        status: str | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[EnrollmentApplication]:
        """List applications, newest submission first.

        Args:
            status: Optional status filter.
            limit: Maximum rows to return.
            offset: Rows to skip.
        """
        query = select(EnrollmentApplication).order_by(
            EnrollmentApplication.submission_date.desc(),
            EnrollmentApplication.id,
        )
        if status is not None:
            query = query.where(EnrollmentApplication.status == status)
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        try:
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            await self._fail("list enrollments", e)

    async def find_by_parent_email(self, parent_email: str) -> list[EnrollmentApplication]:
        """Get every application submitted under a guardian email.

        Args:
            parent_email: Normalized (trimmed, lowercased) email.
        """
        try:
            result = await self.db.execute(
                select(EnrollmentApplication)
                .where(EnrollmentApplication.parent_email == parent_email)
                .order_by(EnrollmentApplication.submission_date)
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            await self._fail("find enrollments by email", e)

    async def update_status_if_pending(self, enrollment_id: str, new_status: str) -> bool:
        """Move a pending application to a new status.

        Args:
            enrollment_id: Application id.
            new_status: Target status.

        Returns:
            True if a row changed, False if the application is missing or
            no longer pending.
        """
        stmt = (
            update(EnrollmentApplication)
            .where(
                EnrollmentApplication.id == enrollment_id,
                EnrollmentApplication.status == "pending",
            )
            .values(status=new_status)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.db.execute(stmt)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self._fail("update enrollment status", e)
        return result.rowcount > 0

    async def delete_if_pending(self, enrollment_id: str) -> bool:
        """Delete a pending application that holds no active seat.

        Inactive class relations of the application are removed in the
        same transaction.

        Returns:
            True if the application was deleted.
        """
        has_active_seat = exists().where(
            ClassEnrollment.enrollment_id == enrollment_id,
            ClassEnrollment.status == "active",
        )
        try:
            await self.db.execute(
                delete(ClassEnrollment)
                .where(
                    ClassEnrollment.enrollment_id == enrollment_id,
                    ClassEnrollment.status != "active",
                )
                .execution_options(synchronize_session=False)
            )
            result = await self.db.execute(
                delete(EnrollmentApplication)
                .where(
                    EnrollmentApplication.id == enrollment_id,
                    EnrollmentApplication.status == "pending",
                    ~has_active_seat,
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount > 0:
                await self.db.commit()
                return True
            await self.db.rollback()
            return False
        except SQLAlchemyError as e:
            await self._fail("delete enrollment", e)
