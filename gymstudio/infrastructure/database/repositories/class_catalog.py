# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Class catalog store: class definitions and class enrollment relations.

Seats are reserved with a conditional increment of
``class_definitions.seats_taken`` in the same transaction as the relation
write. The increment only succeeds while ``seats_taken < capacity``, so
concurrent reservations can never seat more students than the capacity.
"""

import logging
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from gymstudio.domains.errors import (
    AlreadyEnrolledError,
    ClassFullError,
    ClassNotFoundError,
    NotEnrolledError,
    ValidationError,
)
from gymstudio.infrastructure.database.models import ClassDefinition, ClassEnrollment
from gymstudio.infrastructure.database.repositories.base import BaseRepository
from gymstudio.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class ClassCatalogRepository(BaseRepository):
    """Data access for the class catalog."""

    # Class definitions

    async def create(self, **fields: Any) -> ClassDefinition:
        """Insert a new class definition with no seats taken."""
        class_ = ClassDefinition(seats_taken=0, **fields)
        try:
            self.db.add(class_)
            await self.db.commit()
            await self.db.refresh(class_)
        except SQLAlchemyError as e:
            await self._fail("create class", e)
        return class_

    async def get(self, class_id: str) -> ClassDefinition | None:
        """Get a class definition by id, or None."""
        try:
            result = await self.db.execute(
                select(ClassDefinition)
                .where(ClassDefinition.id == class_id)
                .execution_options(populate_existing=True)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            await self._fail("get class", e)

    async def list_classes(
        self,
        day_of_week: str | None = None,
        program_type: str | None = None,
        active_only: bool = True,
    ) -> list[ClassDefinition]:
        """List class definitions in catalog order.

        Catalog order is creation order, so results are stable for a
        given snapshot.

        Args:
            day_of_week: Optional lowercase day filter.
            program_type: Optional exact program filter.
            active_only: Exclude deactivated classes.
        """
        query = (
            select(ClassDefinition)
            .order_by(ClassDefinition.created_at, ClassDefinition.id)
            .execution_options(populate_existing=True)
        )
        if active_only:
            query = query.where(ClassDefinition.is_active.is_(True))
        if day_of_week is not None:
            query = query.where(ClassDefinition.day_of_week == day_of_week)
        if program_type is not None:
            query = query.where(ClassDefinition.program_type == program_type)
        try:
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            await self._fail("list classes", e)

    async def update(self, class_id: str, **fields: Any) -> ClassDefinition:
        """Update class fields.

        A capacity change is applied only if it stays at or above the
        seats already taken.

        Raises:
            ClassNotFoundError: If the class does not exist.
            ValidationError: If the new capacity is below the seats taken.
        """
        values = {**fields, "updated_at": utc_now()}
        stmt = update(ClassDefinition).where(ClassDefinition.id == class_id)
        if "capacity" in fields:
            stmt = stmt.where(ClassDefinition.seats_taken <= fields["capacity"])
        try:
            result = await self.db.execute(
                stmt.values(**values).execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                await self.db.rollback()
                class_ = await self.get(class_id)
                if class_ is None:
                    raise ClassNotFoundError(f"Class {class_id} not found")
                raise ValidationError(
                    f"Capacity {fields['capacity']} is below the "
                    f"{class_.seats_taken} seats already taken"
                )
            await self.db.commit()

            class_ = await self.get(class_id)
            await self.db.refresh(class_)
        except SQLAlchemyError as e:
            await self._fail("update class", e)
        return class_

    # Class enrollment relations

    async def count_active(self, class_id: str) -> int:
        """Count active enrollment relations for a class."""
        try:
            result = await self.db.execute(
                select(func.count(ClassEnrollment.id)).where(
                    ClassEnrollment.class_id == class_id,
                    ClassEnrollment.status == "active",
                )
            )
            return int(result.scalar_one())
        except SQLAlchemyError as e:
            await self._fail("count active enrollments", e)

    async def count_active_by_class(self, class_ids: list[str]) -> dict[str, int]:
        """Count active relations for several classes in one query.

        Classes without active relations map to 0.
        """
        if not class_ids:
            return {}
        try:
            result = await self.db.execute(
                select(ClassEnrollment.class_id, func.count(ClassEnrollment.id))
                .where(
                    ClassEnrollment.class_id.in_(class_ids),
                    ClassEnrollment.status == "active",
                )
                .group_by(ClassEnrollment.class_id)
            )
            counts = {class_id: int(count) for class_id, count in result.all()}
        except SQLAlchemyError as e:
            await self._fail("count active enrollments", e)
        return {class_id: counts.get(class_id, 0) for class_id in class_ids}

    async def get_relation(self, class_id: str, enrollment_id: str) -> ClassEnrollment | None:
        """Get the relation between a class and an application, or None."""
        try:
            result = await self.db.execute(
                select(ClassEnrollment)
                .execution_options(populate_existing=True)
                .where(
                    ClassEnrollment.class_id == class_id,
                    ClassEnrollment.enrollment_id == enrollment_id,
                )
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            await self._fail("get class enrollment", e)

    async def list_relations(
        self,
        class_id: str,
        status: str | None = None,
    ) -> list[ClassEnrollment]:
        """List relations for a class, oldest first."""
        query = (
            select(ClassEnrollment)
            .execution_options(populate_existing=True)
            .where(ClassEnrollment.class_id == class_id)
            .order_by(ClassEnrollment.enrollment_date, ClassEnrollment.id)
        )
        if status is not None:
            query = query.where(ClassEnrollment.status == status)
        try:
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            await self._fail("list class enrollments", e)

    async def find_active_relation(self, enrollment_id: str) -> ClassEnrollment | None:
        """Get the first active relation held by an application, or None."""
        try:
            result = await self.db.execute(
                select(ClassEnrollment)
                .execution_options(populate_existing=True)
                .where(
                    ClassEnrollment.enrollment_id == enrollment_id,
                    ClassEnrollment.status == "active",
                )
                .order_by(ClassEnrollment.enrollment_date)
                .limit(1)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            await self._fail("find active class enrollment", e)

    async def reserve_seat(self, class_id: str, enrollment_id: str) -> ClassEnrollment:
        """Take a seat in a class and write the active relation atomically.

        An existing paused or cancelled relation is reactivated instead of
        inserting a second one.

        Args:
            class_id: Class to seat the student in.
            enrollment_id: Application holding the seat.

        Returns:
            The active relation.

        Raises:
            ClassNotFoundError: If the class does not exist.
            ClassFullError: If no seat is left.
            AlreadyEnrolledError: If the relation is already active.
            StoreError: If the store fails.
        """
        try:
            relation = await self._get_relation_for_update(class_id, enrollment_id)
            if relation is not None and relation.status == "active":
                await self.db.rollback()
                raise AlreadyEnrolledError(
                    f"Enrollment {enrollment_id} already holds a seat in class {class_id}",
                    existing_id=relation.id,
                )

            result = await self.db.execute(
                update(ClassDefinition)
                .where(
                    ClassDefinition.id == class_id,
                    ClassDefinition.seats_taken < ClassDefinition.capacity,
                )
                .values(seats_taken=ClassDefinition.seats_taken + 1)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                await self.db.rollback()
                if await self.get(class_id) is None:
                    raise ClassNotFoundError(f"Class {class_id} not found")
                raise ClassFullError(f"Class {class_id} is full")

            if relation is None:
                relation = ClassEnrollment(
                    class_id=class_id,
                    enrollment_id=enrollment_id,
                    status="active",
                    enrollment_date=utc_now(),
                )
                self.db.add(relation)
            else:
                relation.status = "active"
                relation.enrollment_date = utc_now()

            await self.db.commit()
            await self.db.refresh(relation)
        except IntegrityError as e:
            # Concurrent insert of the same relation.
            await self.db.rollback()
            logger.info(
                "Concurrent seat reservation for class=%s enrollment=%s: %s",
                class_id,
                enrollment_id,
                e.orig,
            )
            raise AlreadyEnrolledError(
                f"Enrollment {enrollment_id} already holds a seat in class {class_id}"
            ) from e
        except SQLAlchemyError as e:
            await self._fail("reserve seat", e)
        return relation

    async def release_seat(
        self,
        class_id: str,
        enrollment_id: str,
        status: str,
    ) -> ClassEnrollment:
        """Move an active relation to paused or cancelled and free its seat.

        Raises:
            NotEnrolledError: If there is no active relation.
            StoreError: If the store fails.
        """
        try:
            result = await self.db.execute(
                update(ClassEnrollment)
                .where(
                    ClassEnrollment.class_id == class_id,
                    ClassEnrollment.enrollment_id == enrollment_id,
                    ClassEnrollment.status == "active",
                )
                .values(status=status)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                await self.db.rollback()
                raise NotEnrolledError(
                    f"Enrollment {enrollment_id} holds no active seat in class {class_id}"
                )
            await self.db.execute(
                update(ClassDefinition)
                .where(ClassDefinition.id == class_id, ClassDefinition.seats_taken > 0)
                .values(seats_taken=ClassDefinition.seats_taken - 1)
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()

            relation = await self.get_relation(class_id, enrollment_id)
            await self.db.refresh(relation)
        except SQLAlchemyError as e:
            await self._fail("release seat", e)
        return relation

    async def _get_relation_for_update(
        self,
        class_id: str,
        enrollment_id: str,
    ) -> ClassEnrollment | None:
        result = await self.db.execute(
            select(ClassEnrollment)
            .execution_options(populate_existing=True)
            .where(
                ClassEnrollment.class_id == class_id,
                ClassEnrollment.enrollment_id == enrollment_id,
            )
            .with_for_update()
        )
        return result.scalar_one_or_none()
