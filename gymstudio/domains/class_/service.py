# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Class catalog service.

This module provides the ClassService class for:
- Listing classes with live seat counts
- Creating, updating and deactivating classes
- Seating an application in a class directly
- Withdrawing a student from a class
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from gymstudio.domains.audit.service import AuditService
from gymstudio.domains.class_.capacity import CapacityGuard
from gymstudio.domains.errors import (
    ClassNotFoundError,
    DomainError,
    EnrollmentNotFoundError,
    ValidationError,
)
from gymstudio.infrastructure.database.models import ClassDefinition, ClassEnrollment
from gymstudio.infrastructure.database.repositories import (
    ClassCatalogRepository,
    EnrollmentRepository,
)
from gymstudio.models.class_ import (
    ClassCreateRequest,
    ClassResponse,
    ClassStudentResponse,
    ClassStudentsResponse,
    ClassUpdateRequest,
)
from gymstudio.models.common import AuditOutcome, EnrollmentStatus

logger = logging.getLogger(__name__)

_RESOURCE = "class"


class ClassService:
    """Service for managing the class catalog.

    Attributes:
        db: Async database session.
    """

    def __init__(
        self,
        db: AsyncSession,
        *,
        catalog: ClassCatalogRepository | None = None,
        enrollments: EnrollmentRepository | None = None,
        guard: CapacityGuard | None = None,
        audit: AuditService | None = None,
    ) -> None:
        self.db = db
        self._catalog = catalog or ClassCatalogRepository(db)
        self._enrollments = enrollments or EnrollmentRepository(db)
        self._guard = guard or CapacityGuard(self._catalog)
        self._audit = audit or AuditService(db)

    async def list_classes(
        self,
        day_of_week: str | None = None,
        include_inactive: bool = False,
    ) -> list[ClassResponse]:
        """List classes in catalog order with enrollment counts.

        Args:
            day_of_week: Optional day filter, case-insensitive.
            include_inactive: Include deactivated classes.
        """
        classes = await self._catalog.list_classes(
            day_of_week=day_of_week.strip().lower() if day_of_week else None,
            active_only=not include_inactive,
        )
        counts = await self._catalog.count_active_by_class([class_.id for class_ in classes])
        return [self._to_response(class_, counts.get(class_.id, 0)) for class_ in classes]

    async def get_class(self, class_id: str) -> ClassResponse:
        """Get a class with its enrollment count.

        Raises:
            ClassNotFoundError: If the class does not exist.
        """
        class_ = await self._get_class(class_id)
        return self._to_response(class_, await self._guard.count_active(class_id))

    async def create_class(self, request: ClassCreateRequest, created_by: str) -> ClassResponse:
        """Add a class to the catalog.

        Args:
            request: Class creation data.
            created_by: ID of the admin creating the class.
        """
        class_ = await self._catalog.create(is_active=True, **request.model_dump())
        logger.info("Created class: %s (%s) by %s", class_.name, class_.id, created_by)
        await self._audit.record(
            action="class.create",
            resource=_RESOURCE,
            outcome=AuditOutcome.SUCCESS,
            actor_id=created_by,
            target_id=class_.id,
            details={"name": class_.name, "program_type": class_.program_type},
        )
        return self._to_response(class_, 0)

    async def update_class(
        self,
        class_id: str,
        request: ClassUpdateRequest,
        updated_by: str,
    ) -> ClassResponse:
        """Apply a partial update to a class.

        Raises:
            ClassNotFoundError: If the class does not exist.
            ValidationError: If the resulting age bounds or times are
                inverted, or the capacity drops below the seats taken.
        """
        fields = request.model_dump(exclude_unset=True)
        if not fields:
            return await self.get_class(class_id)

        current = await self._get_class(class_id)
        age_min = fields.get("age_min", current.age_min)
        age_max = fields.get("age_max", current.age_max)
        if age_min is not None and age_max is not None and age_min > age_max:
            raise ValidationError("age_min must not exceed age_max")
        start_time = fields.get("start_time", current.start_time)
        end_time = fields.get("end_time", current.end_time)
        if end_time <= start_time:
            raise ValidationError(f"Class would end at {end_time}, before it starts at {start_time}")

        class_ = await self._catalog.update(class_id, **fields)
        logger.info("Updated class %s by %s: %s", class_id, updated_by, sorted(fields))
        await self._audit.record(
            action="class.update",
            resource=_RESOURCE,
            outcome=AuditOutcome.SUCCESS,
            actor_id=updated_by,
            target_id=class_id,
            details={"fields": sorted(fields)},
        )
        return self._to_response(class_, await self._guard.count_active(class_id))

    async def deactivate_class(self, class_id: str, deactivated_by: str) -> ClassResponse:
        """Soft-deactivate a class. Existing seats are left in place.

        Raises:
            ClassNotFoundError: If the class does not exist.
        """
        class_ = await self._catalog.update(class_id, is_active=False)
        logger.info("Deactivated class %s by %s", class_id, deactivated_by)
        await self._audit.record(
            action="class.deactivate",
            resource=_RESOURCE,
            outcome=AuditOutcome.SUCCESS,
            actor_id=deactivated_by,
            target_id=class_id,
        )
        return self._to_response(class_, await self._guard.count_active(class_id))

    async def enroll_student(
        self,
        class_id: str,
        enrollment_id: str,
        enrolled_by: str,
    ) -> ClassEnrollment:
        """Seat an application in a class directly.

        Args:
            class_id: Class identifier.
            enrollment_id: Application to seat.
            enrolled_by: ID of the admin performing the enrollment.

        Returns:
            The active relation.

        Raises:
            ClassNotFoundError: If the class does not exist.
            EnrollmentNotFoundError: If the application does not exist.
            ValidationError: If the class is inactive or the application
                was rejected.
            ClassFullError: If the class has no seat left.
            AlreadyEnrolledError: If the application already has a seat here.
        """
        action = "class.enroll_student"
        try:
            class_ = await self._get_class(class_id)
            if not class_.is_active:
                raise ValidationError(f"Class {class_id} is not active")

            application = await self._enrollments.get(enrollment_id)
            if application is None:
                raise EnrollmentNotFoundError(f"Enrollment {enrollment_id} not found")
            if application.status == EnrollmentStatus.REJECTED.value:
                raise ValidationError(f"Enrollment {enrollment_id} was rejected")

            relation = await self._guard.reserve_seat(class_id, enrollment_id)
        except DomainError as e:
            await self._audit.record(
                action=action,
                resource=_RESOURCE,
                outcome=AuditOutcome.FAILURE,
                actor_id=enrolled_by,
                target_id=class_id,
                details={"enrollment_id": enrollment_id, "error": type(e).__name__},
            )
            raise

        logger.info(
            "Enrolled application %s in class %s by %s",
            enrollment_id,
            class_id,
            enrolled_by,
        )
        await self._audit.record(
            action=action,
            resource=_RESOURCE,
            outcome=AuditOutcome.SUCCESS,
            actor_id=enrolled_by,
            target_id=class_id,
            details={"enrollment_id": enrollment_id},
        )
        return relation

    async def withdraw_student(
        self,
        class_id: str,
        enrollment_id: str,
        status: str,
        withdrawn_by: str,
    ) -> ClassEnrollment:
        """Pause or cancel a student's seat, freeing it.

        Raises:
            NotEnrolledError: If there is no active relation.
            ValidationError: If ``status`` is not paused or cancelled.
        """
        action = "class.withdraw_student"
        try:
            relation = await self._guard.release_seat(class_id, enrollment_id, status)
        except DomainError as e:
            await self._audit.record(
                action=action,
                resource=_RESOURCE,
                outcome=AuditOutcome.FAILURE,
                actor_id=withdrawn_by,
                target_id=class_id,
                details={"enrollment_id": enrollment_id, "error": type(e).__name__},
            )
            raise

        logger.info(
            "Withdrew application %s from class %s (%s) by %s",
            enrollment_id,
            class_id,
            status,
            withdrawn_by,
        )
        await self._audit.record(
            action=action,
            resource=_RESOURCE,
            outcome=AuditOutcome.SUCCESS,
            actor_id=withdrawn_by,
            target_id=class_id,
            details={"enrollment_id": enrollment_id, "status": status},
        )
        return relation

    async def list_students(
        self,
        class_id: str,
        status: str | None = None,
    ) -> ClassStudentsResponse:
        """List the relations held in a class with student names.

        Raises:
            ClassNotFoundError: If the class does not exist.
        """
        await self._get_class(class_id)
        relations = await self._catalog.list_relations(class_id, status=status)
        applications = await self._enrollments.get_many(
            [relation.enrollment_id for relation in relations]
        )

        students = []
        for relation in relations:
            application = applications.get(relation.enrollment_id)
            students.append(
                ClassStudentResponse(
                    id=relation.id,
                    class_id=relation.class_id,
                    enrollment_id=relation.enrollment_id,
                    enrollment_date=relation.enrollment_date,
                    status=relation.status,
                    student_first_name=application.student_first_name if application else None,
                    student_last_name=application.student_last_name if application else None,
                )
            )
        return ClassStudentsResponse(class_id=class_id, students=students, total=len(students))

    async def _get_class(self, class_id: str) -> ClassDefinition:
        class_ = await self._catalog.get(class_id)
        if class_ is None:
            raise ClassNotFoundError(f"Class {class_id} not found")
        return class_

    @staticmethod
    def _to_response(class_: ClassDefinition, enrollment_count: int) -> ClassResponse:
        response = ClassResponse.model_validate(class_)
        response.enrollment_count = enrollment_count
        response.available_spots = max(class_.capacity - enrollment_count, 0)
        return response
