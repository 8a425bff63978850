# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment service: submissions and the review workflow.

This module provides the EnrollmentService class for:
- Accepting public submissions after duplicate detection
- Listing and reading applications for admins
- Approving or rejecting pending applications, with automatic class
  assignment on approval
- Deleting pending applications

Status moves from pending to approved or rejected exactly once. The
transition is a conditional write on ``status = 'pending'``, so a second
reviewer racing the first gets a no-op instead of a second transition.
"""

from __future__ import annotations

import logging
from typing import Any, NamedTuple

from sqlalchemy.ext.asyncio import AsyncSession

from gymstudio.domains.audit.service import AuditService
from gymstudio.domains.class_.capacity import CapacityGuard
from gymstudio.domains.class_.matcher import ClassMatcher
from gymstudio.domains.enrollment.duplicates import DuplicateDetector
from gymstudio.domains.errors import (
    AlreadyEnrolledError,
    ClassFullError,
    DuplicateEnrollmentError,
    EnrollmentInUseError,
    EnrollmentNotDeletableError,
    EnrollmentNotFoundError,
    InvalidStatusError,
    StoreError,
)
from gymstudio.infrastructure.database.models import EnrollmentApplication
from gymstudio.infrastructure.database.repositories import (
    ClassCatalogRepository,
    EnrollmentRepository,
)
from gymstudio.models.common import AuditOutcome, EnrollmentStatus
from gymstudio.models.enrollment import EnrollmentCreateRequest, EnrollmentDetail

logger = logging.getLogger(__name__)

REVIEW_STATUSES = frozenset({EnrollmentStatus.APPROVED.value, EnrollmentStatus.REJECTED.value})

_RESOURCE = "enrollment"


class StatusUpdateResult(NamedTuple):
    """Outcome of a review decision.

    Attributes:
        applied: False when the application was no longer pending.
        status: Status of the application after the call.
        assigned_class_id: Class seated on approval, if any.
    """

    applied: bool
    status: str
    assigned_class_id: str | None = None


class EnrollmentService:
    """Service for enrollment submissions and review.

    Collaborators are built from the session unless passed in.

    Attributes:
        db: Async database session.
    """

    def __init__(
        self,
        db: AsyncSession,
        *,
        enrollments: EnrollmentRepository | None = None,
        detector: DuplicateDetector | None = None,
        guard: CapacityGuard | None = None,
        matcher: ClassMatcher | None = None,
        audit: AuditService | None = None,
    ) -> None:
        self.db = db
        self._enrollments = enrollments or EnrollmentRepository(db)
        self._detector = detector or DuplicateDetector(self._enrollments)
        if guard is None or matcher is None:
            catalog = ClassCatalogRepository(db)
            guard = guard or CapacityGuard(catalog)
            matcher = matcher or ClassMatcher(catalog, guard)
        self._guard = guard
        self._matcher = matcher
        self._audit = audit or AuditService(db)

    async def submit(
        self,
        request: EnrollmentCreateRequest,
        client_ip: str | None = None,
    ) -> EnrollmentApplication:
        """Accept a public enrollment submission.

        Args:
            request: Validated and sanitised form data.
            client_ip: Submitting client address for the audit trail.

        Returns:
            The new pending application.

        Raises:
            DuplicateEnrollmentError: If the child is already enrolled
                under the same email.
            StoreError: If the store fails.
        """
        existing = await self._find_duplicate(request)
        if existing is not None:
            logger.info("Duplicate submission rejected, existing=%s", existing.id)
            raise DuplicateEnrollmentError(
                "An enrollment for this student already exists under this email address",
                existing_id=existing.id,
            )

        try:
            application = await self._enrollments.create(**request.model_dump())
        except DuplicateEnrollmentError as e:
            # Lost a race with a concurrent submission of the same child
            existing = await self._find_duplicate(request)
            e.existing_id = existing.id if existing is not None else None
            logger.info("Concurrent duplicate submission rejected, existing=%s", e.existing_id)
            raise

        logger.info(
            "Enrollment submitted: id=%s, program=%s",
            application.id,
            application.program_type,
        )
        await self._audit.record(
            action="enrollment.submit",
            resource=_RESOURCE,
            outcome=AuditOutcome.SUCCESS,
            target_id=application.id,
            details={"program_type": application.program_type},
            ip_address=client_ip,
        )
        return application

    async def _find_duplicate(
        self, request: EnrollmentCreateRequest
    ) -> EnrollmentApplication | None:
        return await self._detector.find_duplicate(
            request.student_first_name,
            request.student_last_name,
            request.parent_email,
        )

    async def list_enrollments(
        self,
        status: str | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[EnrollmentApplication]:
        """List applications, newest submission first."""
        return await self._enrollments.list_all(status=status, limit=limit, offset=offset)

    async def get_enrollment(self, enrollment_id: str) -> EnrollmentApplication:
        """Get an application.

        Raises:
            EnrollmentNotFoundError: If the application does not exist.
        """
        application = await self._enrollments.get(enrollment_id)
        if application is None:
            raise EnrollmentNotFoundError(f"Enrollment {enrollment_id} not found")
        return application

    async def get_enrollment_detail(self, enrollment_id: str) -> EnrollmentDetail:
        """Get the full admin view of an application, including its class."""
        application = await self.get_enrollment(enrollment_id)
        seat = await self._guard.find_active_seat(enrollment_id)
        return EnrollmentDetail.from_application(
            application,
            class_id=seat.class_id if seat is not None else None,
        )

    async def update_status(
        self,
        enrollment_id: str,
        new_status: str,
        actor_id: str | None,
    ) -> StatusUpdateResult:
        """Approve or reject a pending application.

        On approval the best eligible class is chosen and a seat reserved.
        Finding no class is not an error; the application stays approved.

        Args:
            enrollment_id: Application id.
            new_status: ``approved`` or ``rejected``.
            actor_id: Admin performing the review.

        Returns:
            StatusUpdateResult describing what happened.

        Raises:
            InvalidStatusError: If ``new_status`` is not a review status.
            EnrollmentNotFoundError: If the application does not exist.
            StoreError: If the store fails.
        """
        action = f"{_RESOURCE}.status_update"

        if new_status not in REVIEW_STATUSES:
            await self._audit.record(
                action=action,
                resource=_RESOURCE,
                outcome=AuditOutcome.FAILURE,
                actor_id=actor_id,
                target_id=enrollment_id,
                details={"to": new_status, "error": "invalid_status"},
            )
            raise InvalidStatusError(
                f"Invalid status '{new_status}'. Must be approved or rejected"
            )

        try:
            changed = await self._enrollments.update_status_if_pending(enrollment_id, new_status)
            application = await self._enrollments.get(enrollment_id)
        except StoreError:
            await self._audit_failure(action, actor_id, enrollment_id, new_status, "store_error")
            raise

        if application is None:
            await self._audit_failure(action, actor_id, enrollment_id, new_status, "not_found")
            raise EnrollmentNotFoundError(f"Enrollment {enrollment_id} not found")

        if not changed:
            logger.info(
                "Status update ignored, enrollment %s is already %s",
                enrollment_id,
                application.status,
            )
            await self._audit.record(
                action=action,
                resource=_RESOURCE,
                outcome=AuditOutcome.NOOP,
                actor_id=actor_id,
                target_id=enrollment_id,
                details={"to": new_status, "current": application.status},
            )
            return StatusUpdateResult(applied=False, status=application.status)

        logger.info("Enrollment %s moved to %s by %s", enrollment_id, new_status, actor_id)

        details: dict[str, Any] = {"from": EnrollmentStatus.PENDING.value, "to": new_status}
        assigned_class_id = None
        if new_status == EnrollmentStatus.APPROVED.value:
            try:
                assigned_class_id = await self._assign_class(application)
            except StoreError as e:
                logger.error("Class assignment failed for enrollment %s: %s", enrollment_id, e)
                details["assignment_error"] = str(e)
            details["assigned_class_id"] = assigned_class_id

        await self._audit.record(
            action=action,
            resource=_RESOURCE,
            outcome=AuditOutcome.SUCCESS,
            actor_id=actor_id,
            target_id=enrollment_id,
            details=details,
        )
        return StatusUpdateResult(
            applied=True,
            status=new_status,
            assigned_class_id=assigned_class_id,
        )

    async def delete(self, enrollment_id: str, actor_id: str | None) -> None:
        """Delete a pending application.

        Raises:
            EnrollmentNotFoundError: If the application does not exist.
            EnrollmentNotDeletableError: If it is no longer pending.
            EnrollmentInUseError: If it still holds an active class seat.
            StoreError: If the store fails.
        """
        action = f"{_RESOURCE}.delete"
        try:
            deleted = await self._enrollments.delete_if_pending(enrollment_id)
            application = None if deleted else await self._enrollments.get(enrollment_id)
        except StoreError:
            await self._audit_failure(action, actor_id, enrollment_id, None, "store_error")
            raise

        if not deleted:
            if application is None:
                error: Exception = EnrollmentNotFoundError(f"Enrollment {enrollment_id} not found")
                reason = "not_found"
            elif application.status != EnrollmentStatus.PENDING.value:
                error = EnrollmentNotDeletableError(
                    f"Enrollment {enrollment_id} is {application.status} and cannot be deleted"
                )
                reason = "not_pending"
            else:
                seat = await self._guard.find_active_seat(enrollment_id)
                error = EnrollmentInUseError(
                    f"Enrollment {enrollment_id} holds an active class seat",
                    existing_id=seat.id if seat is not None else None,
                )
                reason = "active_seat"
            await self._audit_failure(action, actor_id, enrollment_id, None, reason)
            raise error

        logger.info("Enrollment %s deleted by %s", enrollment_id, actor_id)
        await self._audit.record(
            action=action,
            resource=_RESOURCE,
            outcome=AuditOutcome.SUCCESS,
            actor_id=actor_id,
            target_id=enrollment_id,
        )

    async def _assign_class(self, application: EnrollmentApplication) -> str | None:
        """Seat an approved application in the best class with room.

        Ranked candidates are tried in order, so a class that fills up
        between ranking and reservation is skipped.
        """
        seat = await self._guard.find_active_seat(application.id)
        if seat is not None:
            return seat.class_id

        ranked = await self._matcher.rank_classes(
            application.program_type,
            application.student_date_of_birth,
        )
        for class_ in ranked:
            try:
                await self._guard.reserve_seat(class_.id, application.id)
            except ClassFullError:
                logger.info("Class %s filled before reservation, trying next", class_.id)
                continue
            except AlreadyEnrolledError:
                return class_.id
            logger.info("Enrollment %s assigned to class %s", application.id, class_.id)
            return class_.id

        logger.info(
            "No class with room for enrollment %s (program=%s)",
            application.id,
            application.program_type,
        )
        return None

    async def _audit_failure(
        self,
        action: str,
        actor_id: str | None,
        enrollment_id: str,
        new_status: str | None,
        reason: str,
    ) -> None:
        details: dict[str, Any] = {"error": reason}
        if new_status is not None:
            details["to"] = new_status
        await self._audit.record(
            action=action,
            resource=_RESOURCE,
            outcome=AuditOutcome.FAILURE,
            actor_id=actor_id,
            target_id=enrollment_id,
            details=details,
        )
