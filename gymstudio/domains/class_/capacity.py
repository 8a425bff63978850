# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Capacity guard for class seats.

Active class enrollments never exceed a class's capacity. The guard
counts and checks seats for display and ranking, but the only way to
take a seat is ``reserve_seat``, which performs a conditional increment
in the same transaction as the relation write. A stale ``has_capacity``
result therefore cannot overfill a class.
"""

import logging

from gymstudio.domains.errors import ClassNotFoundError, ValidationError
from gymstudio.infrastructure.database.models import ClassEnrollment
from gymstudio.infrastructure.database.repositories import ClassCatalogRepository
from gymstudio.models.common import ClassEnrollmentStatus

logger = logging.getLogger(__name__)

RELEASE_STATUSES = frozenset({ClassEnrollmentStatus.PAUSED.value, ClassEnrollmentStatus.CANCELLED.value})


class CapacityGuard:
    """Counts, checks and reserves class seats.

    Attributes:
        _catalog: Class catalog store.
    """

    def __init__(self, catalog: ClassCatalogRepository) -> None:
        self._catalog = catalog

    async def count_active(self, class_id: str) -> int:
        """Count active enrollment relations for a class."""
        return await self._catalog.count_active(class_id)

    async def has_capacity(self, class_id: str) -> bool:
        """Check whether a class has a free seat right now.

        The answer can be stale by the time it is used. Use
        ``reserve_seat`` to actually take the seat.

        Raises:
            ClassNotFoundError: If the class does not exist.
        """
        class_ = await self._catalog.get(class_id)
        if class_ is None:
            raise ClassNotFoundError(f"Class {class_id} not found")
        return await self.count_active(class_id) < class_.capacity

    async def reserve_seat(self, class_id: str, enrollment_id: str) -> ClassEnrollment:
        """Atomically take a seat and write the active relation.

        Args:
            class_id: Class to seat the student in.
            enrollment_id: Application taking the seat.

        Returns:
            The active relation.

        Raises:
            ClassFullError: If the class has no seat left.
            AlreadyEnrolledError: If the application already holds a seat here.
            ClassNotFoundError: If the class does not exist.
            StoreError: If the store fails.
        """
        relation = await self._catalog.reserve_seat(class_id, enrollment_id)
        logger.info("Seat reserved: class=%s, enrollment=%s", class_id, enrollment_id)
        return relation

    async def release_seat(
        self,
        class_id: str,
        enrollment_id: str,
        status: str = ClassEnrollmentStatus.CANCELLED.value,
    ) -> ClassEnrollment:
        """Free a seat by pausing or cancelling the relation.

        Raises:
            ValidationError: If ``status`` is not paused or cancelled.
            NotEnrolledError: If there is no active relation.
            StoreError: If the store fails.
        """
        if status not in RELEASE_STATUSES:
            raise ValidationError(f"Cannot release a seat to status '{status}'")
        relation = await self._catalog.release_seat(class_id, enrollment_id, status)
        logger.info(
            "Seat released: class=%s, enrollment=%s, status=%s",
            class_id,
            enrollment_id,
            status,
        )
        return relation

    async def find_active_seat(self, enrollment_id: str) -> ClassEnrollment | None:
        """Get the active relation held by an application, if any."""
        return await self._catalog.find_active_relation(enrollment_id)
