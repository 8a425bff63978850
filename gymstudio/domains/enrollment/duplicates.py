# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Duplicate detection for enrollment submissions.

A submission is a duplicate when an application already exists with the
same guardian email and the same student first and last name, compared
case-insensitively after trimming. Siblings under one email are not
duplicates.
"""

import logging

from gymstudio.infrastructure.database.models import EnrollmentApplication
from gymstudio.infrastructure.database.repositories import EnrollmentRepository
from gymstudio.models.common import normalize_email

logger = logging.getLogger(__name__)


def _normalize_name(value: str) -> str:
    return value.strip().casefold()


class DuplicateDetector:
    """Read-only check against prior applications.

    Attributes:
        _enrollments: Enrollment application store.
    """

    def __init__(self, enrollments: EnrollmentRepository) -> None:
        self._enrollments = enrollments

    async def find_duplicate(
        self,
        first_name: str,
        last_name: str,
        parent_email: str,
    ) -> EnrollmentApplication | None:
        """Find a prior application for the same child under the same email.

        Every application for the email is scanned, whatever its status.

        Args:
            first_name: Student first name.
            last_name: Student last name.
            parent_email: Guardian email.

        Returns:
            The first matching application, or None.

        Raises:
            StoreError: If the store query fails.
        """
        first = _normalize_name(first_name)
        last = _normalize_name(last_name)

        for application in await self._enrollments.find_by_parent_email(
            normalize_email(parent_email)
        ):
            if (
                _normalize_name(application.student_first_name) == first
                and _normalize_name(application.student_last_name) == last
            ):
                logger.debug("Duplicate application found: %s", application.id)
                return application
        return None

    async def is_duplicate(self, first_name: str, last_name: str, parent_email: str) -> bool:
        """Check whether the child is already enrolled under the email."""
        return await self.find_duplicate(first_name, last_name, parent_email) is not None
