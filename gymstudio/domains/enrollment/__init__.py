# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment domain: submissions, duplicate detection and review workflow."""

from gymstudio.domains.enrollment.duplicates import DuplicateDetector
from gymstudio.domains.enrollment.service import (
    REVIEW_STATUSES,
    EnrollmentService,
    StatusUpdateResult,
)

__all__ = [
    "DuplicateDetector",
    "EnrollmentService",
    "StatusUpdateResult",
    "REVIEW_STATUSES",
]
