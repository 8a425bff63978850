# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy models for the studio database."""

from gymstudio.infrastructure.database.models.audit import AuditLog
from gymstudio.infrastructure.database.models.base import (
    Base,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
    new_id,
)
from gymstudio.infrastructure.database.models.class_ import ClassDefinition, ClassEnrollment
from gymstudio.infrastructure.database.models.enrollment import EnrollmentApplication
from gymstudio.infrastructure.database.models.types import EncryptedString
from gymstudio.infrastructure.database.models.user import User

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    "new_id",
    "EncryptedString",
    "EnrollmentApplication",
    "ClassDefinition",
    "ClassEnrollment",
    "AuditLog",
    "User",
]
