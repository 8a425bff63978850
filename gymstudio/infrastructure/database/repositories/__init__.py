# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Repositories over the studio database.

Every repository wraps SQLAlchemy failures into StoreError.
"""

from gymstudio.infrastructure.database.repositories.audit import AuditRepository
from gymstudio.infrastructure.database.repositories.base import BaseRepository
from gymstudio.infrastructure.database.repositories.class_catalog import ClassCatalogRepository
from gymstudio.infrastructure.database.repositories.enrollment import EnrollmentRepository
from gymstudio.infrastructure.database.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "EnrollmentRepository",
    "ClassCatalogRepository",
    "AuditRepository",
    "UserRepository",
]
