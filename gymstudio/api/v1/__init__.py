# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

Modules:
    auth: Login, registration and current account.
    enrollments: Public enrollment submission and admin review.
    classes: Class catalog and seat management.
    users: Admin account management.
"""

from fastapi import APIRouter

from gymstudio.api.v1 import auth, classes, enrollments, users

router = APIRouter(prefix="/api/v1")

router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
router.include_router(enrollments.router, prefix="/enrollments", tags=["Enrollments"])
router.include_router(classes.router, prefix="/classes", tags=["Classes"])
router.include_router(users.router, prefix="/admin/users", tags=["Admin Users"])

__all__ = ["router"]
