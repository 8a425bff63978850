# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pydantic request and response models for the HTTP API."""

from gymstudio.models.auth import LoginRequest, RegisterRequest, TokenResponse, UserResponse
from gymstudio.models.class_ import (
    ClassCreateRequest,
    ClassListResponse,
    ClassResponse,
    ClassStudentResponse,
    ClassStudentsResponse,
    ClassUpdateRequest,
    EnrollStudentRequest,
    WithdrawStudentRequest,
)
from gymstudio.models.common import (
    AuditOutcome,
    ClassEnrollmentStatus,
    DayOfWeek,
    EnrollmentStatus,
    PaymentMethod,
    ProgramType,
    SuccessResponse,
    UserRole,
    normalize_email,
    sanitize_text,
)
from gymstudio.models.enrollment import (
    EnrollmentCreateRequest,
    EnrollmentCreateResponse,
    EnrollmentDetail,
    EnrollmentListResponse,
    EnrollmentSummary,
    StatusUpdateRequest,
    StatusUpdateResponse,
)

__all__ = [
    # Common
    "ProgramType",
    "EnrollmentStatus",
    "ClassEnrollmentStatus",
    "PaymentMethod",
    "DayOfWeek",
    "UserRole",
    "AuditOutcome",
    "SuccessResponse",
    "sanitize_text",
    "normalize_email",
    # Enrollment
    "EnrollmentCreateRequest",
    "EnrollmentCreateResponse",
    "EnrollmentSummary",
    "EnrollmentDetail",
    "EnrollmentListResponse",
    "StatusUpdateRequest",
    "StatusUpdateResponse",
    # Classes
    "ClassCreateRequest",
    "ClassUpdateRequest",
    "ClassResponse",
    "ClassListResponse",
    "EnrollStudentRequest",
    "WithdrawStudentRequest",
    "ClassStudentResponse",
    "ClassStudentsResponse",
    # Auth
    "LoginRequest",
    "RegisterRequest",
    "UserResponse",
    "TokenResponse",
]
