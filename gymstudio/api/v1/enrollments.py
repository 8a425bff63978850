# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment application endpoints.

This module provides endpoints for:
- POST / - Public enrollment form submission
- GET / - List applications (admin)
- GET /{enrollment_id} - Application detail (admin)
- PATCH /{enrollment_id}/status - Approve or reject (admin)
- DELETE /{enrollment_id} - Delete a pending application (admin)
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from gymstudio.api.dependencies import (
    get_enrollment_rate_limiter,
    get_enrollment_service,
    require_admin,
)
from gymstudio.api.middleware.auth import CurrentUser
from gymstudio.api.middleware.rate_limit import RateLimiter, get_ip_only
from gymstudio.domains.enrollment.service import EnrollmentService
from gymstudio.domains.errors import (
    DuplicateEnrollmentError,
    EnrollmentInUseError,
    EnrollmentNotDeletableError,
    EnrollmentNotFoundError,
    InvalidStatusError,
)
from gymstudio.infrastructure.cache import RedisError
from gymstudio.models.common import EnrollmentStatus, SuccessResponse
from gymstudio.models.enrollment import (
    EnrollmentCreateRequest,
    EnrollmentCreateResponse,
    EnrollmentDetail,
    EnrollmentListResponse,
    EnrollmentSummary,
    StatusUpdateRequest,
    StatusUpdateResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=EnrollmentCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit an enrollment application",
)
async def submit_enrollment(
    data: EnrollmentCreateRequest,
    request: Request,
    enrollment_service: EnrollmentService = Depends(get_enrollment_service),
    rate_limiter: RateLimiter = Depends(get_enrollment_rate_limiter),
) -> EnrollmentCreateResponse:
    """Submit a new enrollment application.

    Raises:
        HTTPException: 429 when the client exceeded its submission quota,
            409 when the student is already enrolled under this email.
    """
    client_ip = get_ip_only(request)
    try:
        allowed = await rate_limiter.check(f"ip:{client_ip}")
    except RedisError as e:
        logger.error("Rate limiter unavailable: %s", str(e))
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service temporarily unavailable",
        )
    if not allowed:
        logger.warning("Enrollment rate limit exceeded for ip:%s", client_ip)
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many enrollment submissions. Please try again later.",
            headers={"Retry-After": str(rate_limiter.window_seconds)},
        )

    try:
        application = await enrollment_service.submit(data, client_ip=client_ip)
    except DuplicateEnrollmentError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": str(e), "existing_id": e.existing_id},
        )

    return EnrollmentCreateResponse(id=application.id)


@router.get(
    "",
    response_model=EnrollmentListResponse,
    summary="List enrollment applications",
)
async def list_enrollments(
    status_filter: EnrollmentStatus | None = Query(None, alias="status"),
    limit: int | None = Query(None, ge=1, le=500),
    offset: int = Query(0, ge=0),
    current_user: CurrentUser = Depends(require_admin),
    enrollment_service: EnrollmentService = Depends(get_enrollment_service),
) -> EnrollmentListResponse:
    """List applications, newest submission first."""
    applications = await enrollment_service.list_enrollments(
        status=status_filter.value if status_filter else None,
        limit=limit,
        offset=offset,
    )
    return EnrollmentListResponse(
        enrollments=[EnrollmentSummary.model_validate(a) for a in applications],
        total=len(applications),
    )


@router.get(
    "/{enrollment_id}",
    response_model=EnrollmentDetail,
    summary="Get an enrollment application",
)
async def get_enrollment(
    enrollment_id: str,
    current_user: CurrentUser = Depends(require_admin),
    enrollment_service: EnrollmentService = Depends(get_enrollment_service),
) -> EnrollmentDetail:
    """Get the full application, including medical details, for review."""
    try:
        return await enrollment_service.get_enrollment_detail(enrollment_id)
    except EnrollmentNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Enrollment not found",
        )


@router.patch(
    "/{enrollment_id}/status",
    response_model=StatusUpdateResponse,
    summary="Approve or reject an enrollment application",
)
async def update_enrollment_status(
    enrollment_id: str,
    data: StatusUpdateRequest,
    current_user: CurrentUser = Depends(require_admin),
    enrollment_service: EnrollmentService = Depends(get_enrollment_service),
) -> StatusUpdateResponse:
    """Apply an admin decision to a pending application.

    Approval places the student in the best eligible class when one has
    room. Deciding an application that is no longer pending changes
    nothing and reports ``applied: false``.
    """
    try:
        result = await enrollment_service.update_status(
            enrollment_id,
            data.status,
            actor_id=current_user.id,
        )
    except InvalidStatusError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    except EnrollmentNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Enrollment not found",
        )

    return StatusUpdateResponse(
        applied=result.applied,
        status=result.status,
        assigned_class_id=result.assigned_class_id,
    )


@router.delete(
    "/{enrollment_id}",
    response_model=SuccessResponse,
    summary="Delete a pending enrollment application",
)
async def delete_enrollment(
    enrollment_id: str,
    current_user: CurrentUser = Depends(require_admin),
    enrollment_service: EnrollmentService = Depends(get_enrollment_service),
) -> SuccessResponse:
    """Delete a pending application that holds no active class seat."""
    try:
        await enrollment_service.delete(enrollment_id, actor_id=current_user.id)
    except (EnrollmentNotFoundError, EnrollmentNotDeletableError):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Enrollment not found or not pending",
        )
    except EnrollmentInUseError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        )

    return SuccessResponse(message="Enrollment deleted")
