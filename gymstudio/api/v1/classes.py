# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Class catalog API endpoints.

This module provides endpoints for:
- GET / - List classes with enrollment counts (public)
- GET /{class_id} - Get class details (public)
- POST / - Create class (admin)
- PATCH /{class_id} - Update class (admin)
- DELETE /{class_id} - Deactivate class (admin)
- POST /{class_id}/students - Seat an application directly (admin)
- POST /{class_id}/students/{enrollment_id}/withdraw - Free a seat (admin)
- GET /{class_id}/students - List seated students (admin)
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from gymstudio.api.dependencies import get_class_service, require_admin
from gymstudio.api.middleware.auth import CurrentUser
from gymstudio.domains.class_.service import ClassService
from gymstudio.domains.errors import (
    AlreadyEnrolledError,
    ClassFullError,
    ClassNotFoundError,
    EnrollmentNotFoundError,
    NotEnrolledError,
    ValidationError,
)
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
from gymstudio.models.common import ClassEnrollmentStatus

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "",
    response_model=ClassListResponse,
    summary="List classes",
)
async def list_classes(
    day: str | None = Query(None, description="Filter by day of week"),
    include_inactive: bool = Query(False),
    class_service: ClassService = Depends(get_class_service),
) -> ClassListResponse:
    """List classes in catalog order with seat availability."""
    classes = await class_service.list_classes(
        day_of_week=day,
        include_inactive=include_inactive,
    )
    return ClassListResponse(classes=classes, total=len(classes))


@router.get(
    "/{class_id}",
    response_model=ClassResponse,
    summary="Get class details",
)
async def get_class(
    class_id: str,
    class_service: ClassService = Depends(get_class_service),
) -> ClassResponse:
    """Get a class with its enrollment count."""
    try:
        return await class_service.get_class(class_id)
    except ClassNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Class not found",
        )


@router.post(
    "",
    response_model=ClassResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a class",
)
async def create_class(
    data: ClassCreateRequest,
    current_user: CurrentUser = Depends(require_admin),
    class_service: ClassService = Depends(get_class_service),
) -> ClassResponse:
    """Add a class to the catalog."""
    return await class_service.create_class(data, created_by=current_user.id)


@router.patch(
    "/{class_id}",
    response_model=ClassResponse,
    summary="Update a class",
)
async def update_class(
    class_id: str,
    data: ClassUpdateRequest,
    current_user: CurrentUser = Depends(require_admin),
    class_service: ClassService = Depends(get_class_service),
) -> ClassResponse:
    """Apply a partial update to a class.

    Raises:
        HTTPException: 404 if the class is missing, 400 if the update would
            invert the age bounds or drop capacity below the seats taken.
    """
    try:
        return await class_service.update_class(class_id, data, updated_by=current_user.id)
    except ClassNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Class not found",
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )


@router.delete(
    "/{class_id}",
    response_model=ClassResponse,
    summary="Deactivate a class",
)
async def deactivate_class(
    class_id: str,
    current_user: CurrentUser = Depends(require_admin),
    class_service: ClassService = Depends(get_class_service),
) -> ClassResponse:
    """Soft-deactivate a class. Seated students keep their relations."""
    try:
        return await class_service.deactivate_class(class_id, deactivated_by=current_user.id)
    except ClassNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Class not found",
        )


@router.post(
    "/{class_id}/students",
    response_model=ClassStudentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Enroll a student in a class",
)
async def enroll_student(
    class_id: str,
    data: EnrollStudentRequest,
    current_user: CurrentUser = Depends(require_admin),
    class_service: ClassService = Depends(get_class_service),
) -> ClassStudentResponse:
    """Seat an application in a class.

    Raises:
        HTTPException: 404 if the class or application is missing, 409 if
            the class is full or the student already holds a seat there.
    """
    try:
        relation = await class_service.enroll_student(
            class_id,
            data.enrollment_id,
            enrolled_by=current_user.id,
        )
    except ClassNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Class not found",
        )
    except EnrollmentNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Enrollment not found",
        )
    except ClassFullError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Class is full",
        )
    except AlreadyEnrolledError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Student is already enrolled in this class",
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    return ClassStudentResponse.model_validate(relation)


@router.post(
    "/{class_id}/students/{enrollment_id}/withdraw",
    response_model=ClassStudentResponse,
    summary="Withdraw a student from a class",
)
async def withdraw_student(
    class_id: str,
    enrollment_id: str,
    data: WithdrawStudentRequest | None = None,
    current_user: CurrentUser = Depends(require_admin),
    class_service: ClassService = Depends(get_class_service),
) -> ClassStudentResponse:
    """Pause or cancel a student's seat, freeing it for others."""
    data = data or WithdrawStudentRequest()
    try:
        relation = await class_service.withdraw_student(
            class_id,
            enrollment_id,
            data.status,
            withdrawn_by=current_user.id,
        )
    except NotEnrolledError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Student is not enrolled in this class",
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    return ClassStudentResponse.model_validate(relation)


@router.get(
    "/{class_id}/students",
    response_model=ClassStudentsResponse,
    summary="List students in a class",
)
async def list_students(
    class_id: str,
    status_filter: ClassEnrollmentStatus | None = Query(None, alias="status"),
    current_user: CurrentUser = Depends(require_admin),
    class_service: ClassService = Depends(get_class_service),
) -> ClassStudentsResponse:
    """List the students seated in a class, oldest seat first."""
    try:
        return await class_service.list_students(
            class_id,
            status=status_filter.value if status_filter else None,
        )
    except ClassNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Class not found",
        )
