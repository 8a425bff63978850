# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API tests for the class catalog endpoints."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from gymstudio.api.dependencies import get_class_service
from gymstudio.domains.errors import (
    AlreadyEnrolledError,
    ClassFullError,
    ClassNotFoundError,
    EnrollmentNotFoundError,
    NotEnrolledError,
    ValidationError,
)
from gymstudio.infrastructure.database.models import ClassEnrollment
from gymstudio.models.class_ import ClassResponse, ClassStudentsResponse

pytestmark = pytest.mark.integration

NOW = datetime(2024, 9, 1, tzinfo=timezone.utc)


def _class_response(**overrides) -> ClassResponse:
    fields = {
        "id": "class-1",
        "name": "Saturday Tumbling",
        "program_type": "girls_recreational",
        "day_of_week": "saturday",
        "start_time": "09:00",
        "end_time": "10:00",
        "capacity": 10,
        "is_active": True,
        "created_at": NOW,
        "updated_at": NOW,
        "enrollment_count": 4,
        "available_spots": 6,
    }
    fields.update(overrides)
    return ClassResponse(**fields)


def _relation(status: str = "active") -> ClassEnrollment:
    return ClassEnrollment(
        id="rel-1",
        class_id="class-1",
        enrollment_id="enr-1",
        enrollment_date=NOW,
        status=status,
    )


@pytest.fixture
def class_service(app) -> AsyncMock:
    """Replace the class service with a mock."""
    service = AsyncMock()
    app.dependency_overrides[get_class_service] = lambda: service
    return service


class TestCatalog:
    """Tests for reading the catalog."""

    def test_list_is_public(self, client, class_service):
        """Test anyone can browse the catalog."""
        class_service.list_classes.return_value = [_class_response()]

        response = client.get("/api/v1/classes", params={"day": "saturday"})

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        assert body["classes"][0]["available_spots"] == 6
        class_service.list_classes.assert_awaited_once_with(
            day_of_week="saturday", include_inactive=False
        )

    def test_get_missing_class(self, client, class_service):
        """Test an unknown class returns 404."""
        class_service.get_class.side_effect = ClassNotFoundError("missing")

        assert client.get("/api/v1/classes/missing").status_code == 404


class TestManageClasses:
    """Tests for admin class management."""

    def test_create(self, client, class_service, admin_headers):
        """Test admins can create a class."""
        class_service.create_class.return_value = _class_response(enrollment_count=0)

        response = client.post(
            "/api/v1/classes",
            json={
                "name": "Saturday Tumbling",
                "program_type": "girls_recreational",
                "day_of_week": "saturday",
                "start_time": "09:00",
                "end_time": "10:00",
            },
            headers=admin_headers,
        )

        assert response.status_code == 201
        assert class_service.create_class.await_args.kwargs["created_by"] == "admin-1"

    def test_create_requires_admin(self, client, class_service, user_headers):
        """Test non-admins cannot create classes."""
        response = client.post("/api/v1/classes", json={}, headers=user_headers)

        assert response.status_code == 403

    def test_create_rejects_zero_capacity(self, client, class_service, admin_headers):
        """Test a class without seats is refused."""
        response = client.post(
            "/api/v1/classes",
            json={
                "name": "Empty",
                "program_type": "ninja",
                "day_of_week": "monday",
                "start_time": "09:00",
                "end_time": "10:00",
                "capacity": 0,
            },
            headers=admin_headers,
        )

        assert response.status_code == 422
        class_service.create_class.assert_not_called()

    def test_capacity_below_seats_taken(self, client, class_service, admin_headers):
        """Test lowering capacity under the seats taken returns 400."""
        class_service.update_class.side_effect = ValidationError("below seats taken")

        response = client.patch(
            "/api/v1/classes/class-1", json={"capacity": 2}, headers=admin_headers
        )

        assert response.status_code == 400

    @pytest.mark.parametrize("field", ["capacity", "name", "start_time", "is_active"])
    def test_update_null_required_column(self, client, class_service, admin_headers, field):
        """Test clearing a required column is a validation error, not a store failure."""
        response = client.patch(
            "/api/v1/classes/class-1", json={field: None}, headers=admin_headers
        )

        assert response.status_code == 422
        class_service.update_class.assert_not_called()

    def test_deactivate(self, client, class_service, admin_headers):
        """Test deleting a class deactivates it."""
        class_service.deactivate_class.return_value = _class_response(is_active=False)

        response = client.delete("/api/v1/classes/class-1", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["is_active"] is False


class TestClassStudents:
    """Tests for seating and withdrawing students."""

    def test_enroll(self, client, class_service, admin_headers):
        """Test a student is seated."""
        class_service.enroll_student.return_value = _relation()

        response = client.post(
            "/api/v1/classes/class-1/students",
            json={"enrollment_id": "enr-1"},
            headers=admin_headers,
        )

        assert response.status_code == 201
        assert response.json()["status"] == "active"
        class_service.enroll_student.assert_awaited_once_with(
            "class-1", "enr-1", enrolled_by="admin-1"
        )

    @pytest.mark.parametrize(
        ("error", "expected"),
        [
            (ClassNotFoundError("missing"), 404),
            (EnrollmentNotFoundError("missing"), 404),
            (ClassFullError("full"), 409),
            (AlreadyEnrolledError("seated"), 409),
            (ValidationError("inactive"), 400),
        ],
    )
    def test_enroll_errors(self, client, class_service, admin_headers, error, expected):
        """Test seating failures map to their status codes."""
        class_service.enroll_student.side_effect = error

        response = client.post(
            "/api/v1/classes/class-1/students",
            json={"enrollment_id": "enr-1"},
            headers=admin_headers,
        )

        assert response.status_code == expected

    def test_withdraw_defaults_to_cancelled(self, client, class_service, admin_headers):
        """Test withdrawing without a body cancels the seat."""
        class_service.withdraw_student.return_value = _relation("cancelled")

        response = client.post(
            "/api/v1/classes/class-1/students/enr-1/withdraw", headers=admin_headers
        )

        assert response.status_code == 200
        class_service.withdraw_student.assert_awaited_once_with(
            "class-1", "enr-1", "cancelled", withdrawn_by="admin-1"
        )

    def test_withdraw_not_enrolled(self, client, class_service, admin_headers):
        """Test withdrawing a student without a seat returns 404."""
        class_service.withdraw_student.side_effect = NotEnrolledError("no seat")

        response = client.post(
            "/api/v1/classes/class-1/students/enr-1/withdraw",
            json={"status": "paused"},
            headers=admin_headers,
        )

        assert response.status_code == 404

    def test_list_students(self, client, class_service, admin_headers):
        """Test admins can list a class roster."""
        class_service.list_students.return_value = ClassStudentsResponse(
            class_id="class-1", students=[], total=0
        )

        response = client.get(
            "/api/v1/classes/class-1/students",
            params={"status": "active"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        class_service.list_students.assert_awaited_once_with("class-1", status="active")
