# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API tests for the enrollment endpoints.

Services are replaced with mocks so these tests exercise routing,
validation, authorization and error mapping only.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from gymstudio.api.dependencies import get_enrollment_rate_limiter, get_enrollment_service
from gymstudio.api.middleware.rate_limit import InMemoryRateLimiter
from gymstudio.domains.enrollment.service import StatusUpdateResult
from gymstudio.domains.errors import (
    DuplicateEnrollmentError,
    EnrollmentInUseError,
    EnrollmentNotDeletableError,
    EnrollmentNotFoundError,
    InvalidStatusError,
)
from gymstudio.infrastructure.cache import RedisError
from gymstudio.infrastructure.database.models import EnrollmentApplication
from gymstudio.models.enrollment import EnrollmentCreateRequest, EnrollmentDetail

pytestmark = pytest.mark.integration


def _application(form, **overrides) -> EnrollmentApplication:
    fields = EnrollmentCreateRequest(**form).model_dump()
    fields.update(overrides)
    fields.setdefault("status", "pending")
    return EnrollmentApplication(
        id=fields.pop("id", "enr-1"),
        submission_date=datetime(2024, 9, 1, tzinfo=timezone.utc),
        **fields,
    )


@pytest.fixture
def enrollment_service(app) -> AsyncMock:
    """Replace the enrollment service with a mock."""
    service = AsyncMock()
    app.dependency_overrides[get_enrollment_service] = lambda: service
    return service


@pytest.fixture
def rate_limiter(app) -> InMemoryRateLimiter:
    """Install a fresh submission limiter allowing two requests."""
    limiter = InMemoryRateLimiter(max_requests=2, window_seconds=900)
    app.dependency_overrides[get_enrollment_rate_limiter] = lambda: limiter
    return limiter


class TestSubmitEnrollment:
    """Tests for POST /api/v1/enrollments."""

    def test_created(self, client, enrollment_service, rate_limiter, enrollment_form):
        """Test a valid form is accepted without authentication."""
        enrollment_service.submit.return_value = _application(enrollment_form, id="enr-42")

        response = client.post("/api/v1/enrollments", json=enrollment_form)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["id"] == "enr-42"
        request = enrollment_service.submit.await_args.args[0]
        assert request.parent_email == "sarah@example.com"

    def test_duplicate_conflict(self, client, enrollment_service, rate_limiter, enrollment_form):
        """Test a duplicate submission returns 409 with the existing id."""
        enrollment_service.submit.side_effect = DuplicateEnrollmentError(
            "already enrolled", existing_id="enr-1"
        )

        response = client.post("/api/v1/enrollments", json=enrollment_form)

        assert response.status_code == 409
        assert response.json()["detail"]["existing_id"] == "enr-1"

    def test_rate_limited(self, client, enrollment_service, rate_limiter, enrollment_form):
        """Test the third submission inside the window is refused."""
        enrollment_service.submit.return_value = _application(enrollment_form)

        for _ in range(2):
            assert client.post("/api/v1/enrollments", json=enrollment_form).status_code == 201
        response = client.post("/api/v1/enrollments", json=enrollment_form)

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "900"
        assert enrollment_service.submit.await_count == 2

    def test_limiter_unavailable(self, app, client, enrollment_service, enrollment_form):
        """Test an unreachable limiter store yields 503."""
        broken = AsyncMock()
        broken.check.side_effect = RedisError("connection refused")
        app.dependency_overrides[get_enrollment_rate_limiter] = lambda: broken

        response = client.post("/api/v1/enrollments", json=enrollment_form)

        assert response.status_code == 503
        enrollment_service.submit.assert_not_called()

    def test_invalid_form(self, client, enrollment_service, rate_limiter, enrollment_form):
        """Test a malformed form is rejected before reaching the service."""
        enrollment_form["parent_email"] = "not-an-email"

        response = client.post("/api/v1/enrollments", json=enrollment_form)

        assert response.status_code == 422
        enrollment_service.submit.assert_not_called()

    def test_terms_required(self, client, enrollment_service, rate_limiter, enrollment_form):
        """Test unaccepted terms are rejected."""
        enrollment_form["terms_accepted"] = False

        assert client.post("/api/v1/enrollments", json=enrollment_form).status_code == 422


class TestListEnrollments:
    """Tests for GET /api/v1/enrollments."""

    def test_requires_authentication(self, client, enrollment_service):
        """Test anonymous callers get 401."""
        response = client.get("/api/v1/enrollments")

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_requires_admin(self, client, enrollment_service, user_headers):
        """Test non-admin users get 403."""
        response = client.get("/api/v1/enrollments", headers=user_headers)

        assert response.status_code == 403

    def test_invalid_token(self, client, enrollment_service):
        """Test a garbage token is treated as anonymous."""
        response = client.get(
            "/api/v1/enrollments", headers={"Authorization": "Bearer not-a-token"}
        )

        assert response.status_code == 401

    def test_lists_with_filter(self, client, enrollment_service, admin_headers, enrollment_form):
        """Test admins can list applications filtered by status."""
        enrollment_service.list_enrollments.return_value = [_application(enrollment_form)]

        response = client.get(
            "/api/v1/enrollments",
            params={"status": "pending", "limit": 10},
            headers=admin_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        assert body["enrollments"][0]["student_first_name"] == "Emma"
        assert "allergies" not in body["enrollments"][0]
        enrollment_service.list_enrollments.assert_awaited_once_with(
            status="pending", limit=10, offset=0
        )

    def test_unknown_status_filter(self, client, enrollment_service, admin_headers):
        """Test an unknown status filter is rejected."""
        response = client.get(
            "/api/v1/enrollments", params={"status": "archived"}, headers=admin_headers
        )

        assert response.status_code == 422


class TestGetEnrollment:
    """Tests for GET /api/v1/enrollments/{id}."""

    def test_detail_includes_medical(
        self, client, enrollment_service, admin_headers, enrollment_form
    ):
        """Test the admin detail view carries medical information and class."""
        enrollment_service.get_enrollment_detail.return_value = EnrollmentDetail.from_application(
            _application(enrollment_form), class_id="class-1"
        )

        response = client.get("/api/v1/enrollments/enr-1", headers=admin_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["allergies"] == "Peanuts"
        assert body["class_id"] == "class-1"

    def test_not_found(self, client, enrollment_service, admin_headers):
        """Test an unknown id returns 404."""
        enrollment_service.get_enrollment_detail.side_effect = EnrollmentNotFoundError("missing")

        response = client.get("/api/v1/enrollments/missing", headers=admin_headers)

        assert response.status_code == 404


class TestUpdateStatus:
    """Tests for PATCH /api/v1/enrollments/{id}/status."""

    def test_approved_with_class(self, client, enrollment_service, admin_headers):
        """Test approval reports the assigned class."""
        enrollment_service.update_status.return_value = StatusUpdateResult(
            applied=True, status="approved", assigned_class_id="class-1"
        )

        response = client.patch(
            "/api/v1/enrollments/enr-1/status",
            json={"status": "approved"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json() == {
            "applied": True,
            "status": "approved",
            "assigned_class_id": "class-1",
        }
        enrollment_service.update_status.assert_awaited_once_with(
            "enr-1", "approved", actor_id="admin-1"
        )

    def test_noop_reported(self, client, enrollment_service, admin_headers):
        """Test deciding a reviewed application reports applied false."""
        enrollment_service.update_status.return_value = StatusUpdateResult(
            applied=False, status="rejected"
        )

        response = client.patch(
            "/api/v1/enrollments/enr-1/status",
            json={"status": "approved"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["applied"] is False
        assert response.json()["status"] == "rejected"

    def test_invalid_status(self, client, enrollment_service, admin_headers):
        """Test a non-review status returns 400."""
        enrollment_service.update_status.side_effect = InvalidStatusError("bad status")

        response = client.patch(
            "/api/v1/enrollments/enr-1/status",
            json={"status": "pending"},
            headers=admin_headers,
        )

        assert response.status_code == 400

    def test_not_found(self, client, enrollment_service, admin_headers):
        """Test an unknown id returns 404."""
        enrollment_service.update_status.side_effect = EnrollmentNotFoundError("missing")

        response = client.patch(
            "/api/v1/enrollments/missing/status",
            json={"status": "approved"},
            headers=admin_headers,
        )

        assert response.status_code == 404

    def test_requires_admin(self, client, enrollment_service, user_headers):
        """Test non-admins cannot review applications."""
        response = client.patch(
            "/api/v1/enrollments/enr-1/status",
            json={"status": "approved"},
            headers=user_headers,
        )

        assert response.status_code == 403
        enrollment_service.update_status.assert_not_called()


class TestDeleteEnrollment:
    """Tests for DELETE /api/v1/enrollments/{id}."""

    def test_deleted(self, client, enrollment_service, admin_headers):
        """Test a pending application is deleted."""
        response = client.delete("/api/v1/enrollments/enr-1", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["success"] is True
        enrollment_service.delete.assert_awaited_once_with("enr-1", actor_id="admin-1")

    @pytest.mark.parametrize(
        "error",
        [EnrollmentNotFoundError("missing"), EnrollmentNotDeletableError("approved")],
    )
    def test_not_deletable(self, client, enrollment_service, admin_headers, error):
        """Test missing or reviewed applications return 404."""
        enrollment_service.delete.side_effect = error

        response = client.delete("/api/v1/enrollments/enr-1", headers=admin_headers)

        assert response.status_code == 404

    def test_in_use(self, client, enrollment_service, admin_headers):
        """Test an application holding a seat returns 409."""
        enrollment_service.delete.side_effect = EnrollmentInUseError("seated", existing_id="rel-1")

        response = client.delete("/api/v1/enrollments/enr-1", headers=admin_headers)

        assert response.status_code == 409


class TestRoutes:
    """Tests for route registration."""

    def test_enrollment_routes_registered(self, app):
        """Test every enrollment route is mounted under /api/v1."""
        paths = app.openapi()["paths"]

        assert {"get", "post"} <= set(paths["/api/v1/enrollments"])
        assert {"get", "delete"} <= set(paths["/api/v1/enrollments/{enrollment_id}"])
        assert "patch" in paths["/api/v1/enrollments/{enrollment_id}/status"]
