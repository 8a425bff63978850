# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Fixtures for integration tests.

Database tests each get their own SQLite file so sessions on separate
connections see each other's commits, the way two API workers would.
API tests run the application with its services overridden.
"""

import os
from datetime import date, timedelta
from typing import Any, AsyncIterator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from gymstudio.api import create_app
from gymstudio.api.middleware.rate_limit import limiter
from gymstudio.core.config import get_settings
from gymstudio.domains.auth.jwt import JWTManager
from gymstudio.infrastructure.database.connection import create_schema
from gymstudio.infrastructure.database.models import ClassDefinition, EnrollmentApplication
from gymstudio.infrastructure.database.repositories import (
    ClassCatalogRepository,
    EnrollmentRepository,
)
from gymstudio.models.enrollment import EnrollmentCreateRequest


@pytest_asyncio.fixture
async def engine(tmp_path) -> AsyncIterator[AsyncEngine]:
    """Create a fresh database with the full schema."""
    url = os.environ.get("TEST_DATABASE_URL") or f"sqlite+aiosqlite:///{tmp_path}/studio.db"
    engine = create_async_engine(url)
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a session factory bound to the test engine."""
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(sessionmaker) -> AsyncIterator[AsyncSession]:
    """Provide a database session."""
    async with sessionmaker() as session:
        yield session


@pytest_asyncio.fixture
async def other_session(sessionmaker) -> AsyncIterator[AsyncSession]:
    """Provide a second, independent session."""
    async with sessionmaker() as session:
        yield session


@pytest.fixture
def birth_date_for_age():
    """Build a date of birth that makes a child a given age today."""

    def _birth_date(age: int) -> date:
        return date.today() - timedelta(days=age * 365 + 60)

    return _birth_date


@pytest.fixture
def make_application(session: AsyncSession, enrollment_form: dict[str, Any]):
    """Build a factory that stores a pending application."""
    enrollments = EnrollmentRepository(session)

    async def _make(**overrides: Any) -> EnrollmentApplication:
        form = dict(enrollment_form)
        form.update(overrides)
        request = EnrollmentCreateRequest(**form)
        return await enrollments.create(**request.model_dump())

    return _make


@pytest.fixture
def make_class(session: AsyncSession):
    """Build a factory that stores a class definition."""
    catalog = ClassCatalogRepository(session)

    async def _make(**overrides: Any) -> ClassDefinition:
        fields: dict[str, Any] = {
            "name": "Saturday Tumbling",
            "program_type": "girls_recreational",
            "day_of_week": "saturday",
            "start_time": "09:00",
            "end_time": "10:00",
            "capacity": 10,
            "is_active": True,
        }
        fields.update(overrides)
        return await catalog.create(**fields)

    return _make


# =============================================================================
# API fixtures
# =============================================================================


@pytest.fixture
def app() -> FastAPI:
    """Create the application without running its lifespan."""
    application = create_app()
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Create a test client for the application."""
    limiter.reset()
    return TestClient(app)


def _bearer(user_id: str, role: str, email: str) -> dict[str, str]:
    token = JWTManager(get_settings().jwt).create_access_token(user_id, role, email)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers() -> dict[str, str]:
    """Provide headers for an admin."""
    return _bearer("admin-1", "admin", "admin@example.com")


@pytest.fixture
def user_headers() -> dict[str, str]:
    """Provide headers for a non-admin user."""
    return _bearer("user-1", "user", "parent@example.com")
