# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests
- Integration tests
"""

from datetime import date
from typing import Any

import pytest

from gymstudio.core.config import clear_settings_cache


# =============================================================================
# Settings
# =============================================================================


@pytest.fixture(autouse=True)
def fresh_settings():
    """Reload settings around every test so env patches do not leak."""
    clear_settings_cache()
    yield
    clear_settings_cache()


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (uses a SQLite database)"
    )


# =============================================================================
# Helper Fixtures
# =============================================================================


@pytest.fixture
def enrollment_form() -> dict[str, Any]:
    """Provide a valid public enrollment form payload."""
    return {
        "student_first_name": "Emma",
        "student_last_name": "Wilson",
        "student_date_of_birth": "2016-04-12",
        "student_gender": "female",
        "previous_experience": "Two years of recreational tumbling",
        "program_type": "girls_recreational",
        "parent_first_name": "Sarah",
        "parent_last_name": "Wilson",
        "parent_email": "Sarah@Example.com",
        "parent_phone": "555-123-4567",
        "address": "12 Elm Street",
        "city": "Springfield",
        "state": "IL",
        "zip_code": "62701",
        "emergency_contact_name": "Mark Wilson",
        "emergency_contact_relationship": "Father",
        "emergency_contact_phone": "555-987-6543",
        "allergies": "Peanuts",
        "medical_conditions": None,
        "medications": "Inhaler as needed",
        "physician_name": "Dr. Rivera",
        "physician_phone": "555-222-3333",
        "payment_method": "monthly",
        "terms_accepted": True,
        "photo_permission": True,
        "email_updates": False,
        "signature_name": "Sarah Wilson",
        "signature_date": date.today().isoformat(),
    }
