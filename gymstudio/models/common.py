# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shared enums, input sanitisation and response envelopes."""

import re
from datetime import datetime
from enum import Enum
from typing import Annotated

from pydantic import AfterValidator, BaseModel

from gymstudio.utils.datetime import ensure_utc

MAX_INPUT_LENGTH = 1000

_SCRIPT_TAG_RE = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_UNSAFE_CHARS_RE = re.compile(r"[<>'\"]")

# SQLite returns naive timestamps
UtcDatetime = Annotated[datetime, AfterValidator(ensure_utc)]


class ProgramType(str, Enum):
    """Programs offered by the studio."""

    PRESCHOOL = "preschool"
    BOYS_RECREATIONAL = "boys_recreational"
    GIRLS_RECREATIONAL = "girls_recreational"
    BOYS_COMPETITIVE = "boys_competitive"
    GIRLS_COMPETITIVE = "girls_competitive"
    NINJA = "ninja"
    ADULT = "adult"


class EnrollmentStatus(str, Enum):
    """Review status of an enrollment application.

    WAITLIST is reserved and never produced by the workflow.
    """

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    WAITLIST = "waitlist"


class ClassEnrollmentStatus(str, Enum):
    """Status of a student's seat in a class."""

    ACTIVE = "active"
    PAUSED = "paused"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    """Preferred payment method chosen on the enrollment form."""

    MONTHLY = "monthly"
    CHECK = "check"
    CASH = "cash"


class DayOfWeek(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"


class UserRole(str, Enum):
    """Account roles."""

    USER = "user"
    ADMIN = "admin"
    COACH = "coach"


class AuditOutcome(str, Enum):
    """Outcome recorded for an audited action."""

    SUCCESS = "success"
    NOOP = "noop"
    FAILURE = "failure"


def sanitize_text(value: str | None) -> str | None:
    """Strip markup from free-text input.

    Removes script blocks and the characters ``< > ' "``, trims
    whitespace and caps the length.

    Args:
        value: Raw input, or None.

    Returns:
        The sanitised string, or None.
    """
    if value is None:
        return None
    cleaned = _SCRIPT_TAG_RE.sub("", value.strip())
    cleaned = _UNSAFE_CHARS_RE.sub("", cleaned)
    return cleaned[:MAX_INPUT_LENGTH]


def normalize_email(value: str) -> str:
    """Trim and lowercase an email address."""
    return value.strip().lower()


class SuccessResponse(BaseModel):
    """Generic success envelope."""

    success: bool = True
    message: str | None = None
