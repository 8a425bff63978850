# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""DateTime utilities for the studio backend.

All timestamps are stored in UTC and every Python datetime is
timezone-aware. Ages are calendar ages computed from a date of birth.

Usage:
------
    from gymstudio.utils.datetime import utc_now, calculate_age

    created_at = Column(DateTime(timezone=True), default=utc_now)
    age = calculate_age(date(2016, 5, 1))
"""

from datetime import date, datetime, timezone


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

    Returns:
        Timezone-aware datetime representing current UTC time.
    """
    return datetime.now(timezone.utc)


def utc_today() -> date:
    """Get the current UTC calendar date."""
    return utc_now().date()


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Ensure a datetime is timezone-aware UTC.

    Args:
        dt: A datetime object (naive or aware) or None.

    Returns:
        Timezone-aware UTC datetime or None.

    Note:
        Naive datetimes are assumed to already be in UTC. SQLite returns
        naive values for TIMESTAMPTZ columns.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def calculate_age(date_of_birth: date, today: date | None = None) -> int:
    """Calculate the calendar age in whole years on a given day.

    The age increases on the birthday itself. A child born on Feb 29
    turns a year older on Mar 1 in non-leap years.

    Args:
        date_of_birth: The child's date of birth.
        today: Reference date. Defaults to the current UTC date.

    Returns:
        Age in completed years. Never negative.

    Example:
        >>> calculate_age(date(2016, 6, 15), today=date(2024, 6, 14))
        7
        >>> calculate_age(date(2016, 6, 15), today=date(2024, 6, 15))
        8
    """
    if today is None:
        today = utc_today()

    age = today.year - date_of_birth.year
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return max(age, 0)

