# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain exception hierarchy.

Four kinds of failure cross the service boundary:
- ValidationError: the caller sent something the domain rejects.
- NotFoundError: the referenced record does not exist (or is not in a
  state where the operation applies).
- ConflictError: the operation clashes with existing state.
- StoreError: the backing store failed. Never retried here.

The HTTP layer maps each kind to a status code.
"""

from __future__ import annotations


class DomainError(Exception):
    """Base exception for studio domain errors."""

    pass


class ValidationError(DomainError):
    """Raised when input is rejected by a domain rule."""

    pass


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""

    pass


class ConflictError(DomainError):
    """Raised when an operation conflicts with existing state.

    Attributes:
        existing_id: Identifier of the conflicting record, when known.
    """

    def __init__(self, message: str, existing_id: str | None = None) -> None:
        super().__init__(message)
        self.existing_id = existing_id


class StoreError(DomainError):
    """Raised when the backing store fails."""

    pass


class InvalidStatusError(ValidationError):
    """Raised when a status transition target is not approved or rejected."""

    pass


class EnrollmentNotFoundError(NotFoundError):
    """Raised when an enrollment application is not found."""

    pass


class EnrollmentNotDeletableError(NotFoundError):
    """Raised when deleting an application that is no longer pending."""

    pass


class EnrollmentInUseError(ConflictError):
    """Raised when deleting an application that still holds an active seat."""

    pass


class ClassNotFoundError(NotFoundError):
    """Raised when a class definition is not found."""

    pass


class DuplicateEnrollmentError(ConflictError):
    """Raised when the same child is submitted twice under one email."""

    pass


class ClassFullError(ConflictError):
    """Raised when a seat reservation finds no remaining capacity."""

    pass


class AlreadyEnrolledError(ConflictError):
    """Raised when an application already holds an active seat in a class."""

    pass


class NotEnrolledError(NotFoundError):
    """Raised when withdrawing a relation that is not active."""

    pass


class UserNotFoundError(NotFoundError):
    """Raised when a user account is not found."""

    pass
