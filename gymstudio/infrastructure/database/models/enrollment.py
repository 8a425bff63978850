# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment application model."""

from datetime import date, datetime

from pydantic import SecretStr
from sqlalchemy import Boolean, Date, DateTime, Index, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from gymstudio.infrastructure.database.models.base import Base, UUIDPrimaryKeyMixin
from gymstudio.infrastructure.database.models.types import EncryptedString
from gymstudio.utils.datetime import utc_now


class EnrollmentApplication(UUIDPrimaryKeyMixin, Base):
    """A parent's application to enroll a child in a program.

    Medical fields are encrypted at rest and loaded as SecretStr.
    Status moves from pending to approved or rejected exactly once.
    """

    __tablename__ = "enrollment_applications"
    __table_args__ = (
        Index("ix_enrollment_applications_parent_email", "parent_email"),
        Index("ix_enrollment_applications_status", "status"),
    )

    # Student
    student_first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    student_last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    student_date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    student_gender: Mapped[str | None] = mapped_column(String(20), nullable=True)
    previous_experience: Mapped[str | None] = mapped_column(Text, nullable=True)
    program_type: Mapped[str] = mapped_column(String(50), nullable=False)

    # Guardian
    parent_first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    parent_last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    parent_email: Mapped[str] = mapped_column(String(255), nullable=False)
    parent_phone: Mapped[str] = mapped_column(String(30), nullable=False)
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    state: Mapped[str | None] = mapped_column(String(50), nullable=True)
    zip_code: Mapped[str] = mapped_column(String(20), nullable=False)

    # Emergency contact
    emergency_contact_name: Mapped[str] = mapped_column(String(200), nullable=False)
    emergency_contact_relationship: Mapped[str] = mapped_column(String(50), nullable=False)
    emergency_contact_phone: Mapped[str] = mapped_column(String(30), nullable=False)
    emergency_contact_alt_phone: Mapped[str | None] = mapped_column(String(30), nullable=True)

    # Medical
    allergies: Mapped[SecretStr | None] = mapped_column(EncryptedString, nullable=True)
    medical_conditions: Mapped[SecretStr | None] = mapped_column(EncryptedString, nullable=True)
    medications: Mapped[SecretStr | None] = mapped_column(EncryptedString, nullable=True)
    physician_name: Mapped[SecretStr | None] = mapped_column(EncryptedString, nullable=True)
    physician_phone: Mapped[SecretStr | None] = mapped_column(EncryptedString, nullable=True)

    # Consent and payment preference
    payment_method: Mapped[str] = mapped_column(String(20), nullable=False)
    terms_accepted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    photo_permission: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    email_updates: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    signature_name: Mapped[str] = mapped_column(String(200), nullable=False)
    signature_date: Mapped[date] = mapped_column(Date, nullable=False)

    # Workflow
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    submission_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    @property
    def student_full_name(self) -> str:
        """Get the student's full name."""
        return f"{self.student_first_name} {self.student_last_name}"

    @property
    def is_pending(self) -> bool:
        """Check if the application is still awaiting review."""
        return self.status == "pending"

    def __repr__(self) -> str:
        return f"<EnrollmentApplication(id={self.id}, status={self.status})>"


# One application per child and email. Closes the window between the
# duplicate check and the insert.
STUDENT_UNIQUE_INDEX = "uq_enrollment_applications_student"

Index(
    STUDENT_UNIQUE_INDEX,
    EnrollmentApplication.parent_email,
    func.lower(EnrollmentApplication.student_first_name),
    func.lower(EnrollmentApplication.student_last_name),
    unique=True,
)
