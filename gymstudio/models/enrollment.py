# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment application request and response models."""

from datetime import date
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    SecretStr,
    field_validator,
)

from gymstudio.models.common import (
    EnrollmentStatus,
    PaymentMethod,
    ProgramType,
    UtcDatetime,
    normalize_email,
    sanitize_text,
)

_SANITIZED_FIELDS = (
    "student_first_name",
    "student_last_name",
    "student_gender",
    "previous_experience",
    "parent_first_name",
    "parent_last_name",
    "parent_phone",
    "address",
    "city",
    "state",
    "zip_code",
    "emergency_contact_name",
    "emergency_contact_relationship",
    "emergency_contact_phone",
    "emergency_contact_alt_phone",
    "signature_name",
)

MEDICAL_FIELDS = (
    "allergies",
    "medical_conditions",
    "medications",
    "physician_name",
    "physician_phone",
)


def _reveal(value: SecretStr | None) -> str | None:
    return value.get_secret_value() if value is not None else None


class EnrollmentCreateRequest(BaseModel):
    """Public enrollment form submission.

    Free-text fields are sanitised, the email is normalized and the
    medical fields are held as SecretStr from the moment they are parsed.
    """

    model_config = ConfigDict(use_enum_values=True)

    # Student
    student_first_name: str = Field(min_length=1, max_length=50)
    student_last_name: str = Field(min_length=1, max_length=50)
    student_date_of_birth: date | None = None
    student_gender: str | None = Field(default=None, max_length=20)
    previous_experience: str | None = Field(default=None, max_length=1000)
    program_type: ProgramType

    # Guardian
    parent_first_name: str = Field(min_length=1, max_length=50)
    parent_last_name: str = Field(min_length=1, max_length=50)
    parent_email: EmailStr
    parent_phone: str = Field(min_length=10, max_length=20)
    address: str = Field(min_length=1, max_length=200)
    city: str = Field(min_length=1, max_length=50)
    state: str | None = Field(default=None, max_length=50)
    zip_code: str = Field(min_length=5, max_length=10)

    # Emergency contact
    emergency_contact_name: str = Field(min_length=1, max_length=100)
    emergency_contact_relationship: str = Field(min_length=1, max_length=50)
    emergency_contact_phone: str = Field(min_length=10, max_length=20)
    emergency_contact_alt_phone: str | None = Field(default=None, max_length=20)

    # Medical
    allergies: SecretStr | None = None
    medical_conditions: SecretStr | None = None
    medications: SecretStr | None = None
    physician_name: SecretStr | None = None
    physician_phone: SecretStr | None = None

    # Consent and payment preference
    payment_method: PaymentMethod
    terms_accepted: bool
    photo_permission: bool = False
    email_updates: bool = False
    signature_name: str = Field(min_length=1, max_length=100)
    signature_date: date

    @field_validator(*_SANITIZED_FIELDS, mode="after")
    @classmethod
    def sanitize(cls, value: str | None) -> str | None:
        return sanitize_text(value)

    @field_validator(*MEDICAL_FIELDS, mode="after")
    @classmethod
    def sanitize_medical(cls, value: SecretStr | None) -> SecretStr | None:
        if value is None:
            return None
        cleaned = sanitize_text(value.get_secret_value())
        return SecretStr(cleaned) if cleaned else None

    @field_validator("parent_email", mode="after")
    @classmethod
    def normalize_parent_email(cls, value: str) -> str:
        value = normalize_email(value)
        if len(value) > 100:
            raise ValueError("Email address is too long")
        return value

    @field_validator("terms_accepted")
    @classmethod
    def require_terms(cls, value: bool) -> bool:
        if value is not True:
            raise ValueError("You must accept the terms and conditions")
        return value

    @field_validator("student_date_of_birth")
    @classmethod
    def dob_not_in_future(cls, value: date | None) -> date | None:
        if value is not None and value > date.today():
            raise ValueError("Date of birth cannot be in the future")
        return value


class EnrollmentCreateResponse(BaseModel):
    """Response for a successful submission."""

    success: bool = True
    id: str
    message: str = "Enrollment submitted successfully"


class StatusUpdateRequest(BaseModel):
    """Admin decision on a pending application.

    Any string is accepted here so the workflow can reject unknown
    targets with its own validation error.
    """

    status: str


class StatusUpdateResponse(BaseModel):
    """Result of a status transition."""

    applied: bool
    status: EnrollmentStatus
    assigned_class_id: str | None = None


class EnrollmentSummary(BaseModel):
    """Application row for the admin list. Medical fields are omitted."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    student_first_name: str
    student_last_name: str
    student_date_of_birth: date | None = None
    program_type: str
    parent_first_name: str
    parent_last_name: str
    parent_email: str
    parent_phone: str
    status: EnrollmentStatus
    submission_date: UtcDatetime


class EnrollmentDetail(EnrollmentSummary):
    """Full application for admin review, medical fields revealed."""

    student_gender: str | None = None
    previous_experience: str | None = None
    address: str
    city: str
    state: str | None = None
    zip_code: str
    emergency_contact_name: str
    emergency_contact_relationship: str
    emergency_contact_phone: str
    emergency_contact_alt_phone: str | None = None
    allergies: str | None = None
    medical_conditions: str | None = None
    medications: str | None = None
    physician_name: str | None = None
    physician_phone: str | None = None
    payment_method: str
    terms_accepted: bool
    photo_permission: bool
    email_updates: bool
    signature_name: str
    signature_date: date
    notes: str | None = None
    class_id: str | None = None

    @classmethod
    def from_application(cls, application: Any, class_id: str | None = None) -> "EnrollmentDetail":
        """Build the admin view, revealing the encrypted medical fields.

        Args:
            application: EnrollmentApplication ORM instance.
            class_id: Class the application currently holds a seat in.
        """
        base = EnrollmentSummary.model_validate(application).model_dump()
        return cls(
            **base,
            student_gender=application.student_gender,
            previous_experience=application.previous_experience,
            address=application.address,
            city=application.city,
            state=application.state,
            zip_code=application.zip_code,
            emergency_contact_name=application.emergency_contact_name,
            emergency_contact_relationship=application.emergency_contact_relationship,
            emergency_contact_phone=application.emergency_contact_phone,
            emergency_contact_alt_phone=application.emergency_contact_alt_phone,
            allergies=_reveal(application.allergies),
            medical_conditions=_reveal(application.medical_conditions),
            medications=_reveal(application.medications),
            physician_name=_reveal(application.physician_name),
            physician_phone=_reveal(application.physician_phone),
            payment_method=application.payment_method,
            terms_accepted=application.terms_accepted,
            photo_permission=application.photo_permission,
            email_updates=application.email_updates,
            signature_name=application.signature_name,
            signature_date=application.signature_date,
            notes=application.notes,
            class_id=class_id,
        )


class EnrollmentListResponse(BaseModel):
    """Response for the admin enrollment list."""

    enrollments: list[EnrollmentSummary]
    total: int
