# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Class catalog request and response models."""

from decimal import Decimal
from typing import Literal, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from gymstudio.models.common import (
    ClassEnrollmentStatus,
    UtcDatetime,
    DayOfWeek,
    ProgramType,
    sanitize_text,
)

_TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"

# Columns a partial update may omit but never clear
_REQUIRED_COLUMNS = (
    "name",
    "program_type",
    "day_of_week",
    "start_time",
    "end_time",
    "capacity",
    "is_active",
)


def _lower(value: object) -> object:
    return value.strip().lower() if isinstance(value, str) else value


def _check_age_bounds(age_min: int | None, age_max: int | None) -> None:
    if age_min is not None and age_max is not None and age_min > age_max:
        raise ValueError("age_min must not exceed age_max")


def _check_times(start_time: str, end_time: str) -> None:
    if end_time <= start_time:
        raise ValueError("end_time must be after start_time")


class ClassCreateRequest(BaseModel):
    """Request to add a class to the catalog."""

    model_config = ConfigDict(use_enum_values=True)

    name: str = Field(min_length=1, max_length=200)
    program_type: ProgramType
    instructor_id: str | None = None
    day_of_week: DayOfWeek
    start_time: str = Field(pattern=_TIME_PATTERN)
    end_time: str = Field(pattern=_TIME_PATTERN)
    capacity: int = Field(default=10, gt=0)
    age_min: int | None = Field(default=None, ge=0)
    age_max: int | None = Field(default=None, ge=0)
    skill_level: str | None = Field(default=None, max_length=50)
    monthly_price: Decimal | None = Field(default=None, ge=0)

    @field_validator("day_of_week", mode="before")
    @classmethod
    def lower_day(cls, value: object) -> object:
        return _lower(value)

    @field_validator("name", "skill_level", mode="after")
    @classmethod
    def sanitize(cls, value: str | None) -> str | None:
        return sanitize_text(value)

    @model_validator(mode="after")
    def validate_bounds(self) -> Self:
        _check_age_bounds(self.age_min, self.age_max)
        _check_times(self.start_time, self.end_time)
        return self


class ClassUpdateRequest(BaseModel):
    """Partial update of a class. Only fields that are set are applied."""

    model_config = ConfigDict(use_enum_values=True)

    name: str | None = Field(default=None, min_length=1, max_length=200)
    program_type: ProgramType | None = None
    instructor_id: str | None = None
    day_of_week: DayOfWeek | None = None
    start_time: str | None = Field(default=None, pattern=_TIME_PATTERN)
    end_time: str | None = Field(default=None, pattern=_TIME_PATTERN)
    capacity: int | None = Field(default=None, gt=0)
    age_min: int | None = Field(default=None, ge=0)
    age_max: int | None = Field(default=None, ge=0)
    skill_level: str | None = Field(default=None, max_length=50)
    monthly_price: Decimal | None = Field(default=None, ge=0)
    is_active: bool | None = None

    @field_validator("day_of_week", mode="before")
    @classmethod
    def lower_day(cls, value: object) -> object:
        return _lower(value)

    @field_validator("name", "skill_level", mode="after")
    @classmethod
    def sanitize(cls, value: str | None) -> str | None:
        return sanitize_text(value)

    @model_validator(mode="after")
    def validate_bounds(self) -> Self:
        missing = sorted(
            name for name in _REQUIRED_COLUMNS
            if name in self.model_fields_set and getattr(self, name) is None
        )
        if missing:
            raise ValueError(f"{', '.join(missing)} cannot be null")
        _check_age_bounds(self.age_min, self.age_max)
        if self.start_time is not None and self.end_time is not None:
            _check_times(self.start_time, self.end_time)
        return self


class ClassResponse(BaseModel):
    """Class definition with live seat counts."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    program_type: str
    instructor_id: str | None = None
    day_of_week: str
    start_time: str
    end_time: str
    capacity: int
    age_min: int | None = None
    age_max: int | None = None
    skill_level: str | None = None
    monthly_price: Decimal | None = None
    is_active: bool
    created_at: UtcDatetime
    updated_at: UtcDatetime
    enrollment_count: int = 0
    available_spots: int = 0


class ClassListResponse(BaseModel):
    """Response for the class list."""

    classes: list[ClassResponse]
    total: int


class EnrollStudentRequest(BaseModel):
    """Request to seat an application in a class directly."""

    enrollment_id: str = Field(min_length=1)


class WithdrawStudentRequest(BaseModel):
    """Request to free a student's seat."""

    status: Literal["paused", "cancelled"] = "cancelled"


class ClassStudentResponse(BaseModel):
    """A class enrollment relation."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    class_id: str
    enrollment_id: str
    enrollment_date: UtcDatetime
    status: ClassEnrollmentStatus
    student_first_name: str | None = None
    student_last_name: str | None = None


class ClassStudentsResponse(BaseModel):
    """Relations held in a class."""

    class_id: str
    students: list[ClassStudentResponse]
    total: int
