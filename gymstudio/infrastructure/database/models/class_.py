# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Class catalog models: class definitions and class enrollments."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from gymstudio.infrastructure.database.models.base import (
    Base,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
)
from gymstudio.utils.datetime import utc_now


class ClassDefinition(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A recurring weekly class offered by the studio.

    ``seats_taken`` mirrors the number of active class enrollments and is
    only changed through conditional updates, so it never exceeds
    ``capacity``.
    """

    __tablename__ = "class_definitions"
    __table_args__ = (
        CheckConstraint("capacity > 0", name="ck_class_definitions_capacity_positive"),
        CheckConstraint(
            "seats_taken >= 0 AND seats_taken <= capacity",
            name="ck_class_definitions_seats_within_capacity",
        ),
        Index("ix_class_definitions_program_active", "program_type", "is_active"),
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    program_type: Mapped[str] = mapped_column(String(50), nullable=False)
    instructor_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    day_of_week: Mapped[str] = mapped_column(String(10), nullable=False)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=10)
    age_min: Mapped[int | None] = mapped_column(Integer, nullable=True)
    age_max: Mapped[int | None] = mapped_column(Integer, nullable=True)
    skill_level: Mapped[str | None] = mapped_column(String(50), nullable=True)
    monthly_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    seats_taken: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def accepts_age(self, age: int) -> bool:
        """Check whether an age falls inside the inclusive age bounds.

        Missing bounds accept any age.
        """
        if self.age_min is not None and age < self.age_min:
            return False
        if self.age_max is not None and age > self.age_max:
            return False
        return True

    def __repr__(self) -> str:
        return f"<ClassDefinition(id={self.id}, name={self.name}, capacity={self.capacity})>"


class ClassEnrollment(UUIDPrimaryKeyMixin, Base):
    """Relation seating an approved application in a class."""

    __tablename__ = "class_enrollments"
    __table_args__ = (
        UniqueConstraint("class_id", "enrollment_id", name="uq_class_enrollments_class_enrollment"),
        Index("ix_class_enrollments_class_status", "class_id", "status"),
        Index("ix_class_enrollments_enrollment", "enrollment_id"),
    )

    class_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("class_definitions.id"), nullable=False
    )
    enrollment_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("enrollment_applications.id"), nullable=False
    )
    enrollment_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")

    @property
    def is_active(self) -> bool:
        """Check if the relation currently occupies a seat."""
        return self.status == "active"

    def __repr__(self) -> str:
        return (
            f"<ClassEnrollment(class_id={self.class_id}, "
            f"enrollment_id={self.enrollment_id}, status={self.status})>"
        )
