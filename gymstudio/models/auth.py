# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication request and response models."""

import re
from typing import Self

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from gymstudio.models.common import UserRole, UtcDatetime, normalize_email, sanitize_text

_PASSWORD_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")


class LoginRequest(BaseModel):
    """Email and password login."""

    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("email", mode="after")
    @classmethod
    def normalize(cls, value: str) -> str:
        return normalize_email(value)


class RegisterRequest(BaseModel):
    """Self-service account registration. New accounts get the user role."""

    email: EmailStr
    password: str = Field(min_length=8, max_length=72)
    confirm_password: str
    first_name: str = Field(min_length=1, max_length=50)
    last_name: str = Field(min_length=1, max_length=50)

    @field_validator("email", mode="after")
    @classmethod
    def normalize(cls, value: str) -> str:
        return normalize_email(value)

    @field_validator("first_name", "last_name", mode="after")
    @classmethod
    def sanitize(cls, value: str) -> str:
        return sanitize_text(value)

    @field_validator("password")
    @classmethod
    def password_strength(cls, value: str) -> str:
        if not _PASSWORD_RE.match(value):
            raise ValueError("Password must contain uppercase, lowercase, and number")
        # bcrypt input limit
        if len(value.encode("utf-8")) > 72:
            raise ValueError("Password is too long")
        return value

    @model_validator(mode="after")
    def passwords_match(self) -> Self:
        if self.password != self.confirm_password:
            raise ValueError("Passwords don't match")
        return self


class UserResponse(BaseModel):
    """Public view of an account."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    first_name: str
    last_name: str
    role: str
    is_active: bool
    created_at: UtcDatetime
    last_login_at: UtcDatetime | None = None


class TokenResponse(BaseModel):
    """Bearer token issued on login or registration."""

    access_token: str
    token_type: str = "Bearer"
    expires_in: int
    user: UserResponse


class UserListResponse(BaseModel):
    """All accounts, for admins."""

    users: list[UserResponse]
    total: int


class UserUpdateRequest(BaseModel):
    """Admin change to an account's role or active flag.

    Promoting an account to admin needs the acting admin's password.
    """

    role: UserRole | None = None
    is_active: bool | None = None
    admin_password: str | None = Field(default=None, max_length=72, repr=False)

    @model_validator(mode="after")
    def has_change(self) -> Self:
        if self.role is None and self.is_active is None:
            raise ValueError("Provide a role or is_active")
        return self
