"""
Pydantic models for user data.

Defines schemas for signing up, logging in, reading and updating user
profiles.  Passwords are accepted on input only; responses never carry
the stored hash.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from ..core.validation import rule_error


class _EmailNormalizer(BaseModel):
    """Mixin lower-casing the ``email`` field so lookups are case-insensitive."""

    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator("email", mode="after", check_fields=False)
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()


class UserCreate(_EmailNormalizer):
    """Schema for signing up."""

    email: EmailStr = Field(..., examples=["user@example.com"])
    name: str = Field(..., min_length=1, max_length=255, examples=["Jane Doe"])
    password: str = Field(..., min_length=6, examples=["strongpassword"])


class UserLogin(_EmailNormalizer):
    """Login only requires a password to be present; its length is not checked."""

    email: EmailStr = Field(..., examples=["user@example.com"])
    password: str = Field(..., examples=["strongpassword"])

    @model_validator(mode="before")
    @classmethod
    def default_password(cls, data: Any) -> Any:
        # A missing password is reported by ``password_required``.
        if isinstance(data, dict) and data.get("password") is None:
            data = {**data, "password": ""}
        return data

    @field_validator("password", mode="before")
    @classmethod
    def password_required(cls, value: Any) -> str:
        if not isinstance(value, str) or not value:
            raise rule_error("Password is required")
        return value


class ProfileUpdate(_EmailNormalizer):
    """Both fields must be supplied; the profile is replaced as a whole."""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr


class PasswordChange(BaseModel):
    # The wire names are camelCase; Python attributes stay snake_case.
    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(..., alias="currentPassword", min_length=1)
    new_password: str = Field(..., alias="newPassword", min_length=6)


class UserRead(BaseModel):
    """Schema for reading a user from the API."""

    id: int
    email: str
    name: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    success: bool = True
    message: str
    user: UserRead
    token: str


class UserEnvelope(BaseModel):
    user: UserRead


class UserUpdateResponse(BaseModel):
    message: str
    user: UserRead


class UserStats(BaseModel):
    events_created: int
    events_registered: int
    upcoming_events: int


class UserStatsEnvelope(BaseModel):
    stats: UserStats
