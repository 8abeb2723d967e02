"""User domain schemas.

Request and response schemas for user operations.

Security notes:
- password_hash and OTP state are internal-only, never exposed in responses
- UserUpdateMe is restricted to prevent privilege escalation
"""

import uuid
from datetime import UTC, datetime

from pydantic import EmailStr, Field, field_serializer
from sqlmodel import SQLModel

from app.user.models import PlanStatus, UserRole


def _format_utc(value: datetime) -> str:
    """Format datetime as ISO 8601 string in UTC with a Z suffix."""
    if value.tzinfo is not None:
        utc_value = value.astimezone(UTC)
    else:
        # Naive datetime - stored as UTC by TimestampMixin
        utc_value = value.replace(tzinfo=UTC)
    return utc_value.replace(microsecond=0).isoformat().replace("+00:00", "Z")


class UserBase(SQLModel):
    """Base user properties safe for all API responses."""

    email: EmailStr
    email_verified: bool
    full_name: str | None
    phone: str | None
    role: UserRole


class UserSummary(UserBase):
    """Compact user payload embedded in auth responses."""

    id: uuid.UUID


class UserPublicRead(UserSummary):
    """Response schema for self user data (/me endpoints)."""

    avatar_url: str | None
    bio: str | None
    plan_status: PlanStatus
    created_at: datetime
    updated_at: datetime

    @field_serializer("created_at", "updated_at")
    def serialize_datetime(self, value: datetime) -> str:
        return _format_utc(value)


class UserRead(UserPublicRead):
    """Full response schema for admin contexts."""

    plan_id: str | None
    plan_expires_at: datetime | None

    @field_serializer("plan_expires_at")
    def serialize_plan_expiry(self, value: datetime | None) -> str | None:
        return _format_utc(value) if value else None


class UserCreate(SQLModel):
    """Schema for an admin creating an account directly (no signup request)."""

    email: EmailStr
    password: str = Field(min_length=8)
    full_name: str = Field(min_length=1, max_length=255)
    role: UserRole = UserRole.user
    phone: str | None = Field(default=None, min_length=3, max_length=32)
    email_verified: bool = True


class UserUpdateMe(SQLModel):
    """Schema for users updating their own profile.

    Users cannot modify: email, role, email_verified, plan fields.
    """

    full_name: str | None = Field(default=None, min_length=1, max_length=255)
    phone: str | None = Field(default=None, min_length=3, max_length=32)
    avatar_url: str | None = Field(default=None, max_length=2048)
    bio: str | None = None


class UserUpdate(SQLModel):
    """Schema for admin updating a user."""

    email: EmailStr | None = None
    full_name: str | None = Field(default=None, min_length=1, max_length=255)
    phone: str | None = Field(default=None, min_length=3, max_length=32)
    role: UserRole | None = None
    avatar_url: str | None = Field(default=None, max_length=2048)
    bio: str | None = None
    email_verified: bool | None = None
    plan_status: PlanStatus | None = None


class UserPlanUpdate(SQLModel):
    """Schema for admin assigning a pricing plan."""

    plan_id: str | None = Field(default=None, max_length=100)
    plan_status: PlanStatus | None = None
    plan_expires_at: datetime | None = None
