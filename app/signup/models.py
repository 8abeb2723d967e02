"""Signup request models.

Registrations for roles that need an administrator's approval wait here
until reviewed. Approval provisions the User row.
"""

import uuid
from datetime import datetime
from enum import Enum

from pydantic import EmailStr
from sqlalchemy import Index, text
from sqlmodel import Field, SQLModel

from app.core.mixins import TimestampMixin
from app.user.models import UserRole


class SignupRequestStatus(str, Enum):
    """Review state. pending is the only non-terminal status."""

    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    need_more_info = "need_more_info"


class SignupRequest(TimestampMixin, SQLModel, table=True):
    """Signup request database model.

    Note: password_hash is copied onto the User at approval and must
    never be exposed in API responses.
    """

    __tablename__: str = "signup_requests"
    __table_args__ = (
        # At most one open request per email
        Index(
            "uq_signup_requests_pending_email",
            "email",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    email: EmailStr = Field(index=True, max_length=255)
    password_hash: str = Field(max_length=255)
    full_name: str = Field(max_length=255)
    role: UserRole = Field(max_length=20)
    phone: str | None = Field(default=None, max_length=32)
    drive_link: str | None = Field(default=None, max_length=2048)
    commercial_file_url: str | None = Field(default=None, max_length=2048)

    status: SignupRequestStatus = Field(
        default=SignupRequestStatus.pending, index=True, max_length=20
    )
    reason_note: str | None = Field(default=None)
    reviewed_by_id: uuid.UUID | None = Field(
        default=None, foreign_key="users.id", ondelete="SET NULL"
    )
    reviewed_at: datetime | None = Field(default=None)
    user_id: uuid.UUID | None = Field(
        default=None, foreign_key="users.id", ondelete="SET NULL"
    )
