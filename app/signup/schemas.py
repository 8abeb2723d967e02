"""Signup request schemas."""

import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from app.signup.models import SignupRequestStatus
from app.user.models import UserRole


class SignupRequestRead(BaseModel):
    """Admin view of a signup request (password hash excluded)."""

    model_config = {"from_attributes": True}

    id: uuid.UUID
    email: EmailStr
    full_name: str
    role: UserRole
    phone: str | None
    drive_link: str | None
    commercial_file_url: str | None
    status: SignupRequestStatus
    reason_note: str | None
    reviewed_by_id: uuid.UUID | None
    reviewed_at: datetime | None
    user_id: uuid.UUID | None
    created_at: datetime


class SignupReviewRequest(BaseModel):
    status: SignupRequestStatus
    reason_note: str | None = Field(default=None, max_length=2000)
