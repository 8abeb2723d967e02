"""User domain models.

SQLModel table definition for User, the credential store every other
aggregate (refresh tokens, signup requests) refers to.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import assert_never

from pydantic import EmailStr
from sqlmodel import Field, SQLModel

from app.core.mixins import TimestampMixin


class UserRole(str, Enum):
    """Account role, shared by the data model and the route guards.

    - user: job seeker / vendor, self-service signup
    - company: posts jobs and tenders, signup needs admin approval
    - organization: posts jobs and tenders, signup needs admin approval
    - admin: platform administrator, never created through signup
    """

    user = "user"
    company = "company"
    organization = "organization"
    admin = "admin"

    @property
    def requires_signup_approval(self) -> bool:
        match self:
            case UserRole.company | UserRole.organization:
                return True
            case UserRole.user | UserRole.admin:
                return False
            case _:
                assert_never(self)

    @property
    def allows_self_signup(self) -> bool:
        match self:
            case UserRole.user | UserRole.company | UserRole.organization:
                return True
            case UserRole.admin:
                return False
            case _:
                assert_never(self)


class PlanStatus(str, Enum):
    free = "free"
    paid = "paid"


class User(TimestampMixin, SQLModel, table=True):
    """User database model.

    Note: password_hash and the OTP fields are internal-only and must
    never be exposed in API responses.
    """

    __tablename__: str = "users"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    email: EmailStr = Field(index=True, unique=True, max_length=255)
    password_hash: str | None = Field(default=None, max_length=255)
    full_name: str | None = Field(default=None, max_length=255)
    role: UserRole = Field(default=UserRole.user, max_length=20)
    phone: str | None = Field(default=None, index=True, unique=True, max_length=32)
    avatar_url: str | None = Field(default=None, max_length=2048)
    bio: str | None = Field(default=None)

    email_verified: bool = Field(default=False)
    email_verification_otp: str | None = Field(default=None, max_length=6)
    otp_expires_at: datetime | None = Field(default=None)

    plan_status: PlanStatus = Field(default=PlanStatus.free, max_length=10)
    plan_id: str | None = Field(default=None, max_length=100)
    plan_expires_at: datetime | None = Field(default=None)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.admin
