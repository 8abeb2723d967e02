"""Auth domain schemas.

Request and response schemas for authentication operations.
"""

import uuid
from dataclasses import dataclass
from enum import Enum

from pydantic import AliasChoices, BaseModel, EmailStr, Field

from app.core.exceptions import BadRequestError
from app.user.models import UserRole
from app.user.schemas import UserSummary


@dataclass(frozen=True)
class EmailLogin:
    email: str


@dataclass(frozen=True)
class PhoneLogin:
    phone: str


LoginBy = EmailLogin | PhoneLogin


class SignUpRequest(BaseModel):
    """Request schema for account registration."""

    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    full_name: str = Field(min_length=1, max_length=255)
    role: UserRole = UserRole.user
    phone: str | None = Field(default=None, min_length=3, max_length=32)
    drive_link: str | None = Field(default=None, max_length=2048)
    commercial_file_url: str | None = Field(default=None, max_length=2048)


class SignUpStatus(str, Enum):
    # Account exists, waiting for the emailed code
    verification_required = "verification_required"
    # Waiting for an administrator to review the signup request
    pending_approval = "pending_approval"


class SignUpResponse(BaseModel):
    message: str
    status: SignUpStatus
    email: str
    request_id: uuid.UUID | None = None
    user_id: uuid.UUID | None = None


class LoginRequest(BaseModel):
    """Login with exactly one of email or phone."""

    email: EmailStr | None = None
    phone: str | None = Field(default=None, min_length=3, max_length=32)
    password: str = Field(min_length=1)

    def credential(self) -> LoginBy:
        """Resolve the identifier into a tagged value.

        Raises:
            BadRequestError: neither or both identifiers were supplied
        """
        if self.email and self.phone:
            raise BadRequestError("Provide either email or phone, not both")
        if self.email:
            return EmailLogin(email=self.email)
        if self.phone:
            return PhoneLogin(phone=self.phone)
        raise BadRequestError("Either email or phone must be provided")


class VerifyEmailRequest(BaseModel):
    user_id: uuid.UUID = Field(validation_alias=AliasChoices("user_id", "userId"))
    code: str = Field(pattern=r"^[0-9]{6}$")


class ResendOtpRequest(BaseModel):
    user_id: uuid.UUID = Field(validation_alias=AliasChoices("user_id", "userId"))


class RefreshRequest(BaseModel):
    refresh_token: str = Field(min_length=1)


class TokenPairResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class AuthResponse(TokenPairResponse):
    """Tokens plus the authenticated user (login and email verification)."""

    message: str | None = None
    user: UserSummary


class AuthMessage(BaseModel):
    """Generic auth message response."""

    message: str
