"""Email verification codes.

Six-digit numeric codes stored on the user row with an expiry. A code is
consumed by a conditional UPDATE, so once one verification succeeds every
later attempt with the same code fails.
"""

import hmac
import logging
import secrets
import uuid
from datetime import UTC, datetime, timedelta

from sqlalchemy import update
from sqlmodel import Session, col

from app.auth.exceptions import (
    EmailAlreadyVerifiedError,
    InvalidOtpError,
    OtpExpiredError,
)
from app.core.email import EmailService
from app.core.mixins import as_utc
from app.user.exceptions import UserNotFoundError
from app.user.models import User

logger = logging.getLogger(__name__)

OTP_MIN = 100_000
OTP_MAX = 999_999


class OtpVerifier:
    def __init__(
        self,
        email_service: EmailService,
        expires_in: timedelta = timedelta(minutes=15),
    ):
        self._email_service = email_service
        self._expires_in = expires_in

    @staticmethod
    def generate() -> str:
        """Return a uniformly random code in 100000-999999."""
        return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))

    def assign(self, user: User) -> str:
        """Put a fresh code on the user without committing."""
        otp = self.generate()
        user.email_verification_otp = otp
        user.otp_expires_at = datetime.now(UTC) + self._expires_in
        return otp

    def deliver(self, user: User, otp: str) -> None:
        """Email a code. Delivery failures are logged, never raised."""
        self._email_service.send_otp(user.email, otp, user.full_name)
        logger.info("Verification code issued", extra={"user_id": user.id})

    def issue(self, session: Session, user: User) -> str:
        """Store a fresh code on the user and email it.

        A failed delivery does not undo the stored code; it can be resent.
        """
        otp = self.assign(user)
        session.add(user)
        session.commit()
        session.refresh(user)
        self.deliver(user, otp)
        return otp

    def verify(self, session: Session, user_id: uuid.UUID, code: str) -> User:
        """Check a submitted code and mark the email verified.

        Raises:
            UserNotFoundError: no user with this id
            EmailAlreadyVerifiedError: the email is already verified
            InvalidOtpError: no pending code or the code does not match
            OtpExpiredError: the code matched but has expired
        """
        user = session.get(User, user_id)
        if user is None:
            raise UserNotFoundError()

        if user.email_verified:
            raise EmailAlreadyVerifiedError()

        stored = user.email_verification_otp
        if stored is None or not hmac.compare_digest(stored.encode(), code.encode()):
            raise InvalidOtpError()

        if user.otp_expires_at and as_utc(user.otp_expires_at) < datetime.now(UTC):
            raise OtpExpiredError()

        # The WHERE clause re-checks the code so concurrent attempts
        # cannot both consume it
        result = session.exec(
            update(User)
            .where(
                col(User.id) == user_id,
                col(User.email_verified).is_(False),
                col(User.email_verification_otp) == code,
            )
            .values(
                email_verified=True,
                email_verification_otp=None,
                otp_expires_at=None,
            )
        )
        if result.rowcount != 1:
            session.rollback()
            raise InvalidOtpError()

        session.commit()
        session.refresh(user)
        logger.info("Email verified", extra={"user_id": user.id})
        return user
