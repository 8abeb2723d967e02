"""Authentication service.

Signup, credential login, email verification and token refresh. Each
operation is a short sequence of reads and writes against the request's
database session; nothing here is retried.
"""

import logging
import uuid
from typing import assert_never

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from app.auth.exceptions import (
    EmailAlreadyVerifiedError,
    EmailNotVerifiedError,
    InvalidCredentialsError,
)
from app.auth.otp import OtpVerifier
from app.auth.schemas import EmailLogin, LoginBy, PhoneLogin, SignUpRequest
from app.auth.tokens import TokenIssuer, TokenPair
from app.core.exceptions import BadRequestError
from app.core.security import hash_password, verify_password
from app.signup.models import SignupRequest
from app.signup.service import create_signup_request, ensure_no_pending_request
from app.user.exceptions import UserNotFoundError
from app.user.models import User
from app.user.service import (
    ensure_email_available,
    ensure_phone_available,
    get_user_by_email,
    get_user_by_phone,
    user_conflict_error,
)

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, token_issuer: TokenIssuer, otp_verifier: OtpVerifier):
        self._tokens = token_issuer
        self._otp = otp_verifier

    def signup(self, session: Session, payload: SignUpRequest) -> User | SignupRequest:
        """Register an account.

        Roles that need approval are queued as a SignupRequest; other
        roles get an unverified User and an emailed code right away.

        Raises:
            BadRequestError: the role cannot be chosen at signup
            EmailExistsError / PhoneExistsError: already used by an account
            DuplicateSignupRequestError: a request for the email is pending
        """
        role = payload.role
        if not role.allows_self_signup:
            raise BadRequestError(f"Role '{role.value}' cannot be requested at signup")

        ensure_email_available(session, payload.email)
        ensure_phone_available(session, payload.phone)
        ensure_no_pending_request(session, payload.email)

        password_hash = hash_password(payload.password)

        if role.requires_signup_approval:
            return create_signup_request(
                session,
                SignupRequest(
                    email=payload.email,
                    password_hash=password_hash,
                    full_name=payload.full_name,
                    role=role,
                    phone=payload.phone,
                    drive_link=payload.drive_link,
                    commercial_file_url=payload.commercial_file_url,
                ),
            )

        user = User(
            email=payload.email,
            password_hash=password_hash,
            full_name=payload.full_name,
            role=role,
            phone=payload.phone,
            email_verified=False,
        )
        otp = self._otp.assign(user)
        session.add(user)
        try:
            session.commit()
        except IntegrityError as e:
            session.rollback()
            raise user_conflict_error(session, payload.email, payload.phone) from e
        session.refresh(user)

        self._otp.deliver(user, otp)
        logger.info("User signed up", extra={"user_id": user.id, "role": role.value})
        return user

    def login(
        self, session: Session, credential: LoginBy, password: str
    ) -> tuple[User, TokenPair]:
        """Authenticate with email or phone plus password.

        Unknown accounts and wrong passwords produce the same error. The
        verification check runs only after the password matched.
        """
        match credential:
            case EmailLogin(email=email):
                user = get_user_by_email(session, email)
            case PhoneLogin(phone=phone):
                user = get_user_by_phone(session, phone)
            case _:
                assert_never(credential)

        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()

        if not user.email_verified:
            raise EmailNotVerifiedError()

        tokens = self._tokens.issue_token_pair(session, user.id, user.email, user.role)
        logger.info("User logged in", extra={"user_id": user.id})
        return user, tokens

    def verify_email(
        self, session: Session, user_id: uuid.UUID, code: str
    ) -> tuple[User, TokenPair]:
        user = self._otp.verify(session, user_id, code)
        tokens = self._tokens.issue_token_pair(session, user.id, user.email, user.role)
        return user, tokens

    def resend_otp(self, session: Session, user_id: uuid.UUID) -> None:
        user = session.get(User, user_id)
        if user is None:
            raise UserNotFoundError()
        if user.email_verified:
            raise EmailAlreadyVerifiedError()
        self._otp.issue(session, user)

    def refresh(self, session: Session, refresh_token: str) -> TokenPair:
        return self._tokens.refresh(session, refresh_token)

    def logout(self, session: Session, refresh_token: str) -> None:
        # Unknown tokens are ignored; the client is logged out either way
        self._tokens.revoke(session, refresh_token)
