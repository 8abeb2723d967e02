"""Signup request queue and the admin review workflow.

A request moves once from pending to approved, rejected or need_more_info.
Approval creates the User and closes the request in a single transaction;
the verification code is emailed after that commit.
"""

import logging
import uuid
from datetime import UTC, datetime
from typing import assert_never

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, select

from app.auth.otp import OtpVerifier
from app.core.exceptions import BadRequestError
from app.signup.exceptions import (
    DuplicateSignupRequestError,
    ReasonNoteRequiredError,
    SignupRequestClosedError,
    SignupRequestNotFoundError,
)
from app.signup.models import SignupRequest, SignupRequestStatus
from app.user.models import User
from app.user.service import (
    ensure_email_available,
    ensure_phone_available,
    user_conflict_error,
)

logger = logging.getLogger(__name__)


def get_pending_request(session: Session, email: str) -> SignupRequest | None:
    return session.exec(
        select(SignupRequest).where(
            SignupRequest.email == email,
            SignupRequest.status == SignupRequestStatus.pending,
        )
    ).first()


def ensure_no_pending_request(session: Session, email: str) -> None:
    if get_pending_request(session, email) is not None:
        raise DuplicateSignupRequestError()


def create_signup_request(
    session: Session,
    request: SignupRequest,
) -> SignupRequest:
    """Queue a signup request for review.

    Raises:
        DuplicateSignupRequestError: a pending request exists for the email
    """
    ensure_no_pending_request(session, request.email)

    session.add(request)
    try:
        session.commit()
    except IntegrityError as e:
        # Lost the race against a concurrent signup for the same email
        session.rollback()
        raise DuplicateSignupRequestError() from e
    session.refresh(request)

    logger.info(
        "Signup request queued",
        extra={"signup_request_id": request.id, "role": request.role.value},
    )
    return request


class SignupReviewService:
    def __init__(self, otp_verifier: OtpVerifier):
        self._otp_verifier = otp_verifier

    def list_requests(
        self,
        session: Session,
        status: SignupRequestStatus | None = None,
        offset: int = 0,
        limit: int = 100,
    ) -> list[SignupRequest]:
        statement = select(SignupRequest)
        if status is not None:
            statement = statement.where(SignupRequest.status == status)
        statement = (
            statement.order_by(col(SignupRequest.created_at).desc())
            .offset(offset)
            .limit(limit)
        )
        return list(session.exec(statement).all())

    def get_request(self, session: Session, request_id: uuid.UUID) -> SignupRequest:
        request = session.get(SignupRequest, request_id)
        if request is None:
            raise SignupRequestNotFoundError()
        return request

    def review(
        self,
        session: Session,
        request_id: uuid.UUID,
        reviewer: User,
        status: SignupRequestStatus,
        reason_note: str | None = None,
    ) -> SignupRequest:
        """Move a pending request to a terminal status.

        Raises:
            SignupRequestNotFoundError: unknown request id
            SignupRequestClosedError: the request was already reviewed
            BadRequestError: status is pending
            ReasonNoteRequiredError: rejecting or asking for more info
                without a reason
            EmailExistsError / PhoneExistsError: approving when an account
                with the same email or phone already exists
        """
        request = self.get_request(session, request_id)
        if request.status != SignupRequestStatus.pending:
            raise SignupRequestClosedError()

        note = reason_note.strip() if reason_note else None
        user: User | None = None
        otp: str | None = None

        match status:
            case SignupRequestStatus.approved:
                ensure_email_available(session, request.email)
                ensure_phone_available(session, request.phone)
                user = User(
                    email=request.email,
                    password_hash=request.password_hash,
                    full_name=request.full_name,
                    role=request.role,
                    phone=request.phone,
                    email_verified=False,
                )
                otp = self._otp_verifier.assign(user)
                session.add(user)
                try:
                    session.flush()
                except IntegrityError as e:
                    session.rollback()
                    raise user_conflict_error(
                        session, request.email, request.phone
                    ) from e
                request.user_id = user.id
            case SignupRequestStatus.rejected | SignupRequestStatus.need_more_info:
                if not note:
                    raise ReasonNoteRequiredError()
            case SignupRequestStatus.pending:
                raise BadRequestError("A signup request cannot be moved back to pending")
            case _:
                assert_never(status)

        request.status = status
        request.reason_note = note
        request.reviewed_by_id = reviewer.id
        request.reviewed_at = datetime.now(UTC)
        session.add(request)

        try:
            session.commit()
        except IntegrityError as e:
            # An account appeared between the availability checks and the insert
            session.rollback()
            raise user_conflict_error(session, request.email, request.phone) from e
        session.refresh(request)

        logger.info(
            "Signup request reviewed: %s",
            status.value,
            extra={"signup_request_id": request.id, "user_id": reviewer.id},
        )

        if user is not None and otp is not None:
            session.refresh(user)
            self._otp_verifier.deliver(user, otp)

        return request
