"""Tests for app/signup/service.py - the signup review workflow."""

import uuid
from unittest.mock import MagicMock, patch

import pytest
from sqlmodel import Session, select

from app.core.exceptions import BadRequestError
from app.core.security import verify_password
from app.signup.exceptions import (
    DuplicateSignupRequestError,
    ReasonNoteRequiredError,
    SignupRequestClosedError,
    SignupRequestNotFoundError,
)
from app.signup.models import SignupRequest, SignupRequestStatus
from app.signup.service import SignupReviewService, create_signup_request
from app.user.exceptions import EmailExistsError, PhoneExistsError
from app.user.models import User, UserRole


@pytest.fixture(name="pending_request")
def pending_request_fixture(session: Session, password_hash: str) -> SignupRequest:
    return create_signup_request(
        session,
        SignupRequest(
            email="acme@example.com",
            password_hash=password_hash,
            full_name="Acme Ltd",
            role=UserRole.company,
            phone="+963911000050",
            drive_link="https://drive.example/acme",
        ),
    )


def test_create_signup_request_duplicate(
    session: Session, pending_request: SignupRequest
):
    with pytest.raises(DuplicateSignupRequestError):
        create_signup_request(
            session,
            SignupRequest(
                email=pending_request.email,
                password_hash="x",
                full_name="Acme Again",
                role=UserRole.organization,
            ),
        )


def test_new_request_allowed_after_rejection(
    session: Session,
    review_service: SignupReviewService,
    pending_request: SignupRequest,
    admin_user: User,
):
    review_service.review(
        session,
        pending_request.id,
        reviewer=admin_user,
        status=SignupRequestStatus.rejected,
        reason_note="Commercial file missing",
    )

    again = create_signup_request(
        session,
        SignupRequest(
            email=pending_request.email,
            password_hash="x",
            full_name="Acme Ltd",
            role=UserRole.company,
        ),
    )

    assert again.status == SignupRequestStatus.pending


def test_list_requests_filters_by_status(
    session: Session,
    review_service: SignupReviewService,
    pending_request: SignupRequest,
):
    assert [r.id for r in review_service.list_requests(session)] == [
        pending_request.id
    ]
    assert review_service.list_requests(
        session, status=SignupRequestStatus.approved
    ) == []


def test_get_request_not_found(session: Session, review_service: SignupReviewService):
    with pytest.raises(SignupRequestNotFoundError) as exc_info:
        review_service.get_request(session, uuid.uuid4())

    assert exc_info.value.status_code == 404


def test_approve_creates_unverified_user(
    session: Session,
    review_service: SignupReviewService,
    mock_email_service: MagicMock,
    pending_request: SignupRequest,
    admin_user: User,
):
    result = review_service.review(
        session,
        pending_request.id,
        reviewer=admin_user,
        status=SignupRequestStatus.approved,
    )

    assert result.status == SignupRequestStatus.approved
    assert result.reviewed_by_id == admin_user.id
    assert result.reviewed_at is not None

    user = session.get(User, result.user_id)
    assert user is not None
    assert user.email == "acme@example.com"
    assert user.role == UserRole.company
    assert user.phone == "+963911000050"
    assert user.email_verified is False
    assert verify_password("password123", user.password_hash)

    mock_email_service.send_otp.assert_called_once_with(
        user.email, user.email_verification_otp, user.full_name
    )


def test_approve_with_existing_user_email(
    session: Session,
    review_service: SignupReviewService,
    pending_request: SignupRequest,
    admin_user: User,
    make_user,
):
    make_user(pending_request.email)

    with pytest.raises(EmailExistsError) as exc_info:
        review_service.review(
            session,
            pending_request.id,
            reviewer=admin_user,
            status=SignupRequestStatus.approved,
        )

    assert exc_info.value.status_code == 409
    session.refresh(pending_request)
    assert pending_request.status == SignupRequestStatus.pending


def test_approve_phone_taken_during_insert(
    session: Session,
    review_service: SignupReviewService,
    pending_request: SignupRequest,
    admin_user: User,
    make_user,
):
    make_user("other@example.com", phone=pending_request.phone)

    with (
        patch("app.signup.service.ensure_phone_available"),
        pytest.raises(PhoneExistsError),
    ):
        review_service.review(
            session,
            pending_request.id,
            reviewer=admin_user,
            status=SignupRequestStatus.approved,
        )

    session.refresh(pending_request)
    assert pending_request.status == SignupRequestStatus.pending
    assert pending_request.user_id is None


@pytest.mark.parametrize(
    "status", [SignupRequestStatus.rejected, SignupRequestStatus.need_more_info]
)
@pytest.mark.parametrize("reason_note", [None, "", "   "])
def test_reason_note_required(
    session: Session,
    review_service: SignupReviewService,
    pending_request: SignupRequest,
    admin_user: User,
    status: SignupRequestStatus,
    reason_note: str | None,
):
    with pytest.raises(ReasonNoteRequiredError):
        review_service.review(
            session,
            pending_request.id,
            reviewer=admin_user,
            status=status,
            reason_note=reason_note,
        )


def test_reject_records_note_and_creates_no_user(
    session: Session,
    review_service: SignupReviewService,
    mock_email_service: MagicMock,
    pending_request: SignupRequest,
    admin_user: User,
):
    result = review_service.review(
        session,
        pending_request.id,
        reviewer=admin_user,
        status=SignupRequestStatus.rejected,
        reason_note="  Not a registered business  ",
    )

    assert result.status == SignupRequestStatus.rejected
    assert result.reason_note == "Not a registered business"
    assert result.user_id is None
    assert session.exec(
        select(User).where(User.email == pending_request.email)
    ).first() is None
    mock_email_service.send_otp.assert_not_called()


def test_reviewed_request_is_closed(
    session: Session,
    review_service: SignupReviewService,
    pending_request: SignupRequest,
    admin_user: User,
):
    review_service.review(
        session,
        pending_request.id,
        reviewer=admin_user,
        status=SignupRequestStatus.need_more_info,
        reason_note="Please upload the commercial register",
    )

    with pytest.raises(SignupRequestClosedError):
        review_service.review(
            session,
            pending_request.id,
            reviewer=admin_user,
            status=SignupRequestStatus.approved,
        )


def test_review_back_to_pending(
    session: Session,
    review_service: SignupReviewService,
    pending_request: SignupRequest,
    admin_user: User,
):
    with pytest.raises(BadRequestError):
        review_service.review(
            session,
            pending_request.id,
            reviewer=admin_user,
            status=SignupRequestStatus.pending,
        )
