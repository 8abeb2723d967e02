"""Admin review of signup requests."""

import uuid

from fastapi import APIRouter, Depends, Query

from app.auth.dependencies import AdminUserDep, SignupReviewServiceDep, require_admin
from app.core.constants import CommonResponses, Routes
from app.core.deps import SessionDep
from app.signup.models import SignupRequestStatus
from app.signup.schemas import SignupRequestRead, SignupReviewRequest

router = APIRouter(
    prefix=Routes.SIGNUP_REQUESTS.prefix,
    tags=[Routes.SIGNUP_REQUESTS.tag],
    dependencies=[Depends(require_admin)],
    responses={
        **CommonResponses.UNAUTHORIZED,
        **CommonResponses.FORBIDDEN,
    },
)


@router.get("", response_model=list[SignupRequestRead])
async def list_signup_requests(
    session: SessionDep,
    review: SignupReviewServiceDep,
    status: SignupRequestStatus | None = None,
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=500),
):
    """List signup requests, newest first, optionally filtered by status."""
    return review.list_requests(session, status=status, offset=offset, limit=limit)


@router.get(
    "/{request_id}",
    response_model=SignupRequestRead,
    responses={**CommonResponses.NOT_FOUND},
)
async def get_signup_request(
    request_id: uuid.UUID, session: SessionDep, review: SignupReviewServiceDep
):
    return review.get_request(session, request_id)


@router.post(
    "/{request_id}/review",
    response_model=SignupRequestRead,
    responses={**CommonResponses.NOT_FOUND, **CommonResponses.CONFLICT},
)
async def review_signup_request(
    request_id: uuid.UUID,
    payload: SignupReviewRequest,
    admin: AdminUserDep,
    session: SessionDep,
    review: SignupReviewServiceDep,
):
    """Approve, reject or ask for more information.

    Approval creates the account (unverified) and emails a verification
    code. Rejection and need_more_info require reason_note.
    """
    return review.review(
        session,
        request_id,
        reviewer=admin,
        status=payload.status,
        reason_note=payload.reason_note,
    )
