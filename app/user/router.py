"""User domain router.

Self-service profile routes plus admin user management.
"""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy import delete
from sqlmodel import col, select

from app.auth.dependencies import CurrentUserDep, require_admin, require_auth
from app.auth.models import RefreshToken
from app.core.constants import CommonResponses, Routes
from app.core.deps import SessionDep
from app.core.security import hash_password
from app.user.exceptions import AdminDeletionError, UserNotFoundError
from app.user.models import User, UserRole
from app.user.schemas import (
    UserCreate,
    UserPlanUpdate,
    UserPublicRead,
    UserRead,
    UserUpdate,
    UserUpdateMe,
)
from app.user.service import ensure_email_available, ensure_phone_available

router = APIRouter(
    prefix=Routes.USER.prefix,
    tags=[Routes.USER.tag],
    dependencies=[Depends(require_auth)],
    responses={
        **CommonResponses.UNAUTHORIZED,
        **CommonResponses.FORBIDDEN,
    },
)


def _get_user_or_404(session, user_id: uuid.UUID) -> User:
    user = session.get(User, user_id)
    if not user:
        raise UserNotFoundError()
    return user


@router.get("/me", response_model=UserPublicRead)
async def read_me(user: CurrentUserDep):
    return user


@router.patch(
    "/me",
    response_model=UserPublicRead,
    responses={**CommonResponses.CONFLICT},
)
async def update_me(
    user: CurrentUserDep, user_update: UserUpdateMe, session: SessionDep
):
    """Update current authenticated user's profile.

    Users can only update their own name, phone, avatar and bio.
    For security, users cannot modify email, role, verification or plan.
    """
    update_data = user_update.model_dump(exclude_unset=True)
    if update_data.get("phone"):
        ensure_phone_available(session, update_data["phone"], exclude_id=user.id)

    for key, value in update_data.items():
        setattr(user, key, value)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@router.get("", response_model=list[UserRead], dependencies=[Depends(require_admin)])
async def list_users(session: SessionDep, role: UserRole | None = None):
    """List all users, optionally filtered by role. Admin only."""
    statement = select(User).order_by(col(User.created_at).desc())
    if role is not None:
        statement = statement.where(User.role == role)
    return session.exec(statement).all()


@router.post(
    "",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
    responses={**CommonResponses.CONFLICT},
)
async def create_user(payload: UserCreate, session: SessionDep):
    """Create an account directly, bypassing signup review. Admin only."""
    ensure_email_available(session, payload.email)
    ensure_phone_available(session, payload.phone)

    user = User(
        email=payload.email,
        password_hash=hash_password(payload.password),
        full_name=payload.full_name,
        role=payload.role,
        phone=payload.phone,
        email_verified=payload.email_verified,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@router.get(
    "/{user_id}",
    response_model=UserRead,
    dependencies=[Depends(require_admin)],
    responses={**CommonResponses.NOT_FOUND},
)
async def get_user(user_id: uuid.UUID, session: SessionDep):
    """Get a user by ID. Admin only."""
    return _get_user_or_404(session, user_id)


@router.patch(
    "/{user_id}",
    response_model=UserRead,
    dependencies=[Depends(require_admin)],
    responses={**CommonResponses.NOT_FOUND, **CommonResponses.CONFLICT},
)
async def update_user(user_id: uuid.UUID, user_update: UserUpdate, session: SessionDep):
    """Update a user by ID. Admin only."""
    user = _get_user_or_404(session, user_id)

    update_data = user_update.model_dump(exclude_unset=True)
    # Columns that cannot be cleared
    for key in ("email", "role", "email_verified", "plan_status"):
        if key in update_data and update_data[key] is None:
            del update_data[key]

    if "email" in update_data and update_data["email"] != user.email:
        ensure_email_available(session, update_data["email"], exclude_id=user_id)
    if update_data.get("phone"):
        ensure_phone_available(session, update_data["phone"], exclude_id=user_id)

    for key, value in update_data.items():
        setattr(user, key, value)

    if update_data.get("email_verified"):
        # Manual verification supersedes any pending code
        user.email_verification_otp = None
        user.otp_expires_at = None

    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@router.patch(
    "/{user_id}/plan",
    response_model=UserRead,
    dependencies=[Depends(require_admin)],
    responses={**CommonResponses.NOT_FOUND},
)
async def update_user_plan(
    user_id: uuid.UUID, plan_update: UserPlanUpdate, session: SessionDep
):
    """Assign a pricing plan, plan status or plan expiry. Admin only."""
    user = _get_user_or_404(session, user_id)

    update_data = plan_update.model_dump(exclude_unset=True)
    # plan_id and plan_expires_at can be cleared, plan_status cannot
    if "plan_status" in update_data and update_data["plan_status"] is None:
        del update_data["plan_status"]

    for key, value in update_data.items():
        setattr(user, key, value)

    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
    responses={**CommonResponses.NOT_FOUND},
)
async def delete_user(user_id: uuid.UUID, session: SessionDep):
    """Delete a user and their refresh tokens. Admin accounts cannot be deleted."""
    user = _get_user_or_404(session, user_id)
    if user.role == UserRole.admin:
        raise AdminDeletionError()

    session.exec(delete(RefreshToken).where(col(RefreshToken.user_id) == user_id))
    session.delete(user)
    session.commit()
