"""Credential store lookups shared by the auth, signup and user routers."""

import uuid

from sqlmodel import Session, select

from app.user.exceptions import EmailExistsError, PhoneExistsError
from app.user.models import User


def get_user_by_email(session: Session, email: str) -> User | None:
    return session.exec(select(User).where(User.email == email)).first()


def get_user_by_phone(session: Session, phone: str) -> User | None:
    return session.exec(select(User).where(User.phone == phone)).first()


def ensure_email_available(
    session: Session, email: str, *, exclude_id: uuid.UUID | None = None
) -> None:
    """Raise EmailExistsError if another account already uses this email."""
    existing = get_user_by_email(session, email)
    if existing is not None and existing.id != exclude_id:
        raise EmailExistsError()


def ensure_phone_available(
    session: Session, phone: str | None, *, exclude_id: uuid.UUID | None = None
) -> None:
    """Raise PhoneExistsError if another account already uses this phone."""
    if not phone:
        return
    existing = get_user_by_phone(session, phone)
    if existing is not None and existing.id != exclude_id:
        raise PhoneExistsError()


def user_conflict_error(
    session: Session, email: str, phone: str | None
) -> EmailExistsError | PhoneExistsError:
    """Name the unique column a rejected users insert collided with.

    Call after rolling back the failed transaction, so the lookups see the
    row that won.
    """
    if phone and get_user_by_phone(session, phone) is not None:
        if get_user_by_email(session, email) is None:
            return PhoneExistsError()
    return EmailExistsError()
