"""Tests for scripts/seed_admin.py."""

from sqlmodel import Session, select

from app.core.security import verify_password
from app.user.models import PlanStatus, User, UserRole
from scripts.seed_admin import main, seed_admin


def test_seed_admin_creates_account(session: Session):
    user, created = seed_admin(session, "root@example.com", "s3cret-pass")

    assert created is True
    assert user.role == UserRole.admin
    assert user.email_verified is True
    assert user.plan_status == PlanStatus.paid
    assert verify_password("s3cret-pass", user.password_hash)


def test_seed_admin_promotes_existing_account(session: Session, unverified_user: User):
    user, created = seed_admin(session, unverified_user.email, "new-password")

    assert created is False
    assert user.id == unverified_user.id
    assert user.role == UserRole.admin
    assert user.email_verified is True
    assert user.email_verification_otp is None
    assert verify_password("new-password", user.password_hash)
    assert len(session.exec(select(User)).all()) == 1


def test_main_requires_password(monkeypatch, capsys):
    monkeypatch.delenv("ADMIN_PASSWORD", raising=False)

    assert main(["--email", "root@example.com", "--password", ""]) == 1
    assert "password is required" in capsys.readouterr().out


def test_main_rejects_short_password():
    assert main(["--password", "short"]) == 1
