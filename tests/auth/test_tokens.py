"""Tests for app/auth/tokens.py - token issuing, refresh rotation and revocation."""

import uuid
from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import jwt
import pytest
from hypothesis import given
from hypothesis import strategies as st
from sqlalchemy import delete
from sqlmodel import Session, col, select

from app.auth.exceptions import InvalidTokenError, TokenConfigurationError
from app.auth.models import RefreshToken
from app.auth.tokens import (
    _EXPIRY_UNIT_MS,
    DEFAULT_EXPIRY_MS,
    TokenIssuer,
    parse_expiry,
)
from app.user.models import User, UserRole

# --- parse_expiry ---


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("30s", 30_000),
        ("15m", 900_000),
        ("2h", 7_200_000),
        ("7d", 604_800_000),
    ],
)
def test_parse_expiry_units(value, expected):
    assert parse_expiry(value) == expected


@pytest.mark.parametrize("value", ["", "15", "15x", "m", "abcd", "-5m", "0d", "1.5h"])
def test_parse_expiry_falls_back_to_seven_days(value):
    assert parse_expiry(value) == DEFAULT_EXPIRY_MS


@given(
    amount=st.integers(min_value=1, max_value=100_000),
    unit=st.sampled_from(sorted(_EXPIRY_UNIT_MS)),
)
def test_parse_expiry_valid_grammar(amount, unit):
    assert parse_expiry(f"{amount}{unit}") == amount * _EXPIRY_UNIT_MS[unit]


@given(st.text().filter(lambda s: s.strip()[-1:] not in _EXPIRY_UNIT_MS))
def test_parse_expiry_unknown_unit(value):
    assert parse_expiry(value) == DEFAULT_EXPIRY_MS


# --- construction ---


@pytest.mark.parametrize(
    ("secret", "refresh_secret"),
    [(None, "refresh"), ("access", None), ("", "refresh"), (None, None)],
)
def test_missing_secret_raises(secret, refresh_secret):
    with pytest.raises(TokenConfigurationError):
        TokenIssuer(secret=secret, refresh_secret=refresh_secret)


# --- issue / decode ---


def test_issue_token_pair_persists_refresh_token(
    session: Session, token_issuer: TokenIssuer, test_user: User
):
    pair = token_issuer.issue_token_pair(
        session, test_user.id, test_user.email, test_user.role
    )

    stored = session.exec(
        select(RefreshToken).where(RefreshToken.token == pair.refresh_token)
    ).one()
    assert stored.user_id == test_user.id

    claims = token_issuer.decode_access_token(pair.access_token)
    assert claims.sub == test_user.id
    assert claims.email == test_user.email
    assert claims.role == UserRole.user


def test_pairs_issued_back_to_back_are_distinct(
    session: Session, token_issuer: TokenIssuer, test_user: User
):
    first = token_issuer.issue_token_pair(
        session, test_user.id, test_user.email, test_user.role
    )
    second = token_issuer.issue_token_pair(
        session, test_user.id, test_user.email, test_user.role
    )

    assert first.access_token != second.access_token
    assert first.refresh_token != second.refresh_token


def test_access_and_refresh_secrets_are_not_interchangeable(
    session: Session, token_issuer: TokenIssuer, test_user: User
):
    pair = token_issuer.issue_token_pair(
        session, test_user.id, test_user.email, test_user.role
    )

    with pytest.raises(InvalidTokenError):
        token_issuer.decode_access_token(pair.refresh_token)
    with pytest.raises(InvalidTokenError):
        token_issuer.decode_refresh_token(pair.access_token)


def test_decode_expired_token(token_issuer: TokenIssuer):
    past = datetime.now(UTC) - timedelta(minutes=5)
    token = jwt.encode(
        {"sub": str(uuid.uuid4()), "role": "user", "iat": past, "exp": past},
        "test-access-secret",
        algorithm="HS256",
    )

    with pytest.raises(InvalidTokenError) as exc_info:
        token_issuer.decode_access_token(token)

    assert exc_info.value.status_code == 401


@pytest.mark.parametrize("token", ["", "not-a-jwt", "a.b.c"])
def test_decode_malformed_token(token_issuer: TokenIssuer, token: str):
    with pytest.raises(InvalidTokenError):
        token_issuer.decode_access_token(token)


def test_decode_token_with_unknown_role(token_issuer: TokenIssuer):
    token = jwt.encode(
        {
            "sub": str(uuid.uuid4()),
            "role": "superuser",
            "exp": datetime.now(UTC) + timedelta(minutes=5),
        },
        "test-access-secret",
        algorithm="HS256",
    )

    with pytest.raises(InvalidTokenError):
        token_issuer.decode_access_token(token)


# --- refresh ---


def test_refresh_rotates_token(
    session: Session, token_issuer: TokenIssuer, test_user: User
):
    pair = token_issuer.issue_token_pair(
        session, test_user.id, test_user.email, test_user.role
    )

    new_pair = token_issuer.refresh(session, pair.refresh_token)

    assert new_pair.refresh_token != pair.refresh_token
    tokens = session.exec(select(RefreshToken.token)).all()
    assert pair.refresh_token not in tokens
    assert new_pair.refresh_token in tokens


def test_refresh_token_is_single_use(
    session: Session, token_issuer: TokenIssuer, test_user: User
):
    pair = token_issuer.issue_token_pair(
        session, test_user.id, test_user.email, test_user.role
    )
    token_issuer.refresh(session, pair.refresh_token)

    with pytest.raises(InvalidTokenError):
        token_issuer.refresh(session, pair.refresh_token)


def test_refresh_loses_race_to_concurrent_redemption(
    session: Session, token_issuer: TokenIssuer, test_user: User
):
    """Only the redemption whose DELETE removes the row gets a new pair."""
    pair = token_issuer.issue_token_pair(
        session, test_user.id, test_user.email, test_user.role
    )
    real_get = session.get

    def get_then_redeem_elsewhere(*args, **kwargs):
        with Session(session.get_bind()) as other:
            other.exec(
                delete(RefreshToken).where(
                    col(RefreshToken.token) == pair.refresh_token
                )
            )
            other.commit()
        return real_get(*args, **kwargs)

    with (
        patch.object(session, "get", side_effect=get_then_redeem_elsewhere),
        pytest.raises(InvalidTokenError),
    ):
        token_issuer.refresh(session, pair.refresh_token)

    assert session.exec(select(RefreshToken)).all() == []
    assert token_issuer.issue_token_pair(
        session, test_user.id, test_user.email, test_user.role
    ).refresh_token


def test_refresh_rejects_expired_row(
    session: Session, token_issuer: TokenIssuer, test_user: User
):
    pair = token_issuer.issue_token_pair(
        session, test_user.id, test_user.email, test_user.role
    )
    stored = session.exec(
        select(RefreshToken).where(RefreshToken.token == pair.refresh_token)
    ).one()
    stored.expires_at = datetime.now(UTC) - timedelta(seconds=1)
    session.add(stored)
    session.commit()

    with pytest.raises(InvalidTokenError):
        token_issuer.refresh(session, pair.refresh_token)


def test_refresh_rejects_unpersisted_token(
    session: Session, token_issuer: TokenIssuer, test_user: User
):
    """A validly signed token that was never stored (or was revoked) is refused."""
    pair = token_issuer.issue_token_pair(
        session, test_user.id, test_user.email, test_user.role
    )
    token_issuer.revoke(session, pair.refresh_token)

    with pytest.raises(InvalidTokenError):
        token_issuer.refresh(session, pair.refresh_token)


def test_refresh_rejects_deleted_user(
    session: Session, token_issuer: TokenIssuer, make_user
):
    user = make_user("gone@example.com")
    pair = token_issuer.issue_token_pair(session, user.id, user.email, user.role)
    session.delete(user)
    session.commit()

    with pytest.raises(InvalidTokenError):
        token_issuer.refresh(session, pair.refresh_token)


# --- revoke ---


def test_revoke(session: Session, token_issuer: TokenIssuer, test_user: User):
    pair = token_issuer.issue_token_pair(
        session, test_user.id, test_user.email, test_user.role
    )

    assert token_issuer.revoke(session, pair.refresh_token) is True
    assert token_issuer.revoke(session, pair.refresh_token) is False
