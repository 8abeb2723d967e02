"""Access/refresh token issuing.

Tokens are HS256 JWTs carrying {sub, email, role}. Access and refresh
tokens are signed with distinct secrets. Every refresh token is persisted
and deleted on redemption, so each one can be exchanged at most once.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import Any

import jwt
from sqlalchemy import delete
from sqlmodel import Session, col, select

from app.auth.exceptions import InvalidTokenError, TokenConfigurationError
from app.auth.models import RefreshToken
from app.core.mixins import as_utc
from app.core.settings import get_settings
from app.user.models import User, UserRole

logger = logging.getLogger(__name__)

_EXPIRY_UNIT_MS = {
    "s": 1000,
    "m": 60 * 1000,
    "h": 60 * 60 * 1000,
    "d": 24 * 60 * 60 * 1000,
}
DEFAULT_EXPIRY_MS = 7 * 24 * 60 * 60 * 1000


def parse_expiry(value: str) -> int:
    """Convert a duration such as "15m" or "7d" to milliseconds.

    The last character is the unit (s, m, h, d) and the rest an integer.
    Anything else falls back to 7 days.
    """
    value = value.strip()
    multiplier = _EXPIRY_UNIT_MS.get(value[-1:])
    if multiplier is None:
        return DEFAULT_EXPIRY_MS
    try:
        amount = int(value[:-1])
    except ValueError:
        return DEFAULT_EXPIRY_MS
    if amount <= 0:
        return DEFAULT_EXPIRY_MS
    return amount * multiplier


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


@dataclass(frozen=True)
class TokenClaims:
    """Verified token payload."""

    sub: uuid.UUID
    email: str
    role: UserRole


class TokenIssuer:
    """Signs, verifies and rotates token pairs."""

    def __init__(
        self,
        secret: str | None,
        refresh_secret: str | None,
        expires_in: str = "15m",
        refresh_expires_in: str = "7d",
        algorithm: str = "HS256",
    ):
        if not secret or not refresh_secret:
            raise TokenConfigurationError("JWT secrets are not configured")
        self._secret = secret
        self._refresh_secret = refresh_secret
        self._access_lifetime = timedelta(milliseconds=parse_expiry(expires_in))
        self._refresh_lifetime = timedelta(
            milliseconds=parse_expiry(refresh_expires_in)
        )
        self._algorithm = algorithm

    def _encode(
        self,
        secret: str,
        lifetime: timedelta,
        now: datetime,
        user_id: uuid.UUID,
        email: str,
        role: UserRole,
    ) -> str:
        payload: dict[str, Any] = {
            "sub": str(user_id),
            "email": email,
            "role": role.value,
            "iat": now,
            "exp": now + lifetime,
            # Keeps two pairs minted in the same second distinct
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(payload, secret, algorithm=self._algorithm)

    def _decode(self, token: str, secret: str) -> TokenClaims:
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp", "role"]},
            )
            return TokenClaims(
                sub=uuid.UUID(payload["sub"]),
                email=payload.get("email", ""),
                role=UserRole(payload["role"]),
            )
        except (jwt.PyJWTError, KeyError, ValueError) as e:
            # Expired, malformed and wrongly signed tokens look the same to callers
            raise InvalidTokenError() from e

    def decode_access_token(self, token: str) -> TokenClaims:
        return self._decode(token, self._secret)

    def decode_refresh_token(self, token: str) -> TokenClaims:
        return self._decode(token, self._refresh_secret)

    def issue_token_pair(
        self,
        session: Session,
        user_id: uuid.UUID,
        email: str,
        role: UserRole,
    ) -> TokenPair:
        """Sign a new pair and persist the refresh token.

        Commits the session, so any pending changes are committed with it.
        """
        now = datetime.now(UTC)
        access_token = self._encode(
            self._secret, self._access_lifetime, now, user_id, email, role
        )
        refresh_token = self._encode(
            self._refresh_secret, self._refresh_lifetime, now, user_id, email, role
        )

        session.add(
            RefreshToken(
                token=refresh_token,
                user_id=user_id,
                expires_at=now + self._refresh_lifetime,
            )
        )
        session.commit()

        return TokenPair(access_token=access_token, refresh_token=refresh_token)

    def refresh(self, session: Session, refresh_token: str) -> TokenPair:
        """Exchange a refresh token for a new pair, deleting the old row.

        Raises:
            InvalidTokenError: bad signature, expired token, unknown or
                already-redeemed token, or the owning user is gone.
        """
        self.decode_refresh_token(refresh_token)

        stored = session.exec(
            select(RefreshToken).where(RefreshToken.token == refresh_token)
        ).first()
        if stored is None or as_utc(stored.expires_at) < datetime.now(UTC):
            raise InvalidTokenError("Invalid or expired refresh token")

        user = session.get(User, stored.user_id)
        if user is None:
            raise InvalidTokenError("Invalid or expired refresh token")

        # Only the request whose DELETE removes the row may mint a new pair
        result = session.exec(
            delete(RefreshToken).where(col(RefreshToken.id) == stored.id)
        )
        if result.rowcount != 1:
            session.rollback()
            raise InvalidTokenError("Invalid or expired refresh token")

        pair = self.issue_token_pair(session, user.id, user.email, user.role)
        logger.info("Refresh token rotated", extra={"user_id": user.id})
        return pair

    def revoke(self, session: Session, refresh_token: str) -> bool:
        """Delete a persisted refresh token. Returns False if it was unknown."""
        result = session.exec(
            delete(RefreshToken).where(col(RefreshToken.token) == refresh_token)
        )
        session.commit()
        return result.rowcount > 0


@lru_cache
def get_token_issuer() -> TokenIssuer:
    """Get cached token issuer.

    Raises TokenConfigurationError when secrets are missing; the app
    lifespan calls this once so the error aborts startup.
    """
    settings = get_settings()
    return TokenIssuer(
        secret=settings.jwt_secret,
        refresh_secret=settings.jwt_refresh_secret,
        expires_in=settings.jwt_expires_in,
        refresh_expires_in=settings.jwt_refresh_expires_in,
        algorithm=settings.jwt_algorithm,
    )
