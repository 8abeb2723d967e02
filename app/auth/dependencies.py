"""Auth domain dependencies.

The authorization gate. Routes that declare no auth dependency are public.
Protected routes depend on get_current_user (bearer token -> verified
user) and, where they restrict roles, on require_roles(...). Role gating
is purely declarative: admin gets no access a route does not list.
"""

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.auth.exceptions import (
    EmailNotVerifiedError,
    InvalidCredentialsError,
    InvalidTokenError,
    RoleForbiddenError,
)
from app.auth.otp import OtpVerifier
from app.auth.service import AuthService
from app.auth.tokens import TokenIssuer, get_token_issuer
from app.core.deps import SessionDep, SettingsDep
from app.core.email import EmailService, get_email_service
from app.signup.service import SignupReviewService
from app.user.models import User, UserRole

security = HTTPBearer(auto_error=False)

TokenIssuerDep = Annotated[TokenIssuer, Depends(get_token_issuer)]


def get_otp_verifier(
    email_service: Annotated[EmailService, Depends(get_email_service)],
    settings: SettingsDep,
) -> OtpVerifier:
    return OtpVerifier(email_service, expires_in=settings.otp_expires_in)


OtpVerifierDep = Annotated[OtpVerifier, Depends(get_otp_verifier)]


def get_auth_service(
    token_issuer: TokenIssuerDep, otp_verifier: OtpVerifierDep
) -> AuthService:
    return AuthService(token_issuer, otp_verifier)


def get_signup_review_service(otp_verifier: OtpVerifierDep) -> SignupReviewService:
    return SignupReviewService(otp_verifier)


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
SignupReviewServiceDep = Annotated[
    SignupReviewService, Depends(get_signup_review_service)
]


def get_current_user(
    session: SessionDep,
    token_issuer: TokenIssuerDep,
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(security)
    ] = None,
) -> User:
    """Authenticate the bearer token and return the local User.

    The user is re-read on every request, so a deleted or unverified
    account is rejected even while its token is still unexpired.

    Raises:
        InvalidCredentialsError: no bearer token supplied
        InvalidTokenError: token invalid/expired, or its user no longer exists
        EmailNotVerifiedError: the user's email is not verified
    """
    if credentials is None or not credentials.credentials:
        raise InvalidCredentialsError("Not authenticated")

    claims = token_issuer.decode_access_token(credentials.credentials)

    user = session.get(User, claims.sub)
    if user is None:
        raise InvalidTokenError("User not found")

    if not user.email_verified:
        raise EmailNotVerifiedError("Email not verified")

    return user


# Type aliases for dependency injection
CurrentUserDep = Annotated[User, Depends(get_current_user)]


def require_auth(_user: CurrentUserDep) -> None:
    """Require authentication without injecting user into path operation.

    Use as a router-level dependency when all routes require auth:
        router = APIRouter(dependencies=[Depends(require_auth)])

    For endpoints that need the user object, still use CurrentUserDep directly.
    FastAPI caches dependencies, so there's no duplicate auth overhead.
    """


def require_roles(*roles: UserRole) -> Callable[[User], User]:
    """Build a dependency that admits only the given roles.

    Usage:
        @router.post("/jobs", dependencies=[Depends(require_roles(UserRole.company))])
    """
    allowed = frozenset(roles)

    def check_role(user: CurrentUserDep) -> User:
        if user.role not in allowed:
            raise RoleForbiddenError()
        return user

    return check_role


get_admin_user = require_roles(UserRole.admin)

AdminUserDep = Annotated[User, Depends(get_admin_user)]


def require_admin(_user: AdminUserDep) -> None:
    """Require admin privileges without injecting user into path operation.

    Use as a router-level or endpoint-level dependency:
        router = APIRouter(dependencies=[Depends(require_admin)])

    For endpoints that need the admin user object, use AdminUserDep directly.
    """
