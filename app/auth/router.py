"""Auth domain router.

Public routes for signup, login, email verification and token refresh,
plus /auth/me. Handlers stay thin and delegate to AuthService.
"""

from fastapi import APIRouter, status

from app.auth.dependencies import AuthServiceDep, CurrentUserDep
from app.auth.schemas import (
    AuthMessage,
    AuthResponse,
    LoginRequest,
    RefreshRequest,
    ResendOtpRequest,
    SignUpRequest,
    SignUpResponse,
    SignUpStatus,
    TokenPairResponse,
    VerifyEmailRequest,
)
from app.core.constants import CommonResponses, Routes
from app.core.deps import SessionDep
from app.signup.models import SignupRequest
from app.user.schemas import UserPublicRead, UserSummary

router = APIRouter(
    prefix=Routes.AUTH.prefix,
    tags=[Routes.AUTH.tag],
    responses={**CommonResponses.BAD_REQUEST},
)


@router.post(
    "/signup",
    response_model=SignUpResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**CommonResponses.CONFLICT},
)
async def signup(payload: SignUpRequest, session: SessionDep, auth: AuthServiceDep):
    """Register a new account.

    Companies and organizations are queued for admin approval. Other roles
    get an account immediately and a verification code by email.
    """
    result = auth.signup(session, payload)

    if isinstance(result, SignupRequest):
        return SignUpResponse(
            message="Signup request submitted and awaiting admin approval",
            status=SignUpStatus.pending_approval,
            email=result.email,
            request_id=result.id,
        )

    return SignUpResponse(
        message="User created successfully. Please check your email for the verification code.",  # noqa: E501
        status=SignUpStatus.verification_required,
        email=result.email,
        user_id=result.id,
    )


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={**CommonResponses.UNAUTHORIZED},
)
async def login(payload: LoginRequest, session: SessionDep, auth: AuthServiceDep):
    """Login with email or phone and password."""
    user, tokens = auth.login(session, payload.credential(), payload.password)
    return AuthResponse(
        user=UserSummary.model_validate(user),
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
    )


@router.post(
    "/verify-email",
    response_model=AuthResponse,
    responses={**CommonResponses.NOT_FOUND},
)
async def verify_email(
    payload: VerifyEmailRequest, session: SessionDep, auth: AuthServiceDep
):
    """Confirm the emailed code; signs the user in on success."""
    user, tokens = auth.verify_email(session, payload.user_id, payload.code)
    return AuthResponse(
        message="Email verified successfully",
        user=UserSummary.model_validate(user),
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
    )


@router.post(
    "/resend-otp",
    response_model=AuthMessage,
    responses={**CommonResponses.NOT_FOUND},
)
async def resend_otp(
    payload: ResendOtpRequest, session: SessionDep, auth: AuthServiceDep
):
    """Issue a new verification code, replacing the previous one."""
    auth.resend_otp(session, payload.user_id)
    return AuthMessage(message="Verification code sent successfully")


@router.post(
    "/refresh",
    response_model=TokenPairResponse,
    responses={**CommonResponses.UNAUTHORIZED},
)
async def refresh(payload: RefreshRequest, session: SessionDep, auth: AuthServiceDep):
    """Exchange a refresh token for a new pair. Each refresh token works once."""
    tokens = auth.refresh(session, payload.refresh_token)
    return TokenPairResponse(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
    )


@router.post("/logout", response_model=AuthMessage)
async def logout(payload: RefreshRequest, session: SessionDep, auth: AuthServiceDep):
    """Revoke a refresh token."""
    auth.logout(session, payload.refresh_token)
    return AuthMessage(message="Logout successful")


@router.get(
    "/me",
    response_model=UserPublicRead,
    responses={**CommonResponses.UNAUTHORIZED},
)
async def get_me(user: CurrentUserDep):
    """Get current authenticated user."""
    return user
