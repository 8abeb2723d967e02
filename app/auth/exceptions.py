"""Auth domain exceptions.

Authentication, authorization and email verification exceptions.
"""

from app.core.exceptions import AuthenticationError, AuthorizationError, ValidationError


class TokenConfigurationError(RuntimeError):
    """Raised at startup when JWT signing secrets are missing."""


# Authentication errors (401)
class InvalidCredentialsError(AuthenticationError):
    """Raised when the login identifier/password combination is invalid."""

    error_type = "invalid_credentials"

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)


class InvalidTokenError(AuthenticationError):
    """Raised when a token is malformed, expired, revoked or wrongly signed."""

    error_type = "invalid_token"

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message)


class EmailNotVerifiedError(AuthenticationError):
    """Raised when an unverified account tries to authenticate."""

    error_type = "email_not_verified"

    def __init__(self, message: str = "Please verify your email before logging in"):
        super().__init__(message)


# Authorization errors (403)
class RoleForbiddenError(AuthorizationError):
    """Raised when the user's role is not allowed on a route."""

    error_type = "role_forbidden"

    def __init__(self, message: str = "Insufficient role for this resource"):
        super().__init__(message)


# Validation errors (400) - email verification
class EmailVerificationError(ValidationError):
    """Base class for email verification failures."""

    error_type = "email_verification_error"

    def __init__(self, message: str = "Email verification failed"):
        super().__init__(message)


class EmailAlreadyVerifiedError(EmailVerificationError):
    error_type = "email_already_verified"

    def __init__(self, message: str = "Email already verified"):
        super().__init__(message)


class InvalidOtpError(EmailVerificationError):
    error_type = "invalid_otp"

    def __init__(self, message: str = "Invalid verification code"):
        super().__init__(message)


class OtpExpiredError(EmailVerificationError):
    error_type = "otp_expired"

    def __init__(self, message: str = "Verification code has expired"):
        super().__init__(message)
