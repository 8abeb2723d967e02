"""Signup request exceptions."""

from app.core.exceptions import ConflictError, NotFoundError, ValidationError


class SignupRequestNotFoundError(NotFoundError):
    error_type = "signup_request_not_found"

    def __init__(self, message: str = "Signup request not found"):
        super().__init__(message)


class DuplicateSignupRequestError(ConflictError):
    """Raised when an email already has a pending signup request."""

    error_type = "duplicate_signup_request"

    def __init__(
        self, message: str = "A signup request for this email is already pending"
    ):
        super().__init__(message)


class SignupRequestClosedError(ValidationError):
    """Raised when reviewing a request that is no longer pending."""

    error_type = "signup_request_closed"

    def __init__(self, message: str = "Signup request has already been reviewed"):
        super().__init__(message)


class ReasonNoteRequiredError(ValidationError):
    error_type = "reason_note_required"

    def __init__(
        self,
        message: str = "reason_note is required when rejecting or requesting more info",
    ):
        super().__init__(message)
