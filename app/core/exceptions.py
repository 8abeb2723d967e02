"""App-wide exception hierarchy.

Every error the API reports derives from AppException, which carries the
HTTP status code and a stable error_type. Domain packages (auth, user,
signup) subclass the families defined here; the handlers in
app.core.exception_handlers turn them into {"type", "message"} bodies.
"""


class AppException(Exception):
    """Base exception for all application errors.

    Subclasses set status_code and error_type and give a default message.
    """

    status_code: int = 500
    error_type: str = "internal_error"

    def __init__(self, message: str = "An unexpected error occurred"):
        self.message = message
        super().__init__(message)

    def to_payload(self) -> dict[str, str]:
        return {"type": self.error_type, "message": self.message}


# 400
class ValidationError(AppException):
    """Request is well formed but breaks a business rule."""

    status_code = 400
    error_type = "validation_error"

    def __init__(self, message: str = "Validation failed"):
        super().__init__(message)


class BadRequestError(ValidationError):
    error_type = "bad_request"

    def __init__(self, message: str = "Bad request"):
        super().__init__(message)


# 401
class AuthenticationError(AppException):
    """Caller could not be identified: bad credentials, token or account state."""

    status_code = 401
    error_type = "authentication_error"

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message)


# 403
class AuthorizationError(AppException):
    """Caller is known but not allowed to do this."""

    status_code = 403
    error_type = "authorization_error"

    def __init__(self, message: str = "Access denied"):
        super().__init__(message)


# 404
class NotFoundError(AppException):
    status_code = 404
    error_type = "not_found"

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message)


# 409
class ConflictError(AppException):
    """Unique email, phone or pending signup request already taken."""

    status_code = 409
    error_type = "conflict"

    def __init__(self, message: str = "Resource conflict"):
        super().__init__(message)


# 500
class InternalError(AppException):
    """Body sent for failures the API does not otherwise describe."""

    status_code = 500
    error_type = "internal_error"

    def __init__(self, message: str = "An unexpected error occurred"):
        super().__init__(message)
