"""User domain exceptions.

User-related exceptions for not found, conflict and protected-account
scenarios.
"""

from app.core.exceptions import AuthorizationError, ConflictError, NotFoundError


class UserNotFoundError(NotFoundError):
    """Raised when user cannot be found."""

    error_type = "user_not_found"

    def __init__(self, message: str = "User not found"):
        super().__init__(message)


class EmailExistsError(ConflictError):
    """Raised when an email is already used by another account."""

    error_type = "email_exists"

    def __init__(self, message: str = "User with this email already exists"):
        super().__init__(message)


class PhoneExistsError(ConflictError):
    """Raised when a phone number is already used by another account."""

    error_type = "phone_exists"

    def __init__(self, message: str = "User with this phone number already exists"):
        super().__init__(message)


class AdminDeletionError(AuthorizationError):
    """Raised when attempting to delete an admin account."""

    error_type = "admin_deletion_forbidden"

    def __init__(self, message: str = "Admin users cannot be deleted"):
        super().__init__(message)
