"""Domain errors raised by the service layer.

The handlers in ``dnd_companion.api.errors`` turn these into HTTP responses;
services never raise ``HTTPException`` themselves.
"""


class CompanionError(Exception):
    """Base class for all application errors."""

    message = "Application error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class CredentialError(CompanionError):
    """Unknown login or wrong password. Callers must not tell the two apart."""

    message = "Invalid login or password"


class TokenError(CompanionError):
    """Bearer token could not be accepted."""

    message = "Invalid authentication credentials"


class TokenInvalidError(TokenError):
    """Bad signature, malformed token or unusable claims."""


class TokenExpiredError(TokenError):
    """Token validity window has elapsed."""

    message = "Authentication token has expired"


class ResetTokenError(CompanionError):
    """Password reset token could not be consumed."""

    message = "Token expired, try again later."


class ResetTokenNotFoundError(ResetTokenError):
    """No user holds the supplied reset token."""


class ResetTokenExpiredError(ResetTokenError):
    """The reset token matched but its window has passed."""


class NotFoundError(CompanionError):
    """Requested resource does not exist."""

    message = "Not found"


class AlreadyExistsError(CompanionError):
    """A unique field value is already taken."""

    def __init__(self, field: str, message: str | None = None):
        super().__init__(message or f"{field.capitalize()} already in use")
        self.field = field


class PermissionDeniedError(CompanionError):
    """Authenticated user may not act on this resource."""

    message = "You don't have permission to modify this resource"


class ValidationError(CompanionError):
    """Input passed schema checks but is still unusable (e.g. wrong file type)."""

    message = "Invalid input"

    def __init__(self, field: str, message: str | None = None):
        super().__init__(message)
        self.field = field
