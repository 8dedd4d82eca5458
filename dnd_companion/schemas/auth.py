"""Authentication schemas."""

from pydantic import BaseModel, EmailStr, Field, field_validator

from dnd_companion.schemas.fields import Handle, NonEmptyStr, Password
from dnd_companion.schemas.user import UserDetailResponse


class UserRegister(BaseModel):
    """User registration request."""

    first_name: NonEmptyStr
    last_name: NonEmptyStr
    handle: Handle
    email: EmailStr = Field(..., max_length=255)
    password: Password

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class UserLogin(BaseModel):
    """User login request. ``login`` is either the email or the handle."""

    login: NonEmptyStr
    password: Password


class ForgotPasswordRequest(BaseModel):
    """Request a password reset token."""

    email: EmailStr = Field(..., max_length=255)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class ResetPasswordRequest(BaseModel):
    """Set a new password with a reset token."""

    token: NonEmptyStr
    password: Password


class AuthResponse(BaseModel):
    """Authentication response with token and user info."""

    access_token: str
    token_type: str = "bearer"  # noqa: S105
    user: UserDetailResponse


class PasswordResetTokenResponse(BaseModel):
    """Reset token handed back for out-of-band delivery."""

    reset_token: str
    message: str = "Token generated successfully!"


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str
