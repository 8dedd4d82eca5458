"""Authentication API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from dnd_companion.api.dependencies import (
    get_credential_store,
    get_current_user,
    get_token_service,
    get_user_service,
)
from dnd_companion.exceptions import NotFoundError
from dnd_companion.models.user import User
from dnd_companion.schemas.auth import (
    AuthResponse,
    ForgotPasswordRequest,
    MessageResponse,
    PasswordResetTokenResponse,
    ResetPasswordRequest,
    UserLogin,
    UserRegister,
)
from dnd_companion.schemas.user import UserDetailResponse
from dnd_companion.services.credentials import CredentialStore
from dnd_companion.services.tokens import TokenService
from dnd_companion.services.users import UserService

router = APIRouter(prefix="/users", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    user_data: UserRegister,
    users: Annotated[UserService, Depends(get_user_service)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
):
    """Register a new user."""
    user = users.register(user_data)

    return AuthResponse(
        access_token=tokens.issue(user.id),
        user=UserDetailResponse.model_validate(user),
    )


@router.post("/login", response_model=AuthResponse)
def login(
    credentials: UserLogin,
    store: Annotated[CredentialStore, Depends(get_credential_store)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
):
    """Login with email or handle and password."""
    user = store.authenticate(credentials.login, credentials.password)

    return AuthResponse(
        access_token=tokens.issue(user.id),
        user=UserDetailResponse.model_validate(user),
    )


@router.put("/generate-password-token", response_model=PasswordResetTokenResponse)
def generate_password_token(
    request: ForgotPasswordRequest,
    store: Annotated[CredentialStore, Depends(get_credential_store)],
):
    """Issue a password reset token.

    There is no mail delivery, so the token is returned to the caller, who is
    expected to pass it on out of band.
    """
    user = store.find_by_email(request.email)
    if user is None:
        raise NotFoundError("User not found")

    return PasswordResetTokenResponse(reset_token=store.issue_reset_token(user))


@router.put("/reset-password", response_model=MessageResponse)
def reset_password(
    request: ResetPasswordRequest,
    store: Annotated[CredentialStore, Depends(get_credential_store)],
):
    """Set a new password with a reset token."""
    store.consume_reset_token(request.token, request.password)
    return MessageResponse(message="Password updated successfully!")


@router.get("/me", response_model=UserDetailResponse)
def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Get current user information."""
    return current_user
