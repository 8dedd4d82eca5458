"""Pydantic schemas for API requests and responses."""

from dnd_companion.schemas.auth import (
    AuthResponse,
    ForgotPasswordRequest,
    MessageResponse,
    PasswordResetTokenResponse,
    ResetPasswordRequest,
    UserLogin,
    UserRegister,
)
from dnd_companion.schemas.campaign import (
    CampaignCreate,
    CampaignResponse,
    CampaignUpdate,
    Monster,
    MonsterToggle,
    MonsterToggleResponse,
)
from dnd_companion.schemas.user import UserDetailResponse, UserResponse, UserUpdate

__all__ = [
    "UserRegister",
    "UserLogin",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
    "AuthResponse",
    "PasswordResetTokenResponse",
    "MessageResponse",
    "UserUpdate",
    "UserResponse",
    "UserDetailResponse",
    "Monster",
    "CampaignCreate",
    "CampaignUpdate",
    "CampaignResponse",
    "MonsterToggle",
    "MonsterToggleResponse",
]
