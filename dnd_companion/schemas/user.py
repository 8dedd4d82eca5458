"""User schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, field_validator

from dnd_companion.schemas.campaign import CampaignResponse
from dnd_companion.schemas.fields import Handle, NonEmptyStr, Password


class UserUpdate(BaseModel):
    """Partial profile update. Only the fields sent are changed."""

    first_name: NonEmptyStr | None = None
    last_name: NonEmptyStr | None = None
    handle: Handle | None = None
    email: EmailStr | None = None
    password: Password | None = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str | None) -> str | None:
        return value.strip().lower() if value is not None else None


class UserResponse(BaseModel):
    """User information response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: str
    handle: str
    email: str
    profile_pic: str | None
    created_at: datetime
    updated_at: datetime


class UserDetailResponse(UserResponse):
    """User information including owned campaigns."""

    campaigns: list[CampaignResponse] = []
