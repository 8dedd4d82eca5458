"""Campaign schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from dnd_companion.schemas.fields import NonEmptyStr


class Monster(BaseModel):
    """A monster entry. Extra stat-block fields are kept as sent."""

    model_config = ConfigDict(extra="allow")

    slug: NonEmptyStr
    name: NonEmptyStr


class CampaignCreate(BaseModel):
    """Create a new campaign."""

    name: NonEmptyStr
    monsters: list[Monster] = []


class CampaignUpdate(BaseModel):
    """Update a campaign."""

    name: NonEmptyStr | None = None
    monsters: list[Monster] | None = None


class CampaignResponse(BaseModel):
    """Campaign response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    monsters: list[dict[str, Any]]
    created_by: int
    created_at: datetime
    updated_at: datetime


class MonsterToggle(BaseModel):
    """Add the monster if absent from the campaign, remove it otherwise."""

    monster: Monster


class MonsterToggleResponse(BaseModel):
    """Result of a monster toggle."""

    campaign: CampaignResponse
    added: bool
    message: str
