"""Campaign API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from dnd_companion.api.dependencies import get_current_user
from dnd_companion.database import get_db
from dnd_companion.exceptions import AlreadyExistsError, NotFoundError, PermissionDeniedError
from dnd_companion.models.campaign import Campaign
from dnd_companion.models.user import User
from dnd_companion.schemas.auth import MessageResponse
from dnd_companion.schemas.campaign import (
    CampaignCreate,
    CampaignResponse,
    CampaignUpdate,
    MonsterToggle,
    MonsterToggleResponse,
)

router = APIRouter(prefix="/campaigns", tags=["campaigns"])

NAME_IN_USE = "Name already in use."


def get_campaign(db: Session, campaign_id: int) -> Campaign:
    """Get a campaign by id or raise NotFoundError."""
    campaign = db.query(Campaign).filter(Campaign.id == campaign_id).first()
    if not campaign:
        raise NotFoundError("Campaign not found")
    return campaign


def get_owned_campaign(db: Session, campaign_id: int, user: User) -> Campaign:
    """Get a campaign the user created; other users' campaigns are read-only."""
    campaign = get_campaign(db, campaign_id)
    if campaign.created_by != user.id:
        raise PermissionDeniedError("Only the owner can modify this campaign")
    return campaign


def name_taken(db: Session, name: str, exclude_id: int | None = None) -> bool:
    query = db.query(Campaign.id).filter(Campaign.name == name)
    if exclude_id is not None:
        query = query.filter(Campaign.id != exclude_id)
    return query.first() is not None


def commit_unique_name(db: Session) -> None:
    """Commit, reporting a campaign-name constraint violation as AlreadyExistsError."""
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise AlreadyExistsError("name", NAME_IN_USE) from e


@router.post("", response_model=CampaignResponse, status_code=status.HTTP_201_CREATED)
def create_campaign(
    campaign_data: CampaignCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Create a new campaign owned by the current user."""
    if name_taken(db, campaign_data.name):
        raise AlreadyExistsError("name", NAME_IN_USE)

    campaign = Campaign(
        name=campaign_data.name,
        monsters=[monster.model_dump() for monster in campaign_data.monsters],
        created_by=current_user.id,
    )
    db.add(campaign)
    commit_unique_name(db)
    db.refresh(campaign)
    return campaign


@router.get("", response_model=list[CampaignResponse] | CampaignResponse)
def get_campaigns(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    created_by: int | None = Query(default=None, description="Only campaigns of this user"),
    campaign_id: int | None = Query(default=None, alias="id", description="A single campaign"),
):
    """Get campaigns, optionally filtered by creator, or a single one by ``id``."""
    if campaign_id is not None:
        return get_campaign(db, campaign_id)

    query = db.query(Campaign)
    if created_by is not None:
        query = query.filter(Campaign.created_by == created_by)
    return query.order_by(Campaign.id).all()


@router.get("/{campaign_id}", response_model=CampaignResponse)
def read_campaign(
    campaign_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get a specific campaign."""
    return get_campaign(db, campaign_id)


@router.put("/{campaign_id}", response_model=CampaignResponse)
def update_campaign(
    campaign_id: int,
    campaign_data: CampaignUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Update a campaign (owner only)."""
    campaign = get_owned_campaign(db, campaign_id, current_user)

    if campaign_data.name is not None:
        if name_taken(db, campaign_data.name, exclude_id=campaign.id):
            raise AlreadyExistsError("name", NAME_IN_USE)
        campaign.name = campaign_data.name
    if campaign_data.monsters is not None:
        campaign.monsters = [monster.model_dump() for monster in campaign_data.monsters]

    commit_unique_name(db)
    db.refresh(campaign)
    return campaign


@router.put("/{campaign_id}/monsters", response_model=MonsterToggleResponse)
def toggle_monster(
    campaign_id: int,
    toggle: MonsterToggle,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Add a monster to the campaign, or remove it if it is already there.

    Monsters are matched by slug.
    """
    campaign = get_owned_campaign(db, campaign_id, current_user)
    monster = toggle.monster
    monsters = list(campaign.monsters or [])

    # JSON columns don't track in-place mutation, so always assign a new list
    if campaign.has_monster(monster.slug):
        campaign.monsters = [m for m in monsters if m.get("slug") != monster.slug]
        added = False
        message = f"{monster.name} has been removed from {campaign.name}."
    else:
        campaign.monsters = [*monsters, monster.model_dump()]
        added = True
        message = f"{monster.name} has been added to {campaign.name}."

    db.commit()
    db.refresh(campaign)

    return MonsterToggleResponse(
        campaign=CampaignResponse.model_validate(campaign),
        added=added,
        message=message,
    )


@router.delete("/{campaign_id}", response_model=MessageResponse)
def delete_campaign(
    campaign_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Delete a campaign (owner only)."""
    campaign = get_owned_campaign(db, campaign_id, current_user)
    db.delete(campaign)
    db.commit()
    return MessageResponse(message="Campaign deleted successfully!")
