"""SQLAlchemy models."""

from dnd_companion.models.campaign import Campaign
from dnd_companion.models.user import User

__all__ = [
    "User",
    "Campaign",
]
