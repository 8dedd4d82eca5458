"""Campaign model."""

from sqlalchemy import JSON, Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from dnd_companion.database import Base
from dnd_companion.models.mixins import TimestampMixin


class Campaign(Base, TimestampMixin):
    """Campaign model owned by a user, holding the monsters tracked for it."""

    __tablename__ = "campaigns"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False, index=True)
    # Monsters: [{"slug": "goblin", "name": "Goblin", ...}, ...]
    monsters = Column(JSON, nullable=False, default=list)
    created_by = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Relationships
    owner = relationship("User", back_populates="campaigns")

    def has_monster(self, slug: str) -> bool:
        """Check if a monster with the given slug is already in the campaign."""
        return any(monster.get("slug") == slug for monster in self.monsters or [])
