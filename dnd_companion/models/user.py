"""User model."""

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from dnd_companion.database import Base
from dnd_companion.models.mixins import TimestampMixin


class User(Base, TimestampMixin):
    """User model for authentication and campaign ownership."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    handle = Column(String(100), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    profile_pic = Column(String(1024), nullable=True)

    # Password reset: sha256 hex digest of the emailed secret, never the secret itself
    password_reset_token = Column(String(64), unique=True, nullable=True)
    password_reset_token_expires = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    campaigns = relationship(
        "Campaign",
        back_populates="owner",
        cascade="all, delete-orphan",
        order_by="Campaign.id",
    )

    def clear_reset_token(self) -> None:
        """Drop both reset fields together."""
        self.password_reset_token = None
        self.password_reset_token_expires = None
