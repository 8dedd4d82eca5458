"""User account service."""

import logging

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from dnd_companion.exceptions import AlreadyExistsError, NotFoundError
from dnd_companion.models.user import User
from dnd_companion.schemas.auth import UserRegister
from dnd_companion.schemas.user import UserUpdate
from dnd_companion.services.credentials import CredentialStore

logger = logging.getLogger(__name__)


class UserService:
    """Service for user account operations."""

    def __init__(self, db: Session, credentials: CredentialStore):
        self.db = db
        self.credentials = credentials

    def get(self, user_id: int) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if user is None:
            raise NotFoundError("User not found")
        return user

    def list_users(self) -> list[User]:
        return self.db.query(User).options(selectinload(User.campaigns)).order_by(User.id).all()

    def find_conflict(
        self, email: str | None, handle: str | None, exclude_id: int | None = None
    ) -> str | None:
        """Return the first of ``email``/``handle`` already taken by another user."""
        conditions = []
        if email is not None:
            conditions.append(func.lower(User.email) == email.lower())
        if handle is not None:
            conditions.append(User.handle == handle)
        if not conditions:
            return None

        query = self.db.query(User).filter(or_(*conditions))
        if exclude_id is not None:
            query = query.filter(User.id != exclude_id)
        existing = query.first()
        if existing is None:
            return None
        if email is not None and existing.email.lower() == email.lower():
            return "email"
        return "handle"

    def _commit_unique(self, email: str | None, handle: str | None, user_id: int | None) -> None:
        """Commit, turning a unique-constraint violation into AlreadyExistsError.

        The pre-check in the callers only gives a friendly message; two
        concurrent writers can both pass it, and the database constraint
        decides which one wins.
        """
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            field = self.find_conflict(email, handle, exclude_id=user_id) or "email"
            logger.warning(f"Unique constraint rejected user write on {field}")
            raise AlreadyExistsError(field) from e

    def register(self, data: UserRegister) -> User:
        """Create a user with a hashed password.

        Raises:
            AlreadyExistsError: email or handle is taken.
        """
        conflict = self.find_conflict(data.email, data.handle)
        if conflict:
            raise AlreadyExistsError(conflict)

        user = User(
            first_name=data.first_name,
            last_name=data.last_name,
            handle=data.handle,
            email=data.email,
            password_hash=self.credentials.hash_password(data.password),
        )
        self.db.add(user)
        self._commit_unique(data.email, data.handle, None)
        self.db.refresh(user)
        logger.info(f"Registered user {user.id}")
        return user

    def update(self, user: User, data: UserUpdate) -> User:
        """Apply a partial profile update."""
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        email = changes.get("email")
        handle = changes.get("handle")

        conflict = self.find_conflict(email, handle, exclude_id=user.id)
        if conflict:
            raise AlreadyExistsError(conflict)

        password = changes.pop("password", None)
        for field, value in changes.items():
            setattr(user, field, value)
        if password is not None:
            self.credentials.set_password(user, password)

        self._commit_unique(email, handle, user.id)
        self.db.refresh(user)
        return user

    def set_profile_pic(self, user: User, url: str) -> User:
        user.profile_pic = url
        self.db.commit()
        self.db.refresh(user)
        return user

    def delete(self, user: User) -> None:
        """Delete a user and, through the relationship cascade, their campaigns."""
        user_id = user.id
        self.db.delete(user)
        self.db.commit()
        logger.info(f"Deleted user {user_id}")
