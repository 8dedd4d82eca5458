"""FastAPI dependencies for authentication and database."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from dnd_companion.config import Settings, get_settings
from dnd_companion.database import get_db
from dnd_companion.exceptions import PermissionDeniedError, TokenInvalidError
from dnd_companion.models.user import User
from dnd_companion.services.credentials import CredentialStore
from dnd_companion.services.tokens import TokenService
from dnd_companion.services.uploads import ProfilePictureStore
from dnd_companion.services.users import UserService

# Missing headers are reported by get_current_user so they get a 401
security = HTTPBearer(auto_error=False)


def get_token_service(
    settings: Annotated[Settings, Depends(get_settings)],
) -> TokenService:
    """Get token service configured with the signing secret."""
    return TokenService(settings)


def get_credential_store(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> CredentialStore:
    """Get credential store with dependencies."""
    return CredentialStore(db, settings)


def get_user_service(
    db: Annotated[Session, Depends(get_db)],
    credentials: Annotated[CredentialStore, Depends(get_credential_store)],
) -> UserService:
    """Get user service with dependencies."""
    return UserService(db, credentials)


def get_picture_store(
    settings: Annotated[Settings, Depends(get_settings)],
) -> ProfilePictureStore:
    return ProfilePictureStore(settings)


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """Get the current authenticated user from the bearer token."""
    if credentials is None:
        raise TokenInvalidError("Not authenticated")

    user_id = tokens.verify(credentials.credentials)

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise TokenInvalidError("User not found")

    return user


def require_self(user_id: int, current_user: User) -> None:
    """Only let users modify their own account."""
    if user_id != current_user.id:
        raise PermissionDeniedError("You can only modify your own account")
