"""Password hashing and password-reset token handling."""

import hashlib
import logging
import secrets
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from functools import lru_cache

from passlib.context import CryptContext
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from dnd_companion.config import Settings
from dnd_companion.exceptions import (
    CredentialError,
    ResetTokenExpiredError,
    ResetTokenNotFoundError,
)
from dnd_companion.models.user import User
from dnd_companion.services.tokens import utc_now

logger = logging.getLogger(__name__)

RESET_TOKEN_BYTES = 32


@lru_cache
def _crypt_context(rounds: int) -> CryptContext:
    # bcrypt_sha256 pre-hashes, so passwords past bcrypt's 72-byte limit still count in full.
    # Plain bcrypt hashes still verify and are upgraded on the next login.
    return CryptContext(
        schemes=["bcrypt_sha256", "bcrypt"],
        deprecated="auto",
        bcrypt_sha256__rounds=rounds,
        bcrypt__rounds=rounds,
    )


def hash_reset_token(token: str) -> str:
    """Digest a reset token for storage.

    Reset tokens are random and single-use, so an unsalted digest is enough
    to make the stored value useless to someone reading the database.
    """
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive timestamps (SQLite drops tzinfo on the way back)."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


class CredentialStore:
    """Owns the password hash and reset-token fields of a user record."""

    def __init__(
        self,
        db: Session,
        settings: Settings,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.db = db
        self.settings = settings
        self.clock = clock
        self.pwd_context = _crypt_context(settings.bcrypt_rounds)

    @property
    def reset_window(self) -> timedelta:
        return timedelta(minutes=self.settings.password_reset_expiration_minutes)

    def hash_password(self, password: str) -> str:
        """Hash a password with a fresh salt."""
        return self.pwd_context.hash(password)

    def verify_password(self, plain_password: str, hashed_password: str | None) -> bool:
        """Verify a password against its hash."""
        if not hashed_password:
            return False
        try:
            return self.pwd_context.verify(plain_password, hashed_password)
        except ValueError:
            logger.warning("Stored password hash is not a recognised format")
            return False

    def set_password(self, user: User, new_password: str) -> None:
        """Replace a user's password and void any outstanding reset token.

        The caller commits.
        """
        user.password_hash = self.hash_password(new_password)
        user.clear_reset_token()

    def find_by_login(self, login: str) -> User | None:
        """Find a user by email (case-insensitive) or handle."""
        return (
            self.db.query(User)
            .filter(or_(func.lower(User.email) == login.strip().lower(), User.handle == login))
            .first()
        )

    def find_by_email(self, email: str) -> User | None:
        return (
            self.db.query(User).filter(func.lower(User.email) == email.strip().lower()).first()
        )

    def authenticate(self, login: str, password: str) -> User:
        """Return the user for a login/password pair.

        Raises:
            CredentialError: for an unknown login and for a wrong password alike.
        """
        user = self.find_by_login(login)
        if user is None:
            # Burn the same time a real check would take
            self.pwd_context.dummy_verify()
            logger.info("Login failed: unknown login")
            raise CredentialError()
        if not self.verify_password(password, user.password_hash):
            logger.info(f"Login failed: bad password for user {user.id}")
            raise CredentialError()
        if self.pwd_context.needs_update(user.password_hash):
            user.password_hash = self.hash_password(password)
            self.db.commit()
        return user

    def issue_reset_token(self, user: User) -> str:
        """Generate a reset token for the user and store its digest.

        Any earlier unconsumed token is overwritten. Returns the plaintext
        token, which is never stored.
        """
        token = secrets.token_hex(RESET_TOKEN_BYTES)
        user.password_reset_token = hash_reset_token(token)
        user.password_reset_token_expires = self.clock() + self.reset_window
        self.db.commit()
        logger.info(f"Issued password reset token for user {user.id}")
        return token

    def consume_reset_token(self, token: str, new_password: str) -> User:
        """Set a new password using a reset token.

        The password change and the clearing of the token happen in one
        commit, so a token can be used once at most.

        Raises:
            ResetTokenNotFoundError: no user holds this token.
            ResetTokenExpiredError: the token matched but its window has passed.
        """
        user = (
            self.db.query(User)
            .filter(User.password_reset_token == hash_reset_token(token))
            .with_for_update()
            .first()
        )
        if user is None:
            raise ResetTokenNotFoundError()

        expires = as_utc(user.password_reset_token_expires)
        if expires is None or expires <= self.clock():
            user.clear_reset_token()
            self.db.commit()
            logger.info(f"Expired password reset token presented for user {user.id}")
            raise ResetTokenExpiredError()

        self.set_password(user, new_password)
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"Password reset completed for user {user.id}")
        return user
