"""Session token issuing and verification."""

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from jose import ExpiredSignatureError, JWTError, jwt
from jose.utils import base64url_decode, base64url_encode

from dnd_companion.config import Settings
from dnd_companion.exceptions import TokenExpiredError, TokenInvalidError

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(UTC)


def is_canonical(token: str) -> bool:
    """Check that every segment is base64url with no spare bits set.

    The last character of a segment can carry unused bits that decoding
    ignores, so several spellings decode to the same bytes. Only the
    spelling the encoder produces is accepted.
    """
    segments = token.split(".")
    if len(segments) != 3:
        return False
    try:
        encoded = [segment.encode("ascii") for segment in segments]
        return all(base64url_encode(base64url_decode(seg)) == seg for seg in encoded)
    except (ValueError, UnicodeError):
        return False


class TokenService:
    """Issue and verify self-contained, signed bearer tokens.

    A token binds a user id to an expiry. Verification needs only the signing
    secret, there is no server-side session store.
    """

    def __init__(self, settings: Settings, clock: Callable[[], datetime] = utc_now):
        self.settings = settings
        self.clock = clock

    @property
    def lifetime(self) -> timedelta:
        return timedelta(minutes=self.settings.jwt_expiration_minutes)

    def issue(self, user_id: int) -> str:
        """Create a signed token for the given user."""
        now = self.clock()
        claims = {
            "sub": str(user_id),
            "iat": int(now.timestamp()),
            "exp": int((now + self.lifetime).timestamp()),
        }
        return jwt.encode(claims, self.settings.jwt_secret, algorithm=self.settings.jwt_algorithm)

    def verify(self, token: str) -> int:
        """Return the user id carried by a token.

        The encoding and signature are checked before any claim, so a tampered
        token is reported as invalid even when its expiry has also passed.

        Raises:
            TokenInvalidError: bad signature, malformed token or unusable subject.
            TokenExpiredError: signature is good but the token has expired.
        """
        if not is_canonical(token):
            raise TokenInvalidError()

        try:
            payload = jwt.decode(
                token,
                self.settings.jwt_secret,
                algorithms=[self.settings.jwt_algorithm],
            )
        except ExpiredSignatureError as e:
            raise TokenExpiredError() from e
        except JWTError as e:
            logger.debug(f"Rejected bearer token: {e}")
            raise TokenInvalidError() from e

        subject = payload.get("sub")
        try:
            return int(subject)
        except (TypeError, ValueError) as e:
            raise TokenInvalidError() from e
