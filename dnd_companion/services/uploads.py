"""Profile picture storage on the local filesystem."""

import logging
import mimetypes
import uuid
from pathlib import Path

from dnd_companion.config import Settings
from dnd_companion.exceptions import ValidationError

logger = logging.getLogger(__name__)

IMAGES_SUBDIR = "images"
DEFAULT_EXTENSION = ".png"

# Raster formats only; SVG can carry script and is served from our own origin
ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}


class ProfilePictureStore:
    """Writes uploaded images under ``<upload_dir>/images`` and builds their public URL."""

    def __init__(self, settings: Settings):
        self.settings = settings

    @property
    def images_dir(self) -> Path:
        return Path(self.settings.upload_dir) / IMAGES_SUBDIR

    def _extension(self, content_type: str, filename: str | None) -> str:
        suffix = Path(filename).suffix.lower() if filename else ""
        if suffix and mimetypes.guess_type(f"file{suffix}")[0] == content_type:
            return suffix
        return mimetypes.guess_extension(content_type) or DEFAULT_EXTENSION

    def save(
        self, user_id: int, data: bytes, content_type: str | None, filename: str | None
    ) -> str:
        """Store an image and return the URL it will be served from.

        Raises:
            ValidationError: not an allowed image type, empty, or over the size limit.
        """
        if content_type not in ALLOWED_IMAGE_TYPES:
            raise ValidationError("file", "Unsupported file format.")
        if not data:
            raise ValidationError("file", "File is empty.")
        if len(data) > self.settings.max_upload_bytes:
            raise ValidationError(
                "file", f"File too large. Maximum size is {self.settings.max_upload_bytes} bytes."
            )

        # Stored names never reuse the client's filename
        name = f"{user_id}-{uuid.uuid4().hex}{self._extension(content_type, filename)}"
        self.images_dir.mkdir(parents=True, exist_ok=True)
        (self.images_dir / name).write_bytes(data)
        logger.info(f"Stored profile picture {name} for user {user_id}")

        base_url = self.settings.public_base_url.rstrip("/")
        return f"{base_url}/uploads/{IMAGES_SUBDIR}/{name}"
