"""Latest-photo cache, one photo per user."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from glassphoto.common.logging import get_logger
from glassphoto.session.types import PhotoData
from glassphoto.state import UserStateTable


@dataclass
class StoredPhoto:
    """A captured photo with its owner."""

    request_id: str
    buffer: bytes
    timestamp: datetime
    user_id: str
    mime_type: str
    filename: str
    size: int

    @property
    def timestamp_ms(self) -> int:
        """Capture time as epoch milliseconds."""
        return int(self.timestamp.timestamp() * 1000)

    @classmethod
    def from_photo(cls, photo: PhotoData, user_id: str) -> StoredPhoto:
        """Copy a captured photo, tagging it with its owner."""
        return cls(
            request_id=photo.request_id,
            buffer=photo.buffer,
            timestamp=photo.timestamp,
            user_id=user_id,
            mime_type=photo.mime_type,
            filename=photo.filename,
            size=photo.size,
        )


class PhotoCache:
    """Keeps the most recent photo of each user.

    Every store overwrites the previous photo. Nothing is evicted or
    persisted, and entries survive session stop.
    """

    def __init__(self, table: UserStateTable) -> None:
        self._table = table
        self.logger = get_logger("photo_cache")

    def store(self, user_id: str, photo: PhotoData) -> StoredPhoto:
        """Make ``photo`` the latest photo of ``user_id``.

        Args:
            user_id: Owner of the photo.
            photo: Photo returned by the session.

        Returns:
            The stored copy.
        """
        stored = StoredPhoto.from_photo(photo, user_id)
        state = self._table.row(user_id)
        state.photo = stored
        state.latest_photo_timestamp = stored.timestamp_ms

        self.logger.info(
            "photo_cached",
            user_id=user_id,
            request_id=stored.request_id,
            timestamp=stored.timestamp.isoformat(),
            size=stored.size,
        )
        return stored

    def get(self, user_id: str) -> StoredPhoto | None:
        """Get the latest photo of ``user_id``.

        Args:
            user_id: Owner to look up.

        Returns:
            The stored photo, or None if the user has none.
        """
        state = self._table.peek(user_id)
        return state.photo if state else None

    def latest_timestamp(self, user_id: str) -> int | None:
        """Capture time of the latest photo in epoch ms, or None."""
        state = self._table.peek(user_id)
        return state.latest_photo_timestamp if state else None
