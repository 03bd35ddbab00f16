"""Per-user state table."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator

if TYPE_CHECKING:
    from glassphoto.photos import StoredPhoto


@dataclass
class UserState:
    """Everything the app remembers about one user."""

    streaming: bool = False
    # Epoch ms; None when the user has no live session
    next_photo_time: int | None = None
    photo: StoredPhoto | None = None
    latest_photo_timestamp: int | None = None


class UserStateTable:
    """Rows of ``UserState`` keyed by user id, created on first access.

    Rows are never removed: a user's last photo outlives their session.
    """

    def __init__(self) -> None:
        self._rows: dict[str, UserState] = {}

    def row(self, user_id: str) -> UserState:
        """Get the row for ``user_id``, creating it if needed."""
        state = self._rows.get(user_id)
        if state is None:
            state = self._rows[user_id] = UserState()
        return state

    def peek(self, user_id: str) -> UserState | None:
        """Get the row for ``user_id`` without creating it."""
        return self._rows.get(user_id)

    def begin_session(self, user_id: str, now_ms: int) -> UserState:
        """Reset a user's row for a newly started session.

        Streaming starts off and the first capture is due immediately.

        Args:
            user_id: User whose glasses connected.
            now_ms: Session start time, epoch milliseconds.

        Returns:
            The user's row.
        """
        state = self.row(user_id)
        state.streaming = False
        state.next_photo_time = now_ms
        return state

    def end_session(self, user_id: str) -> None:
        """Turn streaming off and clear the next-capture time.

        The cached photo is kept.

        Args:
            user_id: User whose session ended.
        """
        state = self.row(user_id)
        state.streaming = False
        state.next_photo_time = None

    def toggle_streaming(self, user_id: str) -> bool:
        """Flip the streaming flag. Returns the new value."""
        state = self.row(user_id)
        state.streaming = not state.streaming
        return state.streaming

    def is_streaming(self, user_id: str) -> bool:
        """Whether streaming is on for ``user_id``. Unknown users are not streaming."""
        state = self._rows.get(user_id)
        return bool(state and state.streaming)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._rows

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[str]:
        return iter(self._rows)
