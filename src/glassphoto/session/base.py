"""Session capability interface.

A session is one authenticated connection between a user's glasses and this
process. The platform SDK owns the transport; the app only calls these
capabilities and listens on ``events``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Awaitable, Callable

from glassphoto.common.events import EventBus
from glassphoto.session.types import (
    LocationUpdate,
    PhotoData,
    SpeakOptions,
    SpeakResult,
    TextWallOptions,
)

LocationHandler = Callable[[LocationUpdate], Awaitable[None]]


class Session(ABC):
    """Capabilities of a connected pair of glasses.

    Implementations publish device events on ``events`` using the topics in
    ``glassphoto.common.events``.
    """

    def __init__(self) -> None:
        self.events = EventBus()

    @abstractmethod
    async def request_photo(self) -> PhotoData:
        """Capture one photo.

        Raises:
            CaptureError: The camera did not return a photo.
        """

    @abstractmethod
    async def speak(self, text: str, options: SpeakOptions | None = None) -> SpeakResult:
        """Synthesize ``text`` and play it on the glasses."""

    @abstractmethod
    async def show_text_wall(self, text: str, options: TextWallOptions | None = None) -> None:
        """Show ``text`` as a full-screen layout."""

    @abstractmethod
    async def subscribe_location(self, accuracy: str, handler: LocationHandler) -> Callable[[], None]:
        """Start the location stream. Returns an unsubscribe function."""
