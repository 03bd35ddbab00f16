"""Mock session for development and testing."""

from __future__ import annotations

import asyncio
import io
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

from glassphoto.common.errors import CaptureError, SessionError, SpeechError
from glassphoto.common.events import (
    BUTTON_PRESS,
    GLASSES_BATTERY,
    LOCATION_UPDATE,
    TRANSCRIPTION,
    Event,
)
from glassphoto.common.logging import get_logger
from glassphoto.session.base import LocationHandler, Session
from glassphoto.session.types import (
    BatteryData,
    ButtonPress,
    LocationUpdate,
    PhotoData,
    SpeakOptions,
    SpeakResult,
    TextWallOptions,
    TranscriptionData,
)


@dataclass
class SpokenText:
    """A recorded ``speak`` call."""

    text: str
    options: SpeakOptions | None


@dataclass
class ShownText:
    """A recorded ``show_text_wall`` call."""

    text: str
    options: TextWallOptions | None


@dataclass
class MockSession(Session):
    """In-process session that fakes the glasses.

    Captures return a real JPEG. Set ``fail_captures``, ``fail_speech`` or
    ``fail_display`` to make the next operations fail, and ``capture_delay``
    to simulate a slow camera.
    """

    capture_delay: float = 0.0
    fail_captures: bool = False
    fail_speech: bool = False
    raise_on_speech: bool = False
    fail_display: bool = False
    image_size: tuple[int, int] = (640, 480)
    spoken: list[SpokenText] = field(default_factory=list)
    shown: list[ShownText] = field(default_factory=list)
    captures: list[PhotoData] = field(default_factory=list)
    capture_attempts: int = 0

    def __post_init__(self) -> None:
        super().__init__()
        self.logger = get_logger("mock_session")

    async def request_photo(self) -> PhotoData:
        self.capture_attempts += 1
        request_id = str(uuid.uuid4())

        if self.capture_delay:
            await asyncio.sleep(self.capture_delay)
        if self.fail_captures:
            raise CaptureError("Mock camera unavailable", request_id=request_id)

        # Generate a simple test image, shade varies per capture
        from PIL import Image

        shade = (self.capture_attempts * 37) % 256
        img = Image.new("RGB", self.image_size, color=(73, 109, shade))
        buffer = io.BytesIO()
        img.save(buffer, format="JPEG", quality=85)
        data = buffer.getvalue()

        photo = PhotoData(
            request_id=request_id,
            buffer=data,
            timestamp=datetime.now(timezone.utc),
            mime_type="image/jpeg",
            filename=f"photo_{request_id}.jpg",
            size=len(data),
        )
        self.captures.append(photo)
        return photo

    async def speak(self, text: str, options: SpeakOptions | None = None) -> SpeakResult:
        self.spoken.append(SpokenText(text=text, options=options))
        if self.raise_on_speech:
            raise SpeechError("Mock TTS connection dropped")
        if self.fail_speech:
            return SpeakResult(success=False, error="Mock TTS unavailable")
        return SpeakResult(success=True, duration_ms=len(text) * 60)

    async def show_text_wall(self, text: str, options: TextWallOptions | None = None) -> None:
        if self.fail_display:
            raise SessionError("Mock display disconnected")
        self.shown.append(ShownText(text=text, options=options))

    async def subscribe_location(self, accuracy: str, handler: LocationHandler) -> Callable[[], None]:
        async def forward(event: Event) -> None:
            await handler(event.data)

        self.logger.debug("location_stream_started", accuracy=accuracy)
        return self.events.subscribe(LOCATION_UPDATE, forward)

    # Device simulation

    async def press_button(self, press_type: str = "short", button_id: str = "camera") -> None:
        await self._emit(BUTTON_PRESS, ButtonPress(button_id=button_id, press_type=press_type))

    async def say(self, text: str, is_final: bool = True) -> None:
        await self._emit(TRANSCRIPTION, TranscriptionData(text=text, is_final=is_final))

    async def report_battery(self, level: int, charging: bool = False) -> None:
        await self._emit(GLASSES_BATTERY, BatteryData(level=level, charging=charging))

    async def move_to(self, lat: float, lng: float, accuracy: float | None = None) -> None:
        await self._emit(LOCATION_UPDATE, LocationUpdate(lat=lat, lng=lng, accuracy=accuracy))

    async def _emit(self, topic: str, data: object) -> None:
        await self.events.publish(Event(topic=topic, data=data, source="mock-glasses"))
