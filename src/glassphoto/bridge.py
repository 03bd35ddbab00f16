"""Session event bridge: wires app behavior onto one device session."""

from __future__ import annotations

from typing import Callable

from glassphoto.common.events import (
    BUTTON_PRESS,
    GLASSES_BATTERY,
    TRANSCRIPTION,
    Event,
)
from glassphoto.common.logging import get_logger
from glassphoto.config import Config
from glassphoto.geocoding import Geocoder
from glassphoto.photos import PhotoCache
from glassphoto.session.base import Session
from glassphoto.session.types import (
    LocationUpdate,
    PressType,
    SpeakOptions,
    TextWallOptions,
    ViewType,
    VoiceSettings,
)
from glassphoto.state import UserStateTable
from glassphoto.streaming import Clock, PhotoStreamer, now_ms

TRANSCRIPT_DISPLAY_MS = 3000


def speak_options_from_config(config: Config) -> SpeakOptions | None:
    """Build TTS options from config, or None when nothing is set."""
    speech = config.speech
    settings = VoiceSettings(
        stability=speech.stability,
        similarity_boost=speech.similarity_boost,
        style=speech.style,
        speed=speech.speed,
    )
    if not (speech.voice_id or speech.model_id or settings.to_dict()):
        return None
    return SpeakOptions(voice_id=speech.voice_id, model_id=speech.model_id, voice_settings=settings)


class SessionBridge:
    """Handles the events of exactly one session/user pair.

    Owns the session's photo streamer and its event subscriptions. Per-user
    state lives in the shared ``UserStateTable``.
    """

    def __init__(
        self,
        session: Session,
        session_id: str,
        user_id: str,
        table: UserStateTable,
        cache: PhotoCache,
        config: Config,
        geocoder: Geocoder | None = None,
        clock: Clock = now_ms,
    ) -> None:
        self.session = session
        self.session_id = session_id
        self.user_id = user_id
        self.config = config
        self._table = table
        self._cache = cache
        self._geocoder = geocoder
        self._clock = clock
        self._speak_options = speak_options_from_config(config)
        self._unsubscribers: list[Callable[[], None]] = []
        self.streamer = PhotoStreamer(
            session,
            user_id,
            table,
            cache,
            poll_interval=config.streaming.poll_interval_seconds,
            guard_window=config.streaming.guard_window_seconds,
            hold_guard_after_capture=config.streaming.hold_guard_after_capture,
            clock=clock,
        )
        self.logger = get_logger("bridge", user_id=user_id, session_id=session_id)

    async def start(self) -> None:
        """Initialize user state, greet the user and attach handlers."""
        self.logger.info("session_started")
        self._table.begin_session(self.user_id, self._clock())

        await self.display(self.config.speech.welcome_wall)

        if self._geocoder is not None:
            unsubscribe = await self.session.subscribe_location(
                self.config.geocoding.location_accuracy, self.on_location
            )
            self._unsubscribers.append(unsubscribe)

        await self.speak(self.config.speech.welcome_text)

        events = self.session.events
        self._unsubscribers += [
            events.subscribe(BUTTON_PRESS, self._on_button_event),
            events.subscribe(TRANSCRIPTION, self._on_transcription_event),
            events.subscribe(GLASSES_BATTERY, self._on_battery_event),
        ]

        self.streamer.start()

    async def stop(self, reason: str = "") -> None:
        """Stop streaming and detach handlers. The cached photo is kept."""
        self._table.end_session(self.user_id)
        await self.streamer.stop()

        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()

        self.logger.info("session_stopped", reason=reason)

    async def speak(self, text: str) -> bool:
        """Speak ``text``. Failures are logged, never raised."""
        try:
            result = await self.session.speak(text, self._speak_options)
        except Exception as e:
            self.logger.error("tts_exception", error=str(e))
            return False

        if result.success:
            self.logger.info("tts_succeeded")
        else:
            self.logger.error("tts_failed", error=result.error)
        return result.success

    async def display(self, text: str, options: TextWallOptions | None = None) -> bool:
        """Show a text wall. Failures are logged, never raised."""
        try:
            await self.session.show_text_wall(text, options)
        except Exception as e:
            self.logger.error("display_failed", error=str(e))
            return False
        return True

    async def take_photo(self) -> bool:
        """Capture one photo on demand and cache it."""
        try:
            photo = await self.session.request_photo()
        except Exception as e:
            self.logger.error("capture_failed", error=str(e))
            return False

        self.logger.info("photo_taken", request_id=photo.request_id, timestamp=photo.timestamp.isoformat())
        self._cache.store(self.user_id, photo)
        return True

    # Handlers

    async def on_button_press(self, button_id: str, press_type: str) -> None:
        self.logger.info("button_pressed", button_id=button_id, press_type=press_type)

        if press_type == PressType.LONG.value:
            streaming = self._table.toggle_streaming(self.user_id)
            self.logger.info("streaming_toggled", streaming=streaming)
            return

        await self.take_photo()

    async def on_transcription(self, text: str, is_final: bool) -> None:
        if not is_final:
            return

        await self.display(
            f"You said: {text}",
            TextWallOptions(view=ViewType.MAIN, duration_ms=TRANSCRIPT_DISPLAY_MS),
        )
        await self.speak(text)

    async def on_battery(self, level: int, charging: bool) -> None:
        self.logger.info("glasses_battery", level=level, charging=charging)

    async def on_location(self, update: LocationUpdate) -> None:
        self.logger.info("location_update", lat=update.lat, lng=update.lng)

        if self._geocoder is None:
            return
        address = await self._geocoder.reverse_geocode(update.lat, update.lng)
        if address:
            self.logger.info("location_address", address=address)

    async def _on_button_event(self, event: Event) -> None:
        await self.on_button_press(event.data.button_id, event.data.press_type)

    async def _on_transcription_event(self, event: Event) -> None:
        await self.on_transcription(event.data.text, event.data.is_final)

    async def _on_battery_event(self, event: Event) -> None:
        await self.on_battery(event.data.level, event.data.charging)
