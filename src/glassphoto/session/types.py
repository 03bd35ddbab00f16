"""Data types exchanged with a device session."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class ViewType(Enum):
    """Display surface on the glasses."""

    MAIN = "main"
    DASHBOARD = "dashboard"


class PressType(str, Enum):
    """Button press kind."""

    SHORT = "short"
    LONG = "long"


@dataclass
class PhotoData:
    """Photo returned by the glasses camera."""

    request_id: str
    buffer: bytes
    timestamp: datetime
    mime_type: str
    filename: str
    size: int


@dataclass
class ButtonPress:
    """Hardware button event."""

    button_id: str
    press_type: str


@dataclass
class TranscriptionData:
    """Speech recognition result. Interim hypotheses have ``is_final`` False."""

    text: str
    is_final: bool
    language: str = "en-US"


@dataclass
class BatteryData:
    """Glasses battery telemetry."""

    level: int
    charging: bool = False


@dataclass
class LocationUpdate:
    """Position reported by the phone."""

    lat: float
    lng: float
    accuracy: float | None = None


@dataclass
class VoiceSettings:
    """Voice tuning passed through to the TTS provider unvalidated."""

    stability: float | None = None
    similarity_boost: float | None = None
    style: float | None = None
    speed: float | None = None

    def to_dict(self) -> dict:
        return {k: v for k, v in self.__dict__.items() if v is not None}


@dataclass
class SpeakOptions:
    """Options for text-to-speech."""

    voice_id: str | None = None
    model_id: str | None = None
    voice_settings: VoiceSettings = field(default_factory=VoiceSettings)


@dataclass
class SpeakResult:
    """Outcome of a TTS request."""

    success: bool
    error: str | None = None
    duration_ms: int | None = None


@dataclass
class TextWallOptions:
    """Options for a full-screen text layout."""

    view: ViewType = ViewType.MAIN
    duration_ms: int | None = None
