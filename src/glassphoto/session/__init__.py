"""Device session interface and data types."""

from glassphoto.session.base import Session
from glassphoto.session.mock import MockSession
from glassphoto.session.types import (
    BatteryData,
    ButtonPress,
    LocationUpdate,
    PhotoData,
    PressType,
    SpeakOptions,
    SpeakResult,
    TextWallOptions,
    TranscriptionData,
    ViewType,
    VoiceSettings,
)

__all__ = [
    "Session",
    "MockSession",
    "BatteryData",
    "ButtonPress",
    "LocationUpdate",
    "PhotoData",
    "PressType",
    "SpeakOptions",
    "SpeakResult",
    "TextWallOptions",
    "TranscriptionData",
    "ViewType",
    "VoiceSettings",
]
