"""Common utilities for the Glass Photo app."""

from glassphoto.common.logging import get_logger, setup_logging
from glassphoto.common.events import Event, EventBus
from glassphoto.common.errors import (
    CaptureError,
    ConfigurationError,
    GlassPhotoError,
    SessionError,
    SpeechError,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "Event",
    "EventBus",
    "CaptureError",
    "ConfigurationError",
    "GlassPhotoError",
    "SessionError",
    "SpeechError",
]
