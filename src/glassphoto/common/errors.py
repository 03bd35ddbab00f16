"""Exception hierarchy for the Glass Photo app."""

from __future__ import annotations


class GlassPhotoError(Exception):
    """Base class for all app errors."""


class ConfigurationError(GlassPhotoError):
    """Required configuration is missing or invalid. Fatal at startup."""


class SessionError(GlassPhotoError):
    """A device session operation failed."""


class CaptureError(SessionError):
    """The camera did not return a photo."""

    def __init__(self, message: str, request_id: str | None = None) -> None:
        super().__init__(message)
        self.request_id = request_id


class SpeechError(SessionError):
    """Text-to-speech synthesis failed."""
