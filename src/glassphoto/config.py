"""Configuration management for the Glass Photo app."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import AliasChoices, BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from glassphoto.common.errors import ConfigurationError


class DeviceConfig(BaseModel):
    """Runtime mode and logging."""

    mode: Literal["production", "development"] = "development"
    log_level: str = "INFO"


class StreamingConfig(BaseModel):
    """Photo streaming poll loop configuration."""

    poll_interval_seconds: float = 1.0
    guard_window_seconds: float = 30.0
    # Keep the guard window after a successful capture instead of resetting to now
    hold_guard_after_capture: bool = False


class GeocodingConfig(BaseModel):
    """Reverse geocoding configuration."""

    endpoint: str = "https://maps.googleapis.com/maps/api/geocode/json"
    timeout_seconds: float = 10.0
    location_accuracy: str = "high"


class SpeechConfig(BaseModel):
    """Text-to-speech configuration."""

    welcome_wall: str = "Example App is ready!"
    welcome_text: str = "Welcome to Mentra OS! This is your audio assistant."
    voice_id: str | None = None
    model_id: str | None = None
    stability: float | None = None
    similarity_boost: float | None = None
    style: float | None = None
    speed: float | None = None


class WebviewConfig(BaseModel):
    """Photo viewer page configuration."""

    template_dir: str | None = None
    template_name: str = "photo-viewer.html"


class Config(BaseSettings):
    """Main configuration for the Glass Photo app.

    ``package_name`` and ``api_key`` have no defaults: the app refuses to
    start without them.
    """

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        extra="ignore",
        populate_by_name=True,
    )

    package_name: str
    api_key: str = Field(validation_alias=AliasChoices("api_key", "mentraos_api_key"))
    host: str = "0.0.0.0"
    port: int = 3000
    google_maps_api_key: str | None = None

    device: DeviceConfig = Field(default_factory=DeviceConfig)
    streaming: StreamingConfig = Field(default_factory=StreamingConfig)
    geocoding: GeocodingConfig = Field(default_factory=GeocodingConfig)
    speech: SpeechConfig = Field(default_factory=SpeechConfig)
    webview: WebviewConfig = Field(default_factory=WebviewConfig)

    @property
    def geocoding_enabled(self) -> bool:
        """Whether location updates should be reverse geocoded."""
        return bool(self.google_maps_api_key)

    @classmethod
    def from_yaml(cls, path: Path | str) -> Config:
        """Load configuration from a YAML file, environment filling the gaps."""
        path = Path(path)
        data: dict[str, Any] = {}
        if path.exists():
            with open(path) as f:
                data = yaml.safe_load(f) or {}

        return cls(**data)

    def to_yaml(self, path: Path | str) -> None:
        """Save configuration to YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            yaml.dump(self.model_dump(), f, default_flow_style=False)

    def masked_dump(self) -> dict[str, Any]:
        """Dump configuration with secrets replaced by asterisks."""
        data = self.model_dump()
        for key in ("api_key", "google_maps_api_key"):
            if data.get(key):
                data[key] = "****" + data[key][-4:] if len(data[key]) > 8 else "****"
        return data


def load_config(config_path: Path | str | None = None) -> Config:
    """Load configuration from file and environment.

    Args:
        config_path: Path to config file. If None, searches standard locations.

    Returns:
        Loaded configuration.

    Raises:
        ConfigurationError: A required value is missing or invalid.
    """
    search_paths = [
        Path("config.yaml"),
        Path("configs/glassphoto.yaml"),
    ]

    if config_path:
        search_paths.insert(0, Path(config_path))

    config_file: Path | None = None
    for path in search_paths:
        if path.exists():
            config_file = path
            break

    try:
        if config_file:
            return Config.from_yaml(config_file)
        return Config()
    except ValidationError as e:
        missing = [
            ".".join(str(part) for part in err["loc"])
            for err in e.errors()
            if err["type"] == "missing"
        ]
        if missing:
            raise ConfigurationError(
                f"Missing required configuration: {', '.join(missing)}"
            ) from e
        raise ConfigurationError(f"Invalid configuration: {e}") from e
