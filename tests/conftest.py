"""Pytest configuration and fixtures for Glass Photo tests."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from glassphoto.config import Config, DeviceConfig, StreamingConfig
from glassphoto.photos import PhotoCache
from glassphoto.session.mock import MockSession
from glassphoto.session.types import PhotoData
from glassphoto.state import UserStateTable

TEST_API_KEY = "test-api-key-0123456789"


def pytest_addoption(parser: pytest.Parser) -> None:
    """Add custom command line options."""
    parser.addoption(
        "--slow",
        action="store_true",
        default=False,
        help="Run slow tests",
    )


def pytest_configure(config: pytest.Config) -> None:
    """Configure test markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow running tests")


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Skip slow tests unless --slow is given."""
    if not config.getoption("--slow"):
        skip_slow = pytest.mark.skip(reason="Need --slow option to run")
        for item in items:
            if "slow" in item.keywords:
                item.add_marker(skip_slow)


class FakeClock:
    """Controllable epoch-millisecond clock."""

    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def config() -> Config:
    """Get test configuration."""
    return Config(
        package_name="com.example.glassphoto",
        api_key=TEST_API_KEY,
        device=DeviceConfig(mode="development", log_level="DEBUG"),
        streaming=StreamingConfig(poll_interval_seconds=0.01, guard_window_seconds=30.0),
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def table() -> UserStateTable:
    return UserStateTable()


@pytest.fixture
def cache(table: UserStateTable) -> PhotoCache:
    return PhotoCache(table)


@pytest.fixture
def session() -> MockSession:
    return MockSession(image_size=(32, 24))


def make_photo(request_id: str = "req-1", data: bytes = b"\xff\xd8jpeg\xff\xd9") -> PhotoData:
    """Build a photo without going through a session."""
    return PhotoData(
        request_id=request_id,
        buffer=data,
        timestamp=datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc),
        mime_type="image/jpeg",
        filename=f"{request_id}.jpg",
        size=len(data),
    )
