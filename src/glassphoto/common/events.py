"""In-process event bus carrying device events from a session to its handlers."""

from __future__ import annotations

import asyncio
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from glassphoto.common.logging import get_logger


# Topics published by device sessions
BUTTON_PRESS = "button.press"
TRANSCRIPTION = "transcription"
GLASSES_BATTERY = "glasses.battery"
LOCATION_UPDATE = "location.update"


@dataclass
class Event:
    """Event message. ``data`` holds the typed payload for the topic."""

    topic: str
    data: Any
    source: str
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: float = field(default_factory=time.time)


EventHandler = Callable[[Event], Awaitable[None]]


class EventBus:
    """Pub/sub bus for one session.

    Handlers subscribe to exact topics.

    Example:
        bus = EventBus()

        async def on_button(event):
            print(event.data.press_type)

        unsubscribe = bus.subscribe(BUTTON_PRESS, on_button)
        await bus.publish(Event(topic=BUTTON_PRESS, data=press, source="glasses"))
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, list[EventHandler]] = {}
        self.logger = get_logger("event_bus")

    async def publish(self, event: Event) -> None:
        """Publish an event to all subscribers.

        Handlers run concurrently. A failing handler is logged and does not
        affect the others or the publisher.
        """
        self.logger.debug(
            "publishing_event",
            topic=event.topic,
            event_id=event.event_id,
            source=event.source,
        )

        handlers = self._subscribers.get(event.topic, []).copy()
        if handlers:
            await asyncio.gather(
                *[self._safe_dispatch(handler, event) for handler in handlers],
                return_exceptions=True,
            )

    async def _safe_dispatch(self, handler: EventHandler, event: Event) -> None:
        try:
            await handler(event)
        except Exception as e:
            self.logger.exception(
                "event_handler_error",
                topic=event.topic,
                event_id=event.event_id,
                error=str(e),
            )

    def subscribe(self, topic: str, handler: EventHandler) -> Callable[[], None]:
        """Subscribe ``handler`` to events on ``topic``.

        Returns:
            Function removing the subscription. Calling it twice is harmless.
        """
        self._subscribers.setdefault(topic, []).append(handler)
        self.logger.debug("subscribed", topic=topic)

        def unsubscribe() -> None:
            handlers = self._subscribers.get(topic, [])
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def subscriber_count(self, topic: str) -> int:
        """Number of handlers subscribed to ``topic``."""
        return len(self._subscribers.get(topic, []))
