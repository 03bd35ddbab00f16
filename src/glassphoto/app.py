"""Glass Photo app: photo capture, audio interaction and a photo viewer."""

from __future__ import annotations

from glassphoto.bridge import SessionBridge
from glassphoto.config import Config
from glassphoto.geocoding import Geocoder
from glassphoto.photos import PhotoCache
from glassphoto.server import AppServer
from glassphoto.session.base import Session
from glassphoto.state import UserStateTable
from glassphoto.streaming import Clock, PhotoStreamer, now_ms
from glassphoto.web.routes import PhotoRoutes


class PhotoApp(AppServer):
    """App combining photo capture, audio interaction and a webview.

    Example:
        app = PhotoApp(load_config())
        app.run()
    """

    def __init__(
        self,
        config: Config,
        geocoder: Geocoder | None = None,
        clock: Clock = now_ms,
    ) -> None:
        super().__init__(config)
        self.table = UserStateTable()
        self.photos = PhotoCache(self.table)
        self.bridges: dict[str, SessionBridge] = {}
        # Streamers of stopped sessions whose captures may still be running
        self._draining: list[PhotoStreamer] = []
        self._clock = clock

        if geocoder is None and config.geocoding_enabled:
            geocoder = Geocoder(
                config.google_maps_api_key,
                endpoint=config.geocoding.endpoint,
                timeout_seconds=config.geocoding.timeout_seconds,
            )
        self.geocoder = geocoder

        self.routes = PhotoRoutes(
            self.photos,
            template_dir=config.webview.template_dir,
            template_name=config.webview.template_name,
        )
        self.routes.register(self.web_app)

    async def on_session(self, session: Session, session_id: str, user_id: str) -> None:
        bridge = SessionBridge(
            session,
            session_id,
            user_id,
            self.table,
            self.photos,
            self.config,
            geocoder=self.geocoder,
            clock=self._clock,
        )
        self.bridges[session_id] = bridge
        try:
            await bridge.start()
        except Exception:
            self.bridges.pop(session_id, None)
            await bridge.stop("start_failed")
            raise

    async def on_stop(self, session_id: str, user_id: str, reason: str) -> None:
        bridge = self.bridges.pop(session_id, None)
        if bridge is None:
            self.table.end_session(user_id)
            return

        await bridge.stop(reason)
        self._draining = [streamer for streamer in self._draining if not streamer.idle]
        if not bridge.streamer.idle:
            self._draining.append(bridge.streamer)

    async def teardown(self) -> None:
        """Let in-flight captures finish, then release the geocoder."""
        for streamer in self._draining:
            await streamer.wait_idle()
        self._draining.clear()

        if self.geocoder is not None:
            await self.geocoder.aclose()
