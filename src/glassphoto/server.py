"""Base app server: HTTP lifecycle and session bookkeeping."""

from __future__ import annotations

import asyncio
import signal
from abc import ABC, abstractmethod
from enum import Enum
from typing import Awaitable, Callable

from aiohttp import web

from glassphoto.common.logging import get_logger, setup_logging
from glassphoto.config import Config
from glassphoto.session.base import Session
from glassphoto.web.auth import auth_middleware


class ServerState(Enum):
    """Server state enum."""

    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"
    ERROR = "error"


class AppServer(ABC):
    """Base class for glasses apps.

    Provides:
    - aiohttp application with identity middleware and ``/health``
    - Session start/stop dispatch to ``on_session``/``on_stop``
    - Graceful shutdown
    - Logging
    """

    def __init__(self, config: Config) -> None:
        self.config = config

        setup_logging(
            level=config.device.log_level,
            json_output=config.device.mode == "production",
            app_name=config.package_name,
        )
        self.logger = get_logger("app_server")

        self._state = ServerState.STOPPED
        self._sessions: dict[str, tuple[str, Session]] = {}
        self._runner: web.AppRunner | None = None
        self._shutdown_event = asyncio.Event()

        self.web_app = web.Application(middlewares=[auth_middleware(config.api_key)])
        self.web_app.router.add_get("/health", self._handle_health)

    @property
    def state(self) -> ServerState:
        return self._state

    @property
    def active_sessions(self) -> int:
        return len(self._sessions)

    @abstractmethod
    async def on_session(self, session: Session, session_id: str, user_id: str) -> None:
        """Called when a user's glasses connect."""

    @abstractmethod
    async def on_stop(self, session_id: str, user_id: str, reason: str) -> None:
        """Called when a session ends."""

    async def teardown(self) -> None:
        """Release app resources after all sessions have stopped."""

    async def start_session(self, session: Session, session_id: str, user_id: str) -> None:
        """Hand a newly connected session to the app."""
        if session_id in self._sessions:
            self.logger.warning("session_already_active", session_id=session_id)
            return
        self._sessions[session_id] = (user_id, session)
        try:
            await self.on_session(session, session_id, user_id)
        except Exception as e:
            self._sessions.pop(session_id, None)
            self.logger.exception("session_start_failed", session_id=session_id, user_id=user_id, error=str(e))
            raise

    async def stop_session(self, session_id: str, user_id: str, reason: str) -> None:
        """End a session. Unknown session ids are ignored."""
        if self._sessions.pop(session_id, None) is None:
            self.logger.warning("unknown_session_stop", session_id=session_id, user_id=user_id)
            return
        await self.on_stop(session_id, user_id, reason)

    async def _handle_health(self, request: web.Request) -> web.Response:
        return web.json_response({
            "status": "healthy" if self._state == ServerState.RUNNING else self._state.value,
            "app": self.config.package_name,
            "activeSessions": self.active_sessions,
        })

    async def start(self) -> None:
        """Bind the HTTP server. Returns once it is listening."""
        self.logger.info("starting_server", host=self.config.host, port=self.config.port)
        self._state = ServerState.STARTING

        try:
            self._runner = web.AppRunner(self.web_app)
            await self._runner.setup()
            site = web.TCPSite(self._runner, self.config.host, self.config.port)
            await site.start()
        except Exception as e:
            self._state = ServerState.ERROR
            self.logger.exception("server_start_failed", error=str(e))
            raise

        self._state = ServerState.RUNNING
        self.logger.info("server_started", port=self.config.port)

    async def stop(self) -> None:
        """Stop all sessions and the HTTP server."""
        if self._state in (ServerState.STOPPING, ServerState.STOPPED):
            return

        self.logger.info("stopping_server", sessions=self.active_sessions)
        self._state = ServerState.STOPPING

        try:
            for session_id, (user_id, _) in list(self._sessions.items()):
                await self.stop_session(session_id, user_id, "server_shutdown")

            await self.teardown()

            if self._runner:
                await self._runner.cleanup()
                self._runner = None

            self._state = ServerState.STOPPED
            self.logger.info("server_stopped")

        except Exception as e:
            self._state = ServerState.ERROR
            self.logger.exception("server_stop_failed", error=str(e))

    def shutdown(self) -> None:
        """Signal the server to shut down."""
        self._shutdown_event.set()

    async def serve_forever(
        self,
        on_started: Callable[[], Awaitable[None]] | None = None,
    ) -> None:
        """Start, wait for a shutdown signal, then stop."""
        try:
            await self.start()
            if on_started is not None:
                await on_started()
            await self._shutdown_event.wait()
        finally:
            await self.stop()

    def run(self, on_started: Callable[[], Awaitable[None]] | None = None) -> None:
        """Run the server (blocking) with SIGINT/SIGTERM handling."""
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)

        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, self.shutdown)

        try:
            loop.run_until_complete(self.serve_forever(on_started))
        finally:
            loop.close()
