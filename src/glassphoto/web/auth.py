"""Identity middleware for the webview and API routes.

The companion app opens the webview with a token tying it to a user:
``base64url(user_id) + "." + hex(HMAC-SHA256(api_key, user_id))``. It may
arrive as ``Authorization: Bearer <token>`` or as ``?token=<token>``.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
from typing import Awaitable, Callable

from aiohttp import web

from glassphoto.common.logging import get_logger

AUTH_USER_KEY = web.RequestKey("auth_user_id", str)

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]

logger = get_logger("web.auth")


def _signature(api_key: str, user_id: str) -> str:
    return hmac.new(api_key.encode(), user_id.encode(), hashlib.sha256).hexdigest()


def sign_user_token(api_key: str, user_id: str) -> str:
    """Create a webview token for ``user_id``."""
    encoded = base64.urlsafe_b64encode(user_id.encode()).decode().rstrip("=")
    return f"{encoded}.{_signature(api_key, user_id)}"


def verify_user_token(api_key: str, token: str) -> str | None:
    """Return the user id carried by ``token``, or None if it is not valid."""
    encoded, sep, signature = token.partition(".")
    if not sep or not encoded or not signature:
        return None

    try:
        padded = encoded + "=" * (-len(encoded) % 4)
        user_id = base64.urlsafe_b64decode(padded.encode()).decode()
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return None

    if not user_id or not hmac.compare_digest(signature, _signature(api_key, user_id)):
        return None
    return user_id


def _extract_token(request: web.Request) -> str | None:
    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip()
    return request.query.get("token")


def auth_middleware(api_key: str) -> Callable:
    """Attach the authenticated user id to ``request[AUTH_USER_KEY]``.

    Requests without a valid token pass through unauthenticated; each route
    decides how to answer them.
    """

    @web.middleware
    async def middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
        token = _extract_token(request)
        user_id = verify_user_token(api_key, token) if token else None
        if token and user_id is None:
            logger.warning("invalid_auth_token", path=request.path)
        if user_id is not None:
            request[AUTH_USER_KEY] = user_id
        return await handler(request)

    return middleware


def get_auth_user(request: web.Request) -> str | None:
    """Authenticated user id of ``request``, if any."""
    return request.get(AUTH_USER_KEY)
