"""HTTP surface: identity middleware and photo routes."""

from glassphoto.web.auth import (
    AUTH_USER_KEY,
    auth_middleware,
    get_auth_user,
    sign_user_token,
    verify_user_token,
)
from glassphoto.web.routes import PhotoRoutes

__all__ = [
    "AUTH_USER_KEY",
    "auth_middleware",
    "get_auth_user",
    "sign_user_token",
    "verify_user_token",
    "PhotoRoutes",
]
