"""Photo API and viewer routes."""

from __future__ import annotations

from pathlib import Path

import jinja2
from aiohttp import web

from glassphoto.photos import PhotoCache
from glassphoto.web.auth import get_auth_user

TEMPLATE_DIR = Path(__file__).parent / "templates"

NOT_AUTHENTICATED_HTML = """\
<html>
  <head><title>Photo Viewer - Not Authenticated</title></head>
  <body style="font-family: Arial, sans-serif; text-align: center; padding: 50px;">
    <h1>Please open this page from the MentraOS app</h1>
  </body>
</html>
"""


class PhotoRoutes:
    """Handlers for the three read-only webview routes."""

    def __init__(
        self,
        cache: PhotoCache,
        template_dir: Path | str | None = None,
        template_name: str = "photo-viewer.html",
    ) -> None:
        self.cache = cache
        self.template_name = template_name
        self._templates = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir or TEMPLATE_DIR)),
            autoescape=jinja2.select_autoescape(["html"]),
        )

    def register(self, app: web.Application) -> None:
        app.router.add_get("/api/latest-photo", self.latest_photo)
        app.router.add_get("/api/photo/{request_id}", self.photo)
        app.router.add_get("/webview", self.webview)

    async def latest_photo(self, request: web.Request) -> web.Response:
        """Metadata of the user's latest photo."""
        user_id = get_auth_user(request)
        if not user_id:
            return web.json_response({"error": "Not authenticated"}, status=401)

        photo = self.cache.get(user_id)
        if photo is None:
            return web.json_response({"error": "No photo available"}, status=404)

        return web.json_response({
            "requestId": photo.request_id,
            "timestamp": photo.timestamp_ms,
            "hasPhoto": True,
        })

    async def photo(self, request: web.Request) -> web.Response:
        """Raw bytes of the user's latest photo, if its id matches."""
        user_id = get_auth_user(request)
        if not user_id:
            return web.json_response({"error": "Not authenticated"}, status=401)

        request_id = request.match_info["request_id"]
        photo = self.cache.get(user_id)
        if photo is None or photo.request_id != request_id:
            return web.json_response({"error": "Photo not found"}, status=404)

        return web.Response(
            body=photo.buffer,
            content_type=photo.mime_type,
            headers={"Cache-Control": "no-cache"},
        )

    async def webview(self, request: web.Request) -> web.Response:
        """Photo viewer page. The page fetches its data from the API routes."""
        if not get_auth_user(request):
            return web.Response(text=NOT_AUTHENTICATED_HTML, status=401, content_type="text/html")

        template = self._templates.get_template(self.template_name)
        return web.Response(text=template.render(), content_type="text/html")
