"""Tests for the HTTP surface and identity middleware."""

import warnings

import pytest
from aiohttp import web
from aiohttp import test_utils

from conftest import TEST_API_KEY, make_photo

from glassphoto.photos import PhotoCache
from glassphoto.web.auth import (
    AUTH_USER_KEY,
    auth_middleware,
    get_auth_user,
    sign_user_token,
    verify_user_token,
)
from glassphoto.web.routes import PhotoRoutes


def auth(user_id: str) -> dict:
    return {"Authorization": f"Bearer {sign_user_token(TEST_API_KEY, user_id)}"}


@pytest.fixture
async def client(cache: PhotoCache):
    app = web.Application(middlewares=[auth_middleware(TEST_API_KEY)])
    PhotoRoutes(cache).register(app)

    async with test_utils.TestClient(test_utils.TestServer(app)) as client:
        yield client


class TestTokens:
    """Tests for signed user tokens."""

    def test_roundtrip(self):
        token = sign_user_token(TEST_API_KEY, "alice@example.com")
        assert verify_user_token(TEST_API_KEY, token) == "alice@example.com"

    def test_wrong_key(self):
        token = sign_user_token("other-key", "alice")
        assert verify_user_token(TEST_API_KEY, token) is None

    def test_tampered_user(self):
        token = sign_user_token(TEST_API_KEY, "alice")
        forged = sign_user_token(TEST_API_KEY, "mallory").split(".")[0] + "." + token.split(".")[1]
        assert verify_user_token(TEST_API_KEY, forged) is None

    @pytest.mark.parametrize("token", ["", "abc", ".", "abc.", "!!!.deadbeef"])
    def test_malformed(self, token):
        assert verify_user_token(TEST_API_KEY, token) is None


class TestMiddleware:
    """Tests for the identity middleware."""

    def test_user_key_is_typed(self):
        assert isinstance(AUTH_USER_KEY, web.RequestKey)

    @pytest.mark.asyncio
    async def test_sets_user_without_warnings(self):
        seen = []

        async def whoami(request: web.Request) -> web.Response:
            seen.append(get_auth_user(request))
            return web.Response(text="ok")

        app = web.Application(middlewares=[auth_middleware(TEST_API_KEY)])
        app.router.add_get("/whoami", whoami)

        async with test_utils.TestClient(test_utils.TestServer(app)) as client:
            with warnings.catch_warnings():
                warnings.simplefilter("error", web.NotAppKeyWarning)
                authed = await client.get("/whoami", headers=auth("alice"))
                anonymous = await client.get("/whoami")

        assert authed.status == 200
        assert anonymous.status == 200
        assert seen == ["alice", None]


class TestLatestPhoto:
    """Tests for GET /api/latest-photo."""

    @pytest.mark.asyncio
    async def test_unauthenticated(self, client, cache):
        cache.store("alice", make_photo("req-1"))

        resp = await client.get("/api/latest-photo")

        assert resp.status == 401
        assert await resp.json() == {"error": "Not authenticated"}

    @pytest.mark.asyncio
    async def test_invalid_token_is_unauthenticated(self, client, cache):
        cache.store("alice", make_photo("req-1"))

        resp = await client.get("/api/latest-photo", headers={"Authorization": "Bearer bogus.token"})

        assert resp.status == 401

    @pytest.mark.asyncio
    async def test_no_photo(self, client):
        resp = await client.get("/api/latest-photo", headers=auth("alice"))

        assert resp.status == 404
        assert await resp.json() == {"error": "No photo available"}

    @pytest.mark.asyncio
    async def test_latest_photo(self, client, cache):
        stored = cache.store("alice", make_photo("req-1"))

        resp = await client.get("/api/latest-photo", headers=auth("alice"))

        assert resp.status == 200
        assert await resp.json() == {
            "requestId": "req-1",
            "timestamp": stored.timestamp_ms,
            "hasPhoto": True,
        }

    @pytest.mark.asyncio
    async def test_other_users_photo_not_visible(self, client, cache):
        cache.store("alice", make_photo("req-1"))

        resp = await client.get("/api/latest-photo", headers=auth("bob"))

        assert resp.status == 404

    @pytest.mark.asyncio
    async def test_token_in_query(self, client, cache):
        cache.store("alice", make_photo("req-1"))
        token = sign_user_token(TEST_API_KEY, "alice")

        resp = await client.get("/api/latest-photo", params={"token": token})

        assert resp.status == 200


class TestPhoto:
    """Tests for GET /api/photo/{request_id}."""

    @pytest.mark.asyncio
    async def test_unauthenticated(self, client, cache):
        cache.store("alice", make_photo("req-1"))

        resp = await client.get("/api/photo/req-1")

        assert resp.status == 401
        assert await resp.json() == {"error": "Not authenticated"}

    @pytest.mark.asyncio
    async def test_returns_bytes(self, client, cache):
        cache.store("alice", make_photo("req-1", b"\xff\xd8binary\xff\xd9"))

        resp = await client.get("/api/photo/req-1", headers=auth("alice"))

        assert resp.status == 200
        assert resp.content_type == "image/jpeg"
        assert resp.headers["Cache-Control"] == "no-cache"
        assert await resp.read() == b"\xff\xd8binary\xff\xd9"

    @pytest.mark.asyncio
    async def test_mismatched_request_id(self, client, cache):
        cache.store("alice", make_photo("xyz"))

        resp = await client.get("/api/photo/abc", headers=auth("alice"))

        assert resp.status == 404
        assert await resp.json() == {"error": "Photo not found"}

    @pytest.mark.asyncio
    async def test_stale_request_id(self, client, cache):
        cache.store("alice", make_photo("old"))
        cache.store("alice", make_photo("new"))

        assert (await client.get("/api/photo/old", headers=auth("alice"))).status == 404
        assert (await client.get("/api/photo/new", headers=auth("alice"))).status == 200

    @pytest.mark.asyncio
    async def test_no_photo(self, client):
        resp = await client.get("/api/photo/req-1", headers=auth("alice"))

        assert resp.status == 404


class TestWebview:
    """Tests for GET /webview."""

    @pytest.mark.asyncio
    async def test_unauthenticated(self, client):
        resp = await client.get("/webview")
        body = await resp.text()

        assert resp.status == 401
        assert resp.content_type == "text/html"
        assert "Please open this page from the MentraOS app" in body

    @pytest.mark.asyncio
    async def test_renders_viewer(self, client):
        resp = await client.get("/webview", headers=auth("alice"))
        body = await resp.text()

        assert resp.status == 200
        assert resp.content_type == "text/html"
        assert "/api/latest-photo" in body

    @pytest.mark.asyncio
    async def test_custom_template_dir(self, cache, tmp_path):
        (tmp_path / "viewer.html").write_text("<p>custom viewer</p>")
        app = web.Application(middlewares=[auth_middleware(TEST_API_KEY)])
        PhotoRoutes(cache, template_dir=tmp_path, template_name="viewer.html").register(app)

        async with test_utils.TestClient(test_utils.TestServer(app)) as client:
            resp = await client.get("/webview", params={"token": sign_user_token(TEST_API_KEY, "alice")})
            assert await resp.text() == "<p>custom viewer</p>"
