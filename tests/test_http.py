"""
tests/test_http.py
"""
from __future__ import annotations

import json

import httpx
import pytest

from nftfolio.core.http import (
    ApiClient,
    ApiStatusError,
    ApiTransportError,
    MalformedResponseError,
    UpstreamPageError,
    is_html_document,
)

pytestmark = pytest.mark.anyio


# ───────────────────────── helpers ────────────────────────────────────
def _client(handler) -> ApiClient:
    return ApiClient(base_url="http://backend.test/", transport=httpx.MockTransport(handler))


def _json(status: int, payload) -> httpx.Response:
    return httpx.Response(status, json=payload)


# ───────────────────────── html detection ─────────────────────────────
@pytest.mark.parametrize(
    "text",
    ["<!DOCTYPE html><html></html>", "  \n<html lang='en'>", "<!doctype HTML>"],
)
def test_html_documents_are_detected(text):
    assert is_html_document(text)


@pytest.mark.parametrize("text", ['{"ok": true}', "", "plain text", "<div>fragment</div>"])
def test_non_html_is_not_flagged(text):
    assert not is_html_document(text)


async def test_html_on_success_status_is_rejected():
    client = _client(lambda request: httpx.Response(200, text="<!DOCTYPE html><html><body>hi</body></html>"))
    try:
        with pytest.raises(UpstreamPageError) as exc:
            await client.get_json("/api/items")
        assert exc.value.status_code == 200
        assert "HTML error page returned" in str(exc.value)
    finally:
        await client.aclose()


async def test_html_error_page_becomes_upstream_error():
    client = _client(lambda request: httpx.Response(502, text="<html><body>Bad Gateway</body></html>"))
    try:
        with pytest.raises(UpstreamPageError) as exc:
            await client.request("GET", "/api/items")
        assert str(exc.value) == "502: HTML error page returned"
    finally:
        await client.aclose()


# ───────────────────────── status errors ──────────────────────────────
async def test_json_error_message_is_extracted():
    client = _client(lambda request: _json(409, {"message": "Collection already exists"}))
    try:
        with pytest.raises(ApiStatusError) as exc:
            await client.send_json("POST", "/api/categories", {"name": "x"})
        assert exc.value.status_code == 409
        assert exc.value.message == "Collection already exists"
        assert str(exc.value) == "409: Collection already exists"
    finally:
        await client.aclose()


async def test_plain_text_error_keeps_body():
    client = _client(lambda request: httpx.Response(500, text="database is locked"))
    try:
        with pytest.raises(ApiStatusError) as exc:
            await client.request("GET", "/api/items")
        assert exc.value.message == "database is locked"
    finally:
        await client.aclose()


async def test_empty_error_body_falls_back_to_reason():
    client = _client(lambda request: httpx.Response(503))
    try:
        with pytest.raises(ApiStatusError) as exc:
            await client.request("GET", "/api/items")
        assert exc.value.message == "Service Unavailable"
    finally:
        await client.aclose()


async def test_unauthorized_policy():
    client = _client(lambda request: _json(401, {"message": "Not authenticated"}))
    try:
        assert await client.get_json("/api/auth/me", on_unauthorized="none") is None
        with pytest.raises(ApiStatusError) as exc:
            await client.get_json("/api/auth/me")
        assert exc.value.status_code == 401
    finally:
        await client.aclose()


async def test_unauthorized_html_page_resolves_to_none():
    client = _client(lambda request: httpx.Response(401, text="<html>login required</html>"))
    try:
        assert await client.get_json("/api/auth/me", on_unauthorized="none") is None
    finally:
        await client.aclose()


async def test_other_statuses_still_raise_with_none_policy():
    client = _client(lambda request: _json(500, {"error": "boom"}))
    try:
        with pytest.raises(ApiStatusError) as exc:
            await client.get_json("/api/auth/me", on_unauthorized="none")
        assert exc.value.message == "boom"
    finally:
        await client.aclose()


# ───────────────────────── bodies ─────────────────────────────────────
async def test_empty_success_body_is_none():
    client = _client(lambda request: httpx.Response(204))
    try:
        assert await client.send_json("DELETE", "/api/share-links/3") is None
    finally:
        await client.aclose()


async def test_malformed_json_is_reported():
    client = _client(lambda request: httpx.Response(200, text="{not json"))
    try:
        with pytest.raises(MalformedResponseError, match="Failed to parse response data"):
            await client.get_json("/api/items")
    finally:
        await client.aclose()


async def test_transport_failure_is_wrapped():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(handler)
    try:
        with pytest.raises(ApiTransportError, match="GET /api/items failed"):
            await client.get_json("/api/items")
    finally:
        await client.aclose()


# ───────────────────────── request shape ──────────────────────────────
async def test_content_type_only_with_payload():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return _json(200, {"ok": True})

    client = _client(handler)
    try:
        await client.get_json("/api/items", params={"category": "art", "page": None})
        await client.send_json("POST", "/api/items/update-order", {"items": []})
    finally:
        await client.aclose()

    get_req, post_req = seen
    assert "content-type" not in get_req.headers
    assert get_req.url.params.get("category") == "art"
    assert "page" not in get_req.url.params
    assert post_req.headers["content-type"] == "application/json"
    assert json.loads(post_req.content) == {"items": []}


async def test_cookies_are_sent_back():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path == "/api/auth/login":
            return httpx.Response(200, json={"id": 1}, headers={"set-cookie": "sid=abc123; Path=/"})
        return _json(200, {"id": 1})

    client = _client(handler)
    try:
        await client.send_json("POST", "/api/auth/login", {"username": "a", "password": "b"})
        await client.get_json("/api/auth/me")
    finally:
        await client.aclose()

    assert "sid=abc123" in seen[1].headers.get("cookie", "")
