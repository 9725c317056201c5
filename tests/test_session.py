"""
tests/test_session.py
"""
from __future__ import annotations

import asyncio

import httpx
import pytest

from nftfolio import Portfolio
from nftfolio.auth.schemas import LoginRequest, RegisterRequest, Role
from nftfolio.auth.session import SessionState
from nftfolio.core.config import ClientSettings
from nftfolio.core.http import MalformedResponseError
from nftfolio.core.keys import SESSION_KEY
from nftfolio.core.notifications import ToastVariant

pytestmark = pytest.mark.anyio

ME = ("GET", "/api/auth/me")


# ───────────────────────── helpers ────────────────────────────────────
async def _settle() -> None:
    for _ in range(20):
        await asyncio.sleep(0)


async def _login(portfolio, username="admin", password="secret-pass") -> bool:
    ok = await portfolio.session.login(LoginRequest(username=username, password=password))
    await portfolio.session.wait_user()
    return ok


# ───────────────────────── session read ───────────────────────────────
async def test_state_is_unknown_before_start(portfolio):
    assert portfolio.session.state is SessionState.UNKNOWN
    assert portfolio.session.is_loading


async def test_no_session_is_anonymous_without_toast(portfolio, backend):
    await portfolio.start()
    assert portfolio.session.state is SessionState.LOADING

    assert await portfolio.session.wait_user() is None
    assert portfolio.session.state is SessionState.ANONYMOUS
    assert portfolio.session.user is None
    assert portfolio.notifier.pending == ()
    assert backend.hit_count(*ME) == 1


async def test_server_error_on_session_read_is_logged_out(portfolio, backend, caplog):
    backend.me_status = 500
    await portfolio.start()

    assert await portfolio.session.wait_user() is None
    assert portfolio.session.state is SessionState.ANONYMOUS
    assert "session_read_failed" in caplog.text
    assert portfolio.notifier.pending == ()


async def test_start_is_idempotent(portfolio, backend):
    await portfolio.start()
    await portfolio.start()
    portfolio.session.load()
    await portfolio.session.wait_user()
    assert backend.hit_count(*ME) == 1


# ───────────────────────── login ──────────────────────────────────────
async def test_login_success_populates_user(portfolio, backend):
    await portfolio.start()
    await portfolio.session.wait_user()

    assert await _login(portfolio)
    assert portfolio.session.state is SessionState.AUTHENTICATED
    assert portfolio.session.user.username == "admin"
    assert portfolio.session.role is Role.ADMIN
    assert portfolio.session.is_admin
    assert portfolio.session.error is None
    assert backend.hit_count(*ME) == 2


async def test_login_failure_keeps_session_and_sets_error(portfolio, backend):
    await portfolio.start()
    await portfolio.session.wait_user()
    before = portfolio.cache.get_entry(SESSION_KEY)

    ok = await portfolio.session.login(LoginRequest(username="admin", password="wrong"))

    assert not ok
    assert portfolio.session.error == "Login failed"
    after = portfolio.cache.get_entry(SESSION_KEY)
    assert after.data is before.data is None
    assert not after.is_stale
    assert backend.hit_count(*ME) == 1

    (toast,) = portfolio.notifier.pending
    assert toast.title == "Login failed"
    assert toast.variant is ToastVariant.DESTRUCTIVE


async def test_login_with_unexpected_body_sets_error():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/auth/login":
            return httpx.Response(200, json={"id": 1})
        return httpx.Response(401, json={"message": "Not authenticated"})

    portfolio = Portfolio(ClientSettings(base_url="http://testserver"), transport=httpx.MockTransport(handler))
    try:
        ok = await portfolio.session.login(LoginRequest(username="admin", password="secret-pass"))
    finally:
        await portfolio.aclose()

    assert not ok
    assert isinstance(portfolio.session.login_mutation.error, MalformedResponseError)
    assert portfolio.session.error.startswith("Unexpected response shape from login")
    assert portfolio.notifier.pending[-1].title == "Login failed"


async def test_role_aliases_are_folded(portfolio):
    await portfolio.start()
    assert await _login(portfolio, "carla", "creator-pass")
    assert portfolio.session.role is Role.CREATOR
    assert not portfolio.session.is_admin


async def test_empty_username_is_rejected_locally():
    with pytest.raises(ValueError):
        LoginRequest(username="   ", password="x")


# ───────────────────────── logout ─────────────────────────────────────
async def test_logout_clears_user_before_refetch_completes(portfolio, backend):
    await portfolio.start()
    assert await _login(portfolio)
    reads_before = backend.hit_count(*ME)

    backend.me_gate = asyncio.Event()
    assert await portfolio.session.logout()

    # Phase 1 already applied: no user even though the server read is pending.
    snap = portfolio.cache.get_entry(SESSION_KEY)
    assert snap.data is None
    assert snap.is_fetching
    assert portfolio.session.state is SessionState.ANONYMOUS
    assert portfolio.session.user is None

    backend.me_gate.set()
    assert await portfolio.session.wait_user() is None
    await _settle()
    assert backend.hit_count(*ME) == reads_before + 1
    assert portfolio.session.state is SessionState.ANONYMOUS
    assert "sid" not in portfolio.client.cookies


# ───────────────────────── register ───────────────────────────────────
async def test_register_then_duplicate(portfolio):
    request = RegisterRequest(
        username="newbie",
        email="newbie@example.com",
        password="long-enough",
        user_type="creator_collector",
    )
    assert await portfolio.session.register(request)
    assert portfolio.notifier.drain()[-1].title == "Registration successful"

    assert not await portfolio.session.register(request)
    assert portfolio.session.register_mutation.error_message == "Username already exists"


async def test_register_validates_fields():
    with pytest.raises(ValueError):
        RegisterRequest(username="ab", email="a@example.com", password="long-enough")
    with pytest.raises(ValueError):
        RegisterRequest(username="abc", email="not-an-email", password="long-enough")
    with pytest.raises(ValueError):
        RegisterRequest(username="abc", email="a@example.com", password="short")
