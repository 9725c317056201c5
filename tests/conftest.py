"""
tests/conftest.py
"""
from __future__ import annotations

import httpx
import pytest

from nftfolio.app import Portfolio
from nftfolio.core.config import ClientSettings

from .fake_backend import BackendState, create_app

BASE_URL = "http://testserver"


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def backend() -> BackendState:
    state = BackendState()
    state.add_user(username="admin", password="secret-pass", role="admin")
    state.add_user(username="carla", password="creator-pass", role="creator_collector")
    state.add_user(username="gus", password="guest-pass", role="visitor")
    state.categories.append(
        {"id": 1, "name": "Digital Art", "slug": "digital-art", "description": None, "imageUrl": None, "displayOrder": 0}
    )
    for title in ("Alpha", "Beta", "Gamma"):
        state.add_item(title=title, category="digital-art")
    state.add_item(title="Delta", category="photography", author="ben")
    state.settings.update({"twitter_url": "https://twitter.com/nftfolio", "items_per_page": "24"})
    return state


@pytest.fixture
async def portfolio(anyio_backend, backend: BackendState):
    settings = ClientSettings(base_url=BASE_URL, log_level="DEBUG")
    transport = httpx.ASGITransport(app=create_app(backend))
    app = Portfolio(settings, transport=transport)
    yield app
    await app.aclose()
