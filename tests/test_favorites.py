"""
tests/test_favorites.py
"""
from __future__ import annotations

import pytest

from nftfolio.auth.schemas import LoginRequest
from nftfolio.core import keys
from nftfolio.favorites.service import filter_items
from nftfolio.items.schemas import PortfolioItem

pytestmark = pytest.mark.anyio

FAVORITES = ("GET", "/api/favorites")


def _item(item_id: int, title: str, **extra) -> PortfolioItem:
    return PortfolioItem.model_validate({"id": item_id, "title": title, **extra})


# ───────────────────────── reads ──────────────────────────────────────
async def test_anonymous_visitor_never_requests_favorites(portfolio, backend):
    assert await portfolio.favorites.list_favorites() == []
    assert await portfolio.favorites.search("alpha") == []
    assert backend.hit_count(*FAVORITES) == 0


async def test_favorites_are_cached_per_user(portfolio, backend):
    backend.favorites = {1: [1], 2: [2, 4]}
    await portfolio.session.login(LoginRequest(username="carla", password="creator-pass"))

    favorites = await portfolio.favorites.list_favorites()
    assert [i.title for i in favorites] == ["Beta", "Delta"]
    await portfolio.favorites.list_favorites()
    assert backend.hit_count(*FAVORITES) == 1
    assert portfolio.cache.get_entry(keys.favorites_key(2)) is not None

    await portfolio.session.logout()
    assert await portfolio.favorites.list_favorites() == []
    assert backend.hit_count(*FAVORITES) == 1

    await portfolio.session.login(LoginRequest(username="admin", password="secret-pass"))
    assert [i.title for i in await portfolio.favorites.list_favorites()] == ["Alpha"]
    assert backend.hit_count(*FAVORITES) == 2


async def test_search_runs_over_cached_list(portfolio, backend):
    backend.favorites = {2: [2, 4]}
    await portfolio.session.login(LoginRequest(username="carla", password="creator-pass"))

    assert [i.title for i in await portfolio.favorites.search("ben")] == ["Delta"]
    assert [i.title for i in await portfolio.favorites.search("BETA")] == ["Beta"]
    assert len(await portfolio.favorites.search("  ")) == 2
    assert backend.hit_count(*FAVORITES) == 1


# ───────────────────────── filtering ──────────────────────────────────
def test_filter_matches_title_description_author_and_tags():
    items = [
        _item(1, "Sunrise", description="Morning light", author="ana", tags=["landscape"]),
        _item(2, "Grid", description="Generative study", author=None, tags=["Code", "loops"]),
        _item(3, "Portrait", description="", author="Ben"),
    ]
    assert [i.id for i in filter_items(items, "sun")] == [1]
    assert [i.id for i in filter_items(items, "generative")] == [2]
    assert [i.id for i in filter_items(items, "ben")] == [3]
    assert [i.id for i in filter_items(items, "code")] == [2]
    assert [i.id for i in filter_items(items, None)] == [1, 2, 3]
    assert filter_items(items, "nothing like this") == []
