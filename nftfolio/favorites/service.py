"""
Favorites of the signed-in user.

`GET /api/favorites` needs a session, so it is never sent for an anonymous
visitor. The list is cached per user id; searching runs locally over it.
"""

from __future__ import annotations

import logging
from typing import Iterable

from nftfolio.auth.session import SessionStore
from nftfolio.core import keys
from nftfolio.core.cache import QueryCache
from nftfolio.core.http import ApiClient
from nftfolio.core.notifications import Notifier
from nftfolio.items.schemas import PortfolioItem
from nftfolio.items.service import parse_items

logger = logging.getLogger(__name__)


def _matches(item: PortfolioItem, needle: str) -> bool:
    fields = [item.title, item.description, item.author or "", *item.tags]
    return any(needle in value.lower() for value in fields)


def filter_items(items: Iterable[PortfolioItem], query: str | None) -> list[PortfolioItem]:
    """
    Case-insensitive substring match on title, description, author and tags.
    A blank query keeps everything.
    """
    needle = (query or "").strip().lower()
    if not needle:
        return list(items)
    return [item for item in items if _matches(item, needle)]


class FavoritesService:
    def __init__(
        self,
        *,
        client: ApiClient,
        cache: QueryCache,
        notifier: Notifier,
        session: SessionStore,
    ) -> None:
        self._client = client
        self._cache = cache
        self._session = session

    async def _load(self) -> list[PortfolioItem]:
        return parse_items(await self._client.get_json(keys.FAVORITES_KEY[0]))

    async def list_favorites(self) -> list[PortfolioItem]:
        user = await self._session.wait_user()
        if user is None:
            logger.debug("favorites_skipped reason=anonymous")
            return []
        return await self._cache.fetch(keys.favorites_key(user.id), self._load)

    async def search(self, query: str | None) -> list[PortfolioItem]:
        return filter_items(await self.list_favorites(), query)
