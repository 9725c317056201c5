"""
Portfolio item reads and writes.

Reads:
- GET /api/items[?category=]         -> items_key(category)
- GET /api/items/:id                 -> item_key(id)
- GET /api/items/category/:slug      -> category_items_key(slug)
- GET /api/items/author/:name        -> author_items_key(name)

Writes:
- POST /api/items               -> every item list, authors
- POST /api/items/update-order  -> the caller's source list key(s)
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Sequence
from urllib.parse import quote

from nftfolio.core import keys
from nftfolio.core.cache import QueryCache, QueryKey, QuerySnapshot, Subscription
from nftfolio.core.http import ApiClient
from nftfolio.core.mutation import Mutation
from nftfolio.core.notifications import Notifier

from . import schemas

logger = logging.getLogger(__name__)


def parse_items(data: Any) -> list[schemas.PortfolioItem]:
    if not isinstance(data, list):
        return []
    return [schemas.PortfolioItem.model_validate(row) for row in data if isinstance(row, dict)]


def order_entries(items: Sequence[schemas.PortfolioItem]) -> list[schemas.OrderEntry]:
    """
    displayOrder is the zero-based position in the given order.
    """
    return [schemas.OrderEntry(id=item.id, display_order=index) for index, item in enumerate(items)]


class ItemService:
    def __init__(self, *, client: ApiClient, cache: QueryCache, notifier: Notifier) -> None:
        self._client = client
        self._cache = cache
        self._notifier = notifier

        self.create_mutation: Mutation[schemas.PortfolioItem] = Mutation(
            self._post_item,
            cache=cache,
            notifier=notifier,
            invalidates=[*keys.ITEM_LIST_KEYS, keys.AUTHORS_KEY, keys.CREATOR_ITEMS_KEY],
            name="create_item",
            success_title="Item added successfully",
        )
        self.update_order_mutation: Mutation[Any] = Mutation(
            self._post_order,
            cache=cache,
            notifier=notifier,
            invalidates=_order_invalidations,
            name="update_order",
            success_title="Order updated",
            error_title="Failed to update item order",
        )

    def _list_loader(self, path: str, params: dict[str, Any] | None = None):
        async def load() -> list[schemas.PortfolioItem]:
            return parse_items(await self._client.get_json(path, params=params))

        return load

    def _items_query(self, category: str | None) -> tuple[QueryKey, Any]:
        params = {"category": category} if category else None
        return keys.items_key(category), self._list_loader(keys.ITEMS_KEY[0], params)

    def _category_query(self, slug: str) -> tuple[QueryKey, Any]:
        path = f"{keys.CATEGORY_ITEMS_KEY[0]}/{quote(slug, safe='')}"
        return keys.category_items_key(slug), self._list_loader(path)

    def _author_query(self, name: str) -> tuple[QueryKey, Any]:
        path = f"{keys.AUTHOR_ITEMS_KEY[0]}/{quote(name, safe='')}"
        return keys.author_items_key(name), self._list_loader(path)

    async def list_items(self, category: str | None = None) -> list[schemas.PortfolioItem]:
        key, loader = self._items_query(category)
        return await self._cache.fetch(key, loader)

    def observe_items(self, listener, category: str | None = None) -> Subscription:
        key, loader = self._items_query(category)
        return self._cache.observe(key, loader, listener)

    async def items_by_category(self, slug: str) -> list[schemas.PortfolioItem]:
        key, loader = self._category_query(slug)
        return await self._cache.fetch(key, loader)

    def observe_category_items(self, slug: str, listener) -> Subscription:
        key, loader = self._category_query(slug)
        return self._cache.observe(key, loader, listener)

    async def items_by_author(self, name: str) -> list[schemas.PortfolioItem]:
        key, loader = self._author_query(name)
        return await self._cache.fetch(key, loader)

    async def get_item(self, item_id: int) -> schemas.PortfolioItem | None:
        async def load() -> schemas.PortfolioItem | None:
            data = await self._client.get_json(f"/api/items/{int(item_id)}")
            return schemas.PortfolioItem.model_validate(data) if isinstance(data, dict) else None

        return await self._cache.fetch(keys.item_key(item_id), load)

    def snapshot(self, key: QueryKey) -> QuerySnapshot | None:
        return self._cache.get_entry(key)

    async def _post_item(self, form: schemas.ItemForm) -> schemas.PortfolioItem:
        data = await self._client.send_json("POST", keys.ITEMS_KEY[0], form.to_wire())
        return schemas.PortfolioItem.model_validate(data)

    async def create_item(self, form: schemas.ItemForm) -> schemas.PortfolioItem:
        return await self.create_mutation.run(form)

    async def _post_order(
        self,
        payload: schemas.UpdateOrderRequest,
        *,
        source_keys: Iterable[QueryKey] = (),
    ) -> Any:
        logger.info("update_order items=%s", len(payload.items))
        return await self._client.send_json("POST", "/api/items/update-order", payload.to_wire())

    async def update_order(
        self,
        entries: Sequence[schemas.OrderEntry],
        *,
        source_keys: Iterable[QueryKey] = (),
    ) -> Any:
        payload = schemas.UpdateOrderRequest(items=list(entries))
        return await self.update_order_mutation.run(payload, source_keys=tuple(source_keys))


def _order_invalidations(
    payload: schemas.UpdateOrderRequest,
    *,
    source_keys: Iterable[QueryKey] = (),
) -> list[QueryKey]:
    return list(source_keys)
