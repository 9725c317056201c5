"""
Category (collection) reads and writes.

Every write invalidates both the category list and the category options
used by item forms.
"""

from __future__ import annotations

from typing import Any

from nftfolio.core import keys
from nftfolio.core.cache import QueryCache, Subscription
from nftfolio.core.http import ApiClient
from nftfolio.core.mutation import Mutation
from nftfolio.core.notifications import Notifier

from . import schemas

CATEGORY_WRITE_KEYS = (keys.CATEGORIES_KEY, keys.CATEGORY_OPTIONS_KEY)


def parse_categories(data: Any) -> list[schemas.Category]:
    if not isinstance(data, list):
        return []
    return [schemas.Category.model_validate(row) for row in data if isinstance(row, dict)]


def parse_options(data: Any) -> list[schemas.CategoryOption]:
    if not isinstance(data, list):
        return []

    options: list[schemas.CategoryOption] = []
    for row in data:
        if isinstance(row, str) and row.strip():
            options.append(schemas.CategoryOption(value=row.strip(), label=row.strip()))
        elif isinstance(row, dict):
            value = str(row.get("value") or row.get("slug") or row.get("name") or "").strip()
            if not value:
                continue
            label = str(row.get("label") or row.get("name") or value).strip()
            options.append(schemas.CategoryOption(value=value, label=label))
    return options


class CategoryService:
    def __init__(self, *, client: ApiClient, cache: QueryCache, notifier: Notifier) -> None:
        self._client = client
        self._cache = cache

        def mutation(fn, name: str, success, failure: str) -> Mutation:
            return Mutation(
                fn,
                cache=cache,
                notifier=notifier,
                invalidates=CATEGORY_WRITE_KEYS,
                name=name,
                success_title=success,
                error_title=failure,
            )

        self.create_mutation = mutation(
            self._create, "create_category",
            "Collection created successfully", "Failed to create collection",
        )
        self.update_mutation = mutation(
            self._update, "update_category",
            "Collection updated successfully", "Failed to update collection",
        )
        self.delete_mutation = mutation(
            self._delete, "delete_category",
            "Collection deleted successfully", "Failed to delete collection",
        )
        self.import_mutation = mutation(
            self._import_from_tezos, "import_collections",
            lambda r: f"Successfully imported {r.imported} collections from Tezos",
            "Failed to import from Tezos",
        )
        self.refresh_images_mutation = mutation(
            self._refresh_images, "refresh_collection_images",
            lambda r: f"Successfully updated {r.updated} collection images",
            "Failed to refresh images",
        )

    async def _load_categories(self) -> list[schemas.Category]:
        return parse_categories(await self._client.get_json(keys.CATEGORIES_KEY[0]))

    async def _load_options(self) -> list[schemas.CategoryOption]:
        return parse_options(await self._client.get_json(keys.CATEGORY_OPTIONS_KEY[0]))

    async def list_categories(self) -> list[schemas.Category]:
        return await self._cache.fetch(keys.CATEGORIES_KEY, self._load_categories)

    def observe_categories(self, listener) -> Subscription:
        return self._cache.observe(keys.CATEGORIES_KEY, self._load_categories, listener)

    async def category_options(self) -> list[schemas.CategoryOption]:
        return await self._cache.fetch(keys.CATEGORY_OPTIONS_KEY, self._load_options)

    async def _create(self, form: schemas.CategoryForm) -> schemas.Category:
        data = await self._client.send_json("POST", keys.CATEGORIES_KEY[0], form.to_wire())
        return schemas.Category.model_validate(data)

    async def _update(self, category_id: int, form: schemas.CategoryForm) -> schemas.Category:
        payload = {"id": int(category_id), **form.to_wire()}
        data = await self._client.send_json("PUT", f"/api/categories/{int(category_id)}", payload)
        return schemas.Category.model_validate(data)

    async def _delete(self, category_id: int) -> None:
        await self._client.request("DELETE", f"/api/categories/{int(category_id)}")

    async def _import_from_tezos(
        self, request: schemas.TezosCollectionImport
    ) -> schemas.ImportCollectionsResult:
        data = await self._client.send_json(
            "POST", "/api/categories/import-from-tezos", request.to_wire()
        )
        return schemas.ImportCollectionsResult.model_validate(data or {})

    async def _refresh_images(self) -> schemas.RefreshImagesResult:
        data = await self._client.send_json("POST", "/api/categories/refresh-images")
        return schemas.RefreshImagesResult.model_validate(data or {})

    async def create(self, form: schemas.CategoryForm) -> schemas.Category:
        return await self.create_mutation.run(form)

    async def update(self, category_id: int, form: schemas.CategoryForm) -> schemas.Category:
        return await self.update_mutation.run(category_id, form)

    async def delete(self, category_id: int) -> None:
        await self.delete_mutation.run(category_id)

    async def import_from_tezos(self, address: str) -> schemas.ImportCollectionsResult:
        request = schemas.TezosCollectionImport(address=address)
        return await self.import_mutation.run(request)

    async def refresh_images(self) -> schemas.RefreshImagesResult:
        return await self.refresh_images_mutation.run()
