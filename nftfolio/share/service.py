"""
Public share links.

`GET /api/share/:shareCode` is public and read-only. Managing the links of an
item needs a session; those writes invalidate that item's link list.
"""

from __future__ import annotations

import re
from typing import Any

from nftfolio.core import keys
from nftfolio.core.cache import QueryCache
from nftfolio.core.http import ApiClient
from nftfolio.core.mutation import Mutation
from nftfolio.core.notifications import Notifier

from . import schemas

_SHARE_CODE_RE = re.compile(r"^[A-Za-z0-9_-]{4,128}$")


def normalize_share_code(share_code: str | None) -> str:
    code = (share_code or "").strip()
    if not _SHARE_CODE_RE.match(code):
        raise ValueError("Invalid share code.")
    return code


def parse_links(data: Any) -> list[schemas.ShareLink]:
    if not isinstance(data, list):
        return []
    return [schemas.ShareLink.model_validate(row) for row in data if isinstance(row, dict)]


class ShareService:
    def __init__(self, *, client: ApiClient, cache: QueryCache, notifier: Notifier) -> None:
        self._client = client
        self._cache = cache
        self.create_mutation: Mutation[schemas.ShareLink] = Mutation(
            self._post_link,
            cache=cache,
            notifier=notifier,
            invalidates=lambda form: [keys.share_links_key(form.item_id)],
            name="create_share_link",
            success_title="Share link created",
            error_title="Failed to create share link",
        )
        self.delete_mutation: Mutation[None] = Mutation(
            self._delete_link,
            cache=cache,
            notifier=notifier,
            invalidates=lambda item_id, share_id: [keys.share_links_key(item_id)],
            name="delete_share_link",
            success_title="Share link deleted",
            error_title="Failed to delete share link",
        )

    async def shared_item(self, share_code: str) -> schemas.SharedItem | None:
        code = normalize_share_code(share_code)

        async def load() -> schemas.SharedItem | None:
            data = await self._client.get_json(f"/api/share/{code}")
            return schemas.SharedItem.model_validate(data) if isinstance(data, dict) else None

        return await self._cache.fetch(keys.shared_item_key(code), load)

    async def links_for_item(self, item_id: int) -> list[schemas.ShareLink]:
        async def load() -> list[schemas.ShareLink]:
            return parse_links(await self._client.get_json(f"/api/items/{int(item_id)}/share-links"))

        return await self._cache.fetch(keys.share_links_key(item_id), load)

    async def _post_link(self, form: schemas.ShareLinkForm) -> schemas.ShareLink:
        data = await self._client.send_json("POST", "/api/share-links", form.to_wire())
        return schemas.ShareLink.model_validate(data)

    async def _delete_link(self, item_id: int, share_id: int) -> None:
        await self._client.request("DELETE", f"/api/share-links/{int(share_id)}")

    async def create_link(self, form: schemas.ShareLinkForm) -> schemas.ShareLink:
        return await self.create_mutation.run(form)

    async def delete_link(self, item_id: int, share_id: int) -> None:
        await self.delete_mutation.run(item_id, share_id)
