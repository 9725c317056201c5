"""
Authors: an aggregate view computed by the backend (name, item count,
profile image). Only the profile image is writable.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from pydantic import field_validator

from nftfolio.core import keys
from nftfolio.core.cache import QueryCache
from nftfolio.core.http import ApiClient
from nftfolio.core.mutation import Mutation
from nftfolio.core.notifications import Notifier
from nftfolio.core.schemas import WireModel
from nftfolio.items.schemas import validate_http_url


class Author(WireModel):
    name: str
    item_count: int = 0
    profile_image: str | None = None


class AuthorProfileUpdate(WireModel):
    profile_image: str | None = None

    @field_validator("profile_image")
    @classmethod
    def _profile_image(cls, v: str | None) -> str | None:
        v = (v or "").strip()
        if v.startswith("/"):
            return v
        return validate_http_url(v, field="Profile image")


def parse_authors(data: Any) -> list[Author]:
    if not isinstance(data, list):
        return []
    return [Author.model_validate(row) for row in data if isinstance(row, dict)]


class AuthorService:
    def __init__(self, *, client: ApiClient, cache: QueryCache, notifier: Notifier) -> None:
        self._client = client
        self._cache = cache
        self.update_profile_mutation: Mutation[Any] = Mutation(
            self._patch_profile,
            cache=cache,
            notifier=notifier,
            invalidates=(keys.AUTHORS_KEY, keys.AUTHOR_ITEMS_KEY),
            name="update_author_profile",
            success_title="Profile updated",
        )

    async def _load(self) -> list[Author]:
        return parse_authors(await self._client.get_json(keys.AUTHORS_KEY[0]))

    async def list_authors(self) -> list[Author]:
        return await self._cache.fetch(keys.AUTHORS_KEY, self._load)

    async def _patch_profile(self, name: str, update: AuthorProfileUpdate) -> Any:
        path = f"{keys.AUTHORS_KEY[0]}/{quote(name, safe='')}"
        return await self._client.send_json("PATCH", path, update.to_wire())

    async def update_profile_image(self, name: str, profile_image: str | None) -> Any:
        update = AuthorProfileUpdate(profile_image=profile_image)
        return await self.update_profile_mutation.run(name, update)
