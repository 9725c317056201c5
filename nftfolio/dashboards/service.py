"""
Creator and admin dashboard reads, plus the admin quota write.

Dashboard payloads are shaped by the backend and change often; the models
keep unknown fields instead of dropping them.
"""

from __future__ import annotations

from typing import Any

from pydantic import ConfigDict, Field

from nftfolio.core import keys
from nftfolio.core.cache import QueryCache
from nftfolio.core.http import ApiClient
from nftfolio.core.mutation import Mutation
from nftfolio.core.notifications import Notifier
from nftfolio.core.schemas import WireModel
from nftfolio.items.service import parse_items


class _OpenModel(WireModel):
    model_config = ConfigDict(extra="allow")


class CreatorStats(_OpenModel):
    total_items: int = 0
    total_views: int = 0
    total_favorites: int = 0


class QuotaInfo(_OpenModel):
    user_id: int
    username: str = ""
    subscription_type: str = "free"
    max_items: int | None = None
    max_storage_mb: float | None = Field(default=None, alias="maxStorageMB")
    current_items: int = 0
    current_storage_used_mb: float = Field(default=0.0, alias="currentStorageUsedMB")
    items_remaining: int | None = None
    is_at_item_limit: bool = False
    is_at_storage_limit: bool = False
    can_upload: bool = True


class AdminStats(_OpenModel):
    total_users: int = 0
    total_items: int = 0


class AdminUser(_OpenModel):
    id: int
    username: str
    role: str = "guest"


class SetQuotaRequest(WireModel):
    user_id: int = Field(..., ge=1)
    max_items: int | None = Field(default=None, ge=0)
    max_storage_mb: float | None = Field(default=None, ge=0, alias="maxStorageMB")


class DashboardService:
    def __init__(self, *, client: ApiClient, cache: QueryCache, notifier: Notifier) -> None:
        self._client = client
        self._cache = cache
        self.set_quota_mutation: Mutation[Any] = Mutation(
            self._post_quota,
            cache=cache,
            notifier=notifier,
            invalidates=(keys.ADMIN_USERS_KEY, keys.ADMIN_STATS_KEY, keys.USER_QUOTA_KEY),
            name="set_quota",
            success_title="Quota updated",
        )

    async def _get(self, key, build) -> Any:
        async def load() -> Any:
            return build(await self._client.get_json(key[0]))

        return await self._cache.fetch(key, load)

    async def creator_stats(self) -> CreatorStats:
        return await self._get(keys.CREATOR_STATS_KEY, lambda d: CreatorStats.model_validate(d or {}))

    async def creator_items(self) -> list:
        return await self._get(keys.CREATOR_ITEMS_KEY, parse_items)

    async def quota(self) -> QuotaInfo | None:
        return await self._get(
            keys.USER_QUOTA_KEY,
            lambda d: QuotaInfo.model_validate(d) if isinstance(d, dict) else None,
        )

    async def admin_stats(self) -> AdminStats:
        return await self._get(keys.ADMIN_STATS_KEY, lambda d: AdminStats.model_validate(d or {}))

    async def admin_users(self) -> list[AdminUser]:
        return await self._get(
            keys.ADMIN_USERS_KEY,
            lambda d: [AdminUser.model_validate(r) for r in d or [] if isinstance(r, dict)],
        )

    async def _post_quota(self, request: SetQuotaRequest) -> Any:
        return await self._client.send_json(
            "POST", "/api/admin/set-quota", request.to_wire(exclude_none=True)
        )

    async def set_quota(self, request: SetQuotaRequest) -> Any:
        return await self.set_quota_mutation.run(request)
