"""
Site settings: a flat key/value map edited one key at a time by admins.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, model_validator

from nftfolio.core import keys
from nftfolio.core.cache import QueryCache
from nftfolio.core.http import ApiClient
from nftfolio.core.mutation import Mutation
from nftfolio.core.notifications import Notifier

SETTING_DEFAULTS: dict[str, str] = {
    "twitter_url": "",
    "instagram_url": "",
    "email_contact": "",
    "phone_contact": "",
    "office_address": "",
    "grid_columns_desktop": "3",
    "grid_columns_tablet": "2",
    "grid_columns_mobile": "1",
    "items_per_page": "12",
}

NUMERIC_SETTINGS = frozenset(
    {"grid_columns_desktop", "grid_columns_tablet", "grid_columns_mobile", "items_per_page"}
)


class SettingUpdate(BaseModel):
    key: str
    value: str

    @model_validator(mode="after")
    def _known_key(self) -> SettingUpdate:
        if self.key not in SETTING_DEFAULTS:
            raise ValueError(f"Unknown site setting '{self.key}'")
        self.value = self.value.strip() if self.key != "office_address" else self.value
        if self.key in NUMERIC_SETTINGS:
            if not self.value.isdigit() or int(self.value) <= 0:
                raise ValueError(f"{self.key} must be a positive whole number")
        return self


@dataclass(frozen=True)
class SiteSettings:
    values: dict[str, str]

    def get(self, key: str) -> str:
        return self.values.get(key) or SETTING_DEFAULTS.get(key, "")

    def get_int(self, key: str) -> int:
        raw = self.get(key)
        try:
            return int(raw)
        except ValueError:
            return int(SETTING_DEFAULTS[key])

    @property
    def office_address_lines(self) -> list[str]:
        return [line for line in self.get("office_address").split("\n") if line.strip()]


def parse_settings(data: Any) -> SiteSettings:
    values: dict[str, str] = dict(SETTING_DEFAULTS)
    if isinstance(data, dict):
        for key, value in data.items():
            if value is not None:
                values[str(key)] = str(value)
    return SiteSettings(values=values)


class SiteSettingsService:
    def __init__(self, *, client: ApiClient, cache: QueryCache, notifier: Notifier) -> None:
        self._client = client
        self._cache = cache
        self.update_mutation: Mutation[Any] = Mutation(
            self._post_setting,
            cache=cache,
            notifier=notifier,
            invalidates=[keys.SITE_SETTINGS_KEY],
            name="update_site_setting",
            success_title="Settings updated",
            error_title="Update failed",
        )

    async def _load(self) -> SiteSettings:
        return parse_settings(await self._client.get_json(keys.SITE_SETTINGS_KEY[0]))

    async def get_settings(self) -> SiteSettings:
        return await self._cache.fetch(keys.SITE_SETTINGS_KEY, self._load)

    async def _post_setting(self, update: SettingUpdate) -> Any:
        return await self._client.send_json("POST", keys.SITE_SETTINGS_KEY[0], update.model_dump())

    async def update_setting(self, key: str, value: str) -> Any:
        return await self.update_mutation.run(SettingUpdate(key=key, value=value))

    async def update_many(self, values: dict[str, str]) -> list[str]:
        """
        Write each changed key; returns the keys that were sent.
        """
        current = await self.get_settings()
        updates = [
            SettingUpdate(key=key, value=value)
            for (key, value) in values.items()
            if current.get(key) != value
        ]
        for update in updates:
            await self.update_mutation.run(update)
        return [u.key for u in updates]
