"""
Share link schemas.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import Field, field_validator

from nftfolio.core.schemas import WireModel
from nftfolio.items.schemas import PortfolioItem, validate_http_url


class ShareLink(WireModel):
    id: int
    item_id: int
    share_code: str
    custom_title: str | None = None
    custom_description: str | None = None
    custom_image_url: str | None = None
    expires_at: datetime | None = None
    clicks: int = 0
    share_url: str | None = None


class SharedItem(PortfolioItem):
    share_code: str
    custom_title: str | None = None
    custom_description: str | None = None
    custom_image_url: str | None = None
    clicks: int = 0

    @property
    def display_title(self) -> str:
        return self.custom_title or self.title

    @property
    def display_description(self) -> str:
        return self.custom_description or self.description

    @property
    def display_image_url(self) -> str:
        return self.custom_image_url or self.image_url


class ShareLinkForm(WireModel):
    # The share code itself is generated server-side.
    item_id: int = Field(..., ge=1)
    custom_title: str | None = None
    custom_description: str | None = None
    custom_image_url: str | None = None
    expires_at: datetime | None = None

    @field_validator("custom_title", "custom_description")
    @classmethod
    def _blank_to_none(cls, v: str | None) -> str | None:
        v = (v or "").strip()
        return v or None

    @field_validator("custom_image_url")
    @classmethod
    def _image_url(cls, v: str | None) -> str | None:
        return validate_http_url(v, field="Custom image URL")

    @field_validator("expires_at")
    @classmethod
    def _future(cls, v: datetime | None) -> datetime | None:
        if v is None:
            return None
        if v.tzinfo is None:
            v = v.replace(tzinfo=timezone.utc)
        if v <= datetime.now(timezone.utc):
            raise ValueError("Expiry date must be in the future")
        return v
