"""
Portfolio item schemas.
"""

from __future__ import annotations

from datetime import datetime
from urllib.parse import urlsplit

from pydantic import ConfigDict, Field, field_validator, model_validator

from nftfolio.core.schemas import WireModel


def validate_http_url(value: str | None, *, field: str) -> str | None:
    value = (value or "").strip()
    if not value:
        return None
    parts = urlsplit(value)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ValueError(f"{field} must be an http(s) URL")
    return value


def normalize_tags(tags: list[str] | None) -> list[str]:
    """
    Trim tags and drop empty ones. A repeated tag is a form error.
    """
    result: list[str] = []
    for raw in tags or []:
        tag = (raw or "").strip()
        if not tag:
            continue
        if tag in result:
            raise ValueError(f'"{tag}" is already in your tags.')
        result.append(tag)
    return result


class MarketplaceLink(WireModel):
    url: str
    name: str | None = None


class PortfolioItem(WireModel):
    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    description: str = ""
    image_url: str = ""
    category: str = ""
    author: str | None = None
    tags: tuple[str, ...] = ()
    marketplace_url1: str | None = None
    marketplace_name1: str | None = None
    marketplace_url2: str | None = None
    marketplace_name2: str | None = None
    display_order: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def _null_tags(cls, v: object) -> object:
        return () if v is None else v

    @property
    def marketplace_links(self) -> list[MarketplaceLink]:
        links = []
        for url, name in (
            (self.marketplace_url1, self.marketplace_name1),
            (self.marketplace_url2, self.marketplace_name2),
        ):
            if url:
                links.append(MarketplaceLink(url=url, name=name or None))
        return links


class ItemForm(WireModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    image_url: str
    category: str = Field(..., min_length=1)
    author: str | None = None
    tags: list[str] = Field(default_factory=list)
    marketplace_url1: str | None = None
    marketplace_name1: str | None = None
    marketplace_url2: str | None = None
    marketplace_name2: str | None = None

    @field_validator("title", "description", "category", mode="before")
    @classmethod
    def _strip(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v

    @field_validator("image_url")
    @classmethod
    def _image_url(cls, v: str) -> str:
        url = validate_http_url(v, field="Image URL")
        if url is None:
            raise ValueError("Image URL is required")
        return url

    @field_validator("marketplace_url1", "marketplace_url2")
    @classmethod
    def _marketplace_url(cls, v: str | None) -> str | None:
        return validate_http_url(v, field="Marketplace URL")

    @field_validator("marketplace_name1", "marketplace_name2", "author")
    @classmethod
    def _blank_to_none(cls, v: str | None) -> str | None:
        v = (v or "").strip()
        return v or None

    @field_validator("tags")
    @classmethod
    def _tags(cls, v: list[str]) -> list[str]:
        return normalize_tags(v)

    @model_validator(mode="after")
    def _names_need_urls(self) -> ItemForm:
        if self.marketplace_name1 and not self.marketplace_url1:
            raise ValueError("Marketplace 1 has a name but no URL")
        if self.marketplace_name2 and not self.marketplace_url2:
            raise ValueError("Marketplace 2 has a name but no URL")
        return self


class OrderEntry(WireModel):
    id: int
    display_order: int = Field(..., ge=0)


class UpdateOrderRequest(WireModel):
    items: list[OrderEntry]

    @model_validator(mode="after")
    def _contiguous(self) -> UpdateOrderRequest:
        orders = sorted(entry.display_order for entry in self.items)
        if orders != list(range(len(orders))):
            raise ValueError("displayOrder values must form 0..N-1")
        ids = [entry.id for entry in self.items]
        if len(set(ids)) != len(ids):
            raise ValueError("Each item may appear only once")
        return self
