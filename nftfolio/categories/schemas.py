"""
Category (collection) schemas.
"""

from __future__ import annotations

from pydantic import Field, field_validator

from nftfolio.core.schemas import WireModel
from nftfolio.items.schemas import validate_http_url
from nftfolio.nfts.schemas import validate_tezos_address


class Category(WireModel):
    id: int
    name: str
    slug: str | None = None
    description: str | None = None
    image_url: str | None = None
    display_order: int = 0


class CategoryForm(WireModel):
    name: str = Field(..., max_length=120)
    description: str | None = None
    image_url: str | None = None

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Collection name is required")
        return v

    @field_validator("description")
    @classmethod
    def _description(cls, v: str | None) -> str | None:
        v = (v or "").strip()
        return v or None

    @field_validator("image_url")
    @classmethod
    def _image_url(cls, v: str | None) -> str | None:
        # Uploaded images come back as site-relative paths.
        v = (v or "").strip()
        if v.startswith("/"):
            return v
        return validate_http_url(v, field="Image URL")


class CategoryOption(WireModel):
    value: str
    label: str


class TezosCollectionImport(WireModel):
    address: str

    @field_validator("address")
    @classmethod
    def _address(cls, v: str) -> str:
        return validate_tezos_address(v)


class ImportCollectionsResult(WireModel):
    imported: int = 0
    skipped: int = 0


class RefreshImagesResult(WireModel):
    updated: int = 0
    failed: int = 0
