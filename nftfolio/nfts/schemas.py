"""
Wallet NFT schemas.
"""

from __future__ import annotations

from pydantic import Field, field_validator

from nftfolio.core.schemas import WireModel

TEZOS_ADDRESS_PREFIXES = ("tz1", "tz2", "tz3")

DEFAULT_NFT_LIMIT = 100


def validate_tezos_address(value: str | None) -> str:
    address = (value or "").strip()
    if not address:
        raise ValueError("Please enter a Tezos wallet address")
    if not address.startswith(TEZOS_ADDRESS_PREFIXES):
        raise ValueError("Invalid Tezos wallet address format")
    return address


class WalletNft(WireModel):
    # "<contract>_<tokenId>"
    id: str
    name: str | None = None
    description: str | None = None
    image: str | None = None
    contract: str | None = None
    token_id: str | None = None
    creator: str | None = None
    marketplace: str | None = None
    marketplace_url: str | None = None


class WalletQuery(WireModel):
    address: str
    limit: int = Field(default=DEFAULT_NFT_LIMIT, ge=1, le=500)
    offset: int = Field(default=0, ge=0)

    @field_validator("address")
    @classmethod
    def _address(cls, v: str) -> str:
        return validate_tezos_address(v)


class ImportRequest(WireModel):
    nfts: list[WalletNft] = Field(..., min_length=1)
    wallet_address: str

    @field_validator("wallet_address")
    @classmethod
    def _address(cls, v: str) -> str:
        return validate_tezos_address(v)


class ImportResult(WireModel):
    message: str = ""
    imported: int = 0
    skipped: int = 0
