"""
NFT import from a Tezos wallet.

The wallet listing is cached per (address, limit, offset). Importing adds
portfolio items, so it invalidates item lists, categories and authors.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from nftfolio.core import keys
from nftfolio.core.cache import QueryCache
from nftfolio.core.http import ApiClient
from nftfolio.core.mutation import Mutation
from nftfolio.core.notifications import Notifier

from . import schemas

logger = logging.getLogger(__name__)

IMPORT_WRITE_KEYS = (
    *keys.ITEM_LIST_KEYS,
    keys.CATEGORIES_KEY,
    keys.CATEGORY_OPTIONS_KEY,
    keys.AUTHORS_KEY,
    keys.CREATOR_ITEMS_KEY,
)


def parse_nfts(data: Any) -> list[schemas.WalletNft]:
    rows = data.get("nfts") if isinstance(data, dict) else data
    if not isinstance(rows, list):
        return []
    return [schemas.WalletNft.model_validate(row) for row in rows if isinstance(row, dict)]


class NftService:
    def __init__(self, *, client: ApiClient, cache: QueryCache, notifier: Notifier) -> None:
        self._client = client
        self._cache = cache
        self.import_mutation: Mutation[schemas.ImportResult] = Mutation(
            self._post_import,
            cache=cache,
            notifier=notifier,
            invalidates=IMPORT_WRITE_KEYS,
            name="import_nfts",
            success_title=lambda r: f"Successfully imported {r.imported} NFTs",
            error_title="Failed to import NFTs",
        )

    async def wallet_nfts(
        self,
        address: str,
        *,
        limit: int = schemas.DEFAULT_NFT_LIMIT,
        offset: int = 0,
        refresh: bool = False,
    ) -> list[schemas.WalletNft]:
        query = schemas.WalletQuery(address=address, limit=limit, offset=offset)

        async def load() -> list[schemas.WalletNft]:
            data = await self._client.get_json(keys.TEZOS_NFTS_KEY[0], params=query.to_wire())
            nfts = parse_nfts(data)
            logger.info("wallet_nfts_loaded address=%s count=%s", query.address, len(nfts))
            return nfts

        key = keys.tezos_nfts_key(query.address, query.limit, query.offset)
        return await self._cache.fetch(key, load, force=refresh)

    async def _post_import(self, request: schemas.ImportRequest) -> schemas.ImportResult:
        data = await self._client.send_json(
            "POST", "/api/nfts/tezos/import", request.to_wire(exclude_none=True)
        )
        return schemas.ImportResult.model_validate(data or {})

    async def import_nfts(
        self,
        wallet_address: str,
        nfts: Iterable[schemas.WalletNft],
    ) -> schemas.ImportResult:
        request = schemas.ImportRequest(wallet_address=wallet_address, nfts=list(nfts))
        return await self.import_mutation.run(request)


def select_nfts(
    nfts: Iterable[schemas.WalletNft],
    selected_ids: Iterable[str],
) -> list[schemas.WalletNft]:
    """
    Keep wallet order; ids that are not in the listing are ignored.
    """
    wanted = set(selected_ids)
    return [nft for nft in nfts if nft.id in wanted]
