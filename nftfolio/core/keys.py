"""
Query keys for every cached read.

Writes invalidate by prefix, so the bare `*_KEY` tuples below cover every
discriminated variant (`items_key("Photography")` lives under `ITEMS_KEY`).
"""

from __future__ import annotations

from .cache import QueryKey, make_key

SESSION_KEY: QueryKey = make_key("/api/auth/me")

ITEMS_KEY: QueryKey = make_key("/api/items")
CATEGORY_ITEMS_KEY: QueryKey = make_key("/api/items/category")
AUTHOR_ITEMS_KEY: QueryKey = make_key("/api/items/author")
ITEM_LIST_KEYS: tuple[QueryKey, ...] = (ITEMS_KEY, CATEGORY_ITEMS_KEY, AUTHOR_ITEMS_KEY)

CATEGORIES_KEY: QueryKey = make_key("/api/categories")
CATEGORY_OPTIONS_KEY: QueryKey = make_key("/api/category-options")

AUTHORS_KEY: QueryKey = make_key("/api/authors")
FAVORITES_KEY: QueryKey = make_key("/api/favorites")
SITE_SETTINGS_KEY: QueryKey = make_key("/api/site-settings")

TEZOS_NFTS_KEY: QueryKey = make_key("/api/nfts/tezos")

CREATOR_STATS_KEY: QueryKey = make_key("/api/creator/stats")
CREATOR_ITEMS_KEY: QueryKey = make_key("/api/creator/items")
USER_QUOTA_KEY: QueryKey = make_key("/api/user/quota")

ADMIN_STATS_KEY: QueryKey = make_key("/api/admin/dashboard/stats")
ADMIN_USERS_KEY: QueryKey = make_key("/api/admin/users")


def items_key(category: str | None = None) -> QueryKey:
    return make_key(ITEMS_KEY[0], category)


def item_key(item_id: int) -> QueryKey:
    return make_key(f"/api/items/{item_id}")


def category_items_key(slug: str) -> QueryKey:
    return make_key(CATEGORY_ITEMS_KEY[0], slug)


def author_items_key(name: str) -> QueryKey:
    return make_key(AUTHOR_ITEMS_KEY[0], name)


def favorites_key(user_id: int) -> QueryKey:
    return make_key(FAVORITES_KEY[0], user_id)


def share_links_key(item_id: int) -> QueryKey:
    return make_key(f"/api/items/{item_id}/share-links")


def shared_item_key(share_code: str) -> QueryKey:
    return make_key(f"/api/share/{share_code}")


def tezos_nfts_key(address: str, limit: int, offset: int) -> QueryKey:
    return make_key(TEZOS_NFTS_KEY[0], address, limit, offset)

