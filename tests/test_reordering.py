"""
tests/test_reordering.py
"""
from __future__ import annotations

import asyncio
import random

import pytest

from nftfolio.auth.schemas import LoginRequest
from nftfolio.core.keys import category_items_key
from nftfolio.core.notifications import ToastVariant
from nftfolio.items.reordering import ReorderMode, ReorderSnapshot, ReorderStateError
from nftfolio.items.schemas import PortfolioItem, UpdateOrderRequest
from nftfolio.items.service import order_entries

pytestmark = pytest.mark.anyio

SLUG = "digital-art"
CATEGORY_READ = ("GET", f"/api/items/category/{SLUG}")


# ───────────────────────── helpers ────────────────────────────────────
def _item(item_id: int, title: str) -> PortfolioItem:
    return PortfolioItem(id=item_id, title=title, category=SLUG, display_order=item_id - 1)


async def _settle() -> None:
    for _ in range(20):
        await asyncio.sleep(0)


async def _arranged(portfolio):
    """Logged-in portfolio with a controller fed by the category read."""
    await portfolio.session.login(LoginRequest(username="admin", password="secret-pass"))
    key = category_items_key(SLUG)
    items = await portfolio.items.items_by_category(SLUG)
    controller = portfolio.reordering(key, items)
    portfolio.items.observe_category_items(SLUG, controller.on_query)
    return controller, key


# ───────────────────────── pure ordering ──────────────────────────────
@pytest.mark.parametrize("seed", [1, 2, 3, 4, 5])
def test_order_entries_are_contiguous_positions(seed):
    items = [_item(i, f"t{i}") for i in range(1, 9)]
    random.Random(seed).shuffle(items)

    entries = order_entries(items)

    assert [e.display_order for e in entries] == list(range(len(items)))
    assert [e.id for e in entries] == [i.id for i in items]
    UpdateOrderRequest(items=entries)


def test_order_request_rejects_gaps_and_duplicates():
    with pytest.raises(ValueError):
        UpdateOrderRequest.model_validate({"items": [{"id": 1, "displayOrder": 0}, {"id": 2, "displayOrder": 2}]})
    with pytest.raises(ValueError):
        UpdateOrderRequest.model_validate({"items": [{"id": 1, "displayOrder": 0}, {"id": 1, "displayOrder": 1}]})


# ───────────────────────── local editing ──────────────────────────────
async def test_cancel_restores_the_exact_list(portfolio):
    a, b, c = _item(1, "A"), _item(2, "B"), _item(3, "C")
    controller = portfolio.reordering("/api/items", [a, b, c])
    before = controller.items

    controller.start_arranging()
    controller.move(2, 0)
    controller.move(1, 2)
    assert [i.title for i in controller.items] != ["A", "B", "C"]

    controller.cancel()
    assert controller.items is before
    assert not controller.is_arranging


async def test_edits_do_not_touch_the_original(portfolio):
    a, b, c = _item(1, "A"), _item(2, "B"), _item(3, "C")
    controller = portfolio.reordering("/api/items", [a, b, c])
    controller.start_arranging()
    controller.move(0, 2)
    assert [i.title for i in controller.original_order] == ["A", "B", "C"]
    assert [i.title for i in controller.items] == ["B", "C", "A"]
    assert portfolio.notifier.pending[-1].title == "Arrangement Mode"


async def test_editing_requires_arranging_mode(portfolio):
    controller = portfolio.reordering("/api/items", [_item(1, "A"), _item(2, "B")])
    with pytest.raises(ReorderStateError):
        controller.move(0, 1)
    controller.start_arranging()
    with pytest.raises(IndexError):
        controller.move(0, 5)
    with pytest.raises(ValueError):
        controller.set_items([_item(1, "A")])


async def test_sync_is_ignored_while_arranging(portfolio):
    a, b = _item(1, "A"), _item(2, "B")
    controller = portfolio.reordering("/api/items", [a, b])
    seen: list[ReorderSnapshot] = []
    controller.subscribe(seen.append)

    assert controller.sync([b, a])
    assert not controller.sync([b, a])
    assert len(seen) == 1

    controller.start_arranging()
    assert not controller.sync([a, b])
    assert [i.title for i in controller.items] == ["B", "A"]


# ───────────────────────── saving ─────────────────────────────────────
async def test_save_sends_positions_and_refreshes_source(portfolio, backend):
    controller, key = await _arranged(portfolio)
    a, b, c = controller.items
    assert backend.hit_count(*CATEGORY_READ) == 1

    controller.start_arranging()
    controller.set_items([c, a, b])
    assert await controller.save()

    assert backend.order_updates[-1] == {
        "items": [
            {"id": c.id, "displayOrder": 0},
            {"id": a.id, "displayOrder": 1},
            {"id": b.id, "displayOrder": 2},
        ]
    }
    assert controller.snapshot().mode is ReorderMode.VIEWING
    assert controller.original_order == []

    refreshed = await portfolio.items.items_by_category(SLUG)
    await _settle()
    assert backend.hit_count(*CATEGORY_READ) == 2
    assert [i.id for i in refreshed] == [c.id, a.id, b.id]
    assert [i.id for i in controller.items] == [c.id, a.id, b.id]
    assert portfolio.notifier.pending[-1].title == "Order updated"


async def test_failed_save_stays_arranging(portfolio, backend):
    controller, key = await _arranged(portfolio)
    a, b, c = controller.items
    backend.fail_update_order = True

    controller.start_arranging()
    controller.set_items([c, b, a])
    assert not await controller.save()

    assert controller.is_arranging
    assert not controller.is_saving
    assert controller.error == "Database unavailable"
    assert [i.id for i in controller.items] == [c.id, b.id, a.id]
    assert backend.hit_count("POST", "/api/items/update-order") == 1
    assert backend.hit_count(*CATEGORY_READ) == 1

    toast = portfolio.notifier.pending[-1]
    assert toast.title == "Failed to update item order"
    assert toast.variant is ToastVariant.DESTRUCTIVE


async def test_save_outside_arranging_is_an_error(portfolio):
    controller = portfolio.reordering("/api/items", [_item(1, "A")])
    with pytest.raises(ReorderStateError):
        await controller.save()


async def test_saving_flag_is_reported(portfolio):
    controller, _ = await _arranged(portfolio)
    seen: list[ReorderSnapshot] = []
    controller.subscribe(seen.append)
    controller.start_arranging()
    controller.move(0, 1)
    await controller.save()
    assert any(s.is_saving for s in seen)
    assert not seen[-1].is_saving and not seen[-1].is_arranging
