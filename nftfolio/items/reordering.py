"""
Item reordering controller ("arranging" mode).

    Viewing -> Arranging -> Viewing   (save or cancel)

The controller owns the list. Views dispatch intents (`start_arranging`,
`move`, `set_items`, `save`, `cancel`) and render `snapshot()`.

While arranging, the local list is what the view shows; server updates fed
through `sync` are ignored until the arrangement is saved or cancelled.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Callable, Iterable

from nftfolio.core.cache import QueryKey, QuerySnapshot, QueryStatus
from nftfolio.core.http import ApiError
from nftfolio.core.mutation import error_message
from nftfolio.core.notifications import Notifier

from .schemas import PortfolioItem
from .service import ItemService, order_entries

logger = logging.getLogger(__name__)


class ReorderStateError(RuntimeError):
    pass


class ReorderMode(str, enum.Enum):
    VIEWING = "viewing"
    ARRANGING = "arranging"


@dataclass(frozen=True)
class ReorderSnapshot:
    items: tuple[PortfolioItem, ...]
    mode: ReorderMode
    is_saving: bool
    error: str | None

    @property
    def is_arranging(self) -> bool:
        return self.mode is ReorderMode.ARRANGING


ReorderListener = Callable[[ReorderSnapshot], None]


class ItemReorderingController:
    def __init__(
        self,
        *,
        items_service: ItemService,
        source_key: QueryKey | str,
        initial_items: Iterable[PortfolioItem] = (),
        notifier: Notifier | None = None,
    ) -> None:
        self._service = items_service
        self._source_key: QueryKey = (source_key,) if isinstance(source_key, str) else tuple(source_key)
        self._notifier = notifier
        self._items: list[PortfolioItem] = list(initial_items)
        self._original: list[PortfolioItem] = []
        self._mode = ReorderMode.VIEWING
        self._saving = False
        self._listeners: list[ReorderListener] = []
        self.error: str | None = None

    @property
    def items(self) -> list[PortfolioItem]:
        return self._items

    @property
    def original_order(self) -> list[PortfolioItem]:
        return self._original

    @property
    def is_arranging(self) -> bool:
        return self._mode is ReorderMode.ARRANGING

    @property
    def is_saving(self) -> bool:
        return self._saving

    def snapshot(self) -> ReorderSnapshot:
        return ReorderSnapshot(
            items=tuple(self._items),
            mode=self._mode,
            is_saving=self._saving,
            error=self.error,
        )

    def subscribe(self, listener: ReorderListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self) -> None:
        snap = self.snapshot()
        for listener in list(self._listeners):
            listener(snap)

    def _require_arranging(self, action: str) -> None:
        if not self.is_arranging:
            raise ReorderStateError(f"Cannot {action} outside arranging mode.")

    def start_arranging(self) -> None:
        if self.is_arranging:
            return None
        # The snapshot keeps the current list object; edits go to a copy.
        self._original = self._items
        self._items = list(self._items)
        self._mode = ReorderMode.ARRANGING
        self.error = None
        if self._notifier is not None:
            self._notifier.toast(
                "Arrangement Mode",
                "Drag and drop items to rearrange them, then click Save.",
            )
        self._emit()

    def move(self, from_index: int, to_index: int) -> None:
        self._require_arranging("move items")
        size = len(self._items)
        if not (0 <= from_index < size and 0 <= to_index < size):
            raise IndexError(f"move({from_index}, {to_index}) out of range for {size} items")
        if from_index == to_index:
            return None
        item = self._items.pop(from_index)
        self._items.insert(to_index, item)
        self._emit()

    def set_items(self, items: Iterable[PortfolioItem]) -> None:
        """
        Replace the local order wholesale (e.g. the result of a drop).
        """
        self._require_arranging("reorder items")
        new_items = list(items)
        if sorted(i.id for i in new_items) != sorted(i.id for i in self._items):
            raise ValueError("Reordered list must contain exactly the same items.")
        self._items = new_items
        self._emit()

    def cancel(self) -> None:
        if not self.is_arranging:
            return None
        self._items = self._original
        self._original = []
        self._mode = ReorderMode.VIEWING
        self.error = None
        self._emit()

    async def save(self) -> bool:
        self._require_arranging("save")
        if self._saving:
            logger.info("reorder_save_ignored reason=pending")
            return False

        entries = order_entries(self._items)
        self._saving = True
        self.error = None
        self._emit()
        try:
            await self._service.update_order(entries, source_keys=[self._source_key])
        except ApiError as e:
            # Stay in arranging mode with the local order intact; no retry.
            self.error = error_message(e)
            return False
        finally:
            self._saving = False
            self._emit()

        self._original = []
        self._mode = ReorderMode.VIEWING
        self._emit()
        return True

    def sync(self, current_items: Iterable[PortfolioItem]) -> bool:
        """
        Adopt the externally supplied list, unless arranging or already equal.
        """
        if self.is_arranging:
            return False
        new_items = list(current_items)
        if new_items == self._items:
            return False
        self._items = new_items
        self._emit()
        return True

    def on_query(self, snap: QuerySnapshot) -> None:
        """
        Cache listener: feed successful reads of the source key into `sync`.
        """
        if snap.status is QueryStatus.SUCCESS and isinstance(snap.data, list):
            self.sync(snap.data)
