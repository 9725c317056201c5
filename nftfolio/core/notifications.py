"""
Toast notifications queued for the view layer.
"""

from __future__ import annotations

import enum
import logging
from collections import deque
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_MAX_PENDING = 50


class ToastVariant(str, enum.Enum):
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


@dataclass(frozen=True)
class Toast:
    title: str
    description: str | None = None
    variant: ToastVariant = ToastVariant.DEFAULT


class Notifier:
    def __init__(self, *, max_pending: int = DEFAULT_MAX_PENDING) -> None:
        # Oldest toasts drop off first if nobody drains the queue.
        self._pending: deque[Toast] = deque(maxlen=max_pending)

    @property
    def pending(self) -> tuple[Toast, ...]:
        return tuple(self._pending)

    def toast(
        self,
        title: str,
        description: str | None = None,
        *,
        variant: ToastVariant = ToastVariant.DEFAULT,
    ) -> Toast:
        item = Toast(title=title, description=description, variant=variant)
        self._pending.append(item)
        logger.debug("toast title=%r variant=%s", title, variant.value)
        return item

    def error(self, title: str, description: str | None = None) -> Toast:
        return self.toast(title, description, variant=ToastVariant.DESTRUCTIVE)

    def drain(self) -> list[Toast]:
        items = list(self._pending)
        self._pending.clear()
        return items

    def clear(self) -> None:
        self._pending.clear()
