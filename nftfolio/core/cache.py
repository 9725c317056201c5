"""
Client-side query cache.

Reads are keyed by a tuple whose first element is the resource path, e.g.
`("/api/items", "Photography")`. Invalidation matches keys by prefix, so
invalidating `("/api/items",)` also marks `("/api/items", "Photography")`
stale.

Policy:
- entries never expire on their own; writes invalidate what they touch
- one in-flight load per key, shared by every concurrent reader
- observers get the cached value immediately and a background refetch when
  the entry is missing or stale (stale-while-revalidate)
- no retries
"""

from __future__ import annotations

import asyncio
import enum
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

QueryKey = tuple[Any, ...]
Loader = Callable[[], Awaitable[Any]]
Listener = Callable[["QuerySnapshot"], None]


def make_key(path: str, *discriminators: Any) -> QueryKey:
    return (path, *discriminators)


def key_matches(key: QueryKey, prefix: QueryKey) -> bool:
    return key[: len(prefix)] == prefix


class QueryStatus(str, enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class QuerySnapshot:
    key: QueryKey
    status: QueryStatus
    data: Any
    error: BaseException | None
    is_stale: bool
    is_fetching: bool
    updated_at: float | None

    @property
    def is_loading(self) -> bool:
        return self.status is QueryStatus.LOADING


@dataclass
class _Entry:
    key: QueryKey
    loader: Loader | None = None
    data: Any = None
    error: BaseException | None = None
    status: QueryStatus = QueryStatus.IDLE
    is_stale: bool = True
    version: int = 0
    updated_at: float | None = None
    task: asyncio.Task | None = None
    task_version: int = 0
    refetch_pending: bool = False
    listeners: list[Listener] = field(default_factory=list)

    def snapshot(self) -> QuerySnapshot:
        return QuerySnapshot(
            key=self.key,
            status=self.status,
            data=self.data,
            error=self.error,
            is_stale=self.is_stale,
            is_fetching=self.task is not None,
            updated_at=self.updated_at,
        )


class Subscription:
    """
    Handle returned by `QueryCache.observe`.
    """

    def __init__(self, cache: QueryCache, entry: _Entry, listener: Listener) -> None:
        self._cache = cache
        self._entry = entry
        self._listener = listener
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def snapshot(self) -> QuerySnapshot:
        return self._entry.snapshot()

    def unsubscribe(self) -> None:
        if not self._active:
            return None
        self._active = False
        try:
            self._entry.listeners.remove(self._listener)
        except ValueError:
            pass


def _consume_exception(task: asyncio.Task) -> None:
    # Failures are recorded on the entry; background loads have no awaiter.
    if not task.cancelled():
        task.exception()


class QueryCache:
    def __init__(self) -> None:
        self._entries: dict[QueryKey, _Entry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def _entry(self, key: QueryKey, loader: Loader | None = None) -> _Entry:
        entry = self._entries.get(key)
        if entry is None:
            entry = _Entry(key=key)
            self._entries[key] = entry
        if loader is not None:
            entry.loader = loader
        return entry

    def _notify(self, entry: _Entry) -> None:
        snap = entry.snapshot()
        for listener in list(entry.listeners):
            try:
                listener(snap)
            except Exception:
                logger.exception("query_listener_failed key=%r", entry.key)

    def _start(self, entry: _Entry) -> asyncio.Task:
        if entry.loader is None:
            raise RuntimeError(f"No loader registered for query {entry.key!r}.")

        if entry.status is not QueryStatus.SUCCESS:
            entry.status = QueryStatus.LOADING
        entry.refetch_pending = False
        entry.task_version = entry.version
        task = asyncio.ensure_future(self._run(entry, entry.loader, entry.version))
        task.add_done_callback(_consume_exception)
        entry.task = task
        self._notify(entry)
        return task

    async def _run(self, entry: _Entry, loader: Loader, started_version: int) -> Any:
        logger.debug("query_fetch key=%r", entry.key)
        try:
            data = await loader()
        except Exception as e:
            if entry.version == started_version:
                entry.error = e
                entry.status = QueryStatus.ERROR
            logger.warning("query_failed key=%r error=%s", entry.key, e)
            raise
        else:
            if entry.version == started_version:
                entry.data = data
                entry.error = None
                entry.status = QueryStatus.SUCCESS
                entry.is_stale = False
                entry.updated_at = time.monotonic()
            else:
                # A write or invalidation landed while this load was in flight.
                logger.debug("query_result_discarded key=%r", entry.key)
            return data
        finally:
            if entry.task is asyncio.current_task():
                entry.task = None
            # A newer load may already own the entry.
            if entry.task is None:
                if entry.refetch_pending and entry.listeners:
                    self._start(entry)
                else:
                    entry.refetch_pending = False
                    if entry.status is QueryStatus.LOADING:
                        entry.status = QueryStatus.IDLE
                    self._notify(entry)

    async def fetch(self, key: QueryKey, loader: Loader, *, force: bool = False) -> Any:
        """
        Read-through: return fresh cached data or run `loader` once for all callers.
        """
        entry = self._entry(key, loader)
        task = entry.task
        if task is not None and entry.task_version != entry.version:
            # Started before a write or invalidation; its result will be discarded.
            task = None
        if task is None:
            if not force and entry.status is QueryStatus.SUCCESS and not entry.is_stale:
                return entry.data
            task = self._start(entry)
        # Shielded so one caller going away does not cancel the shared load.
        return await asyncio.shield(task)

    def observe(self, key: QueryKey, loader: Loader, listener: Listener) -> Subscription:
        """
        Register `listener` for changes to `key` and revalidate in the background
        when the entry is missing, failed or stale.
        """
        entry = self._entry(key, loader)
        entry.listeners.append(listener)
        sub = Subscription(self, entry, listener)
        if entry.task is None:
            if entry.status is not QueryStatus.SUCCESS or entry.is_stale:
                self._start(entry)
        elif entry.is_stale and entry.task_version != entry.version:
            entry.refetch_pending = True
        return sub

    def invalidate(self, *prefixes: QueryKey) -> int:
        """
        Mark every entry under any of `prefixes` stale. Observed entries refetch now.
        """
        touched = 0
        for entry in list(self._entries.values()):
            if not any(key_matches(entry.key, p) for p in prefixes):
                continue
            touched += 1
            entry.is_stale = True
            entry.version += 1
            if entry.task is not None:
                # Whoever observes by the time it lands gets a fresh load.
                entry.refetch_pending = True
            elif entry.listeners and entry.loader is not None:
                self._start(entry)
            else:
                self._notify(entry)
        logger.debug("query_invalidate prefixes=%r entries=%s", prefixes, touched)
        return touched

    def set_data(self, key: QueryKey, value: Any) -> None:
        """
        Write `value` directly; loads already in flight will not overwrite it.
        """
        entry = self._entry(key)
        entry.data = value
        entry.error = None
        entry.status = QueryStatus.SUCCESS
        entry.is_stale = False
        entry.version += 1
        entry.updated_at = time.monotonic()
        self._notify(entry)

    def get_data(self, key: QueryKey) -> Any:
        entry = self._entries.get(key)
        return entry.data if entry is not None else None

    def get_entry(self, key: QueryKey) -> QuerySnapshot | None:
        entry = self._entries.get(key)
        return entry.snapshot() if entry is not None else None

    def reset(self) -> None:
        for entry in self._entries.values():
            entry.listeners.clear()
            if entry.task is not None:
                entry.task.cancel()
        self._entries.clear()
