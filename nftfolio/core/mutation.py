"""
Write-side helper shared by every feature.

A `Mutation` wraps one backend write. It tracks a pending flag (so views can
disable duplicate submits), records the last error, and on success
invalidates the query keys the write affects. Nothing is retried; a failed
write is re-triggered by the user.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Generic, Iterable, Sequence, TypeVar, Union

from pydantic import ValidationError

from .cache import QueryCache, QueryKey
from .http import ApiError, ApiStatusError, MalformedResponseError
from .notifications import Notifier

logger = logging.getLogger(__name__)

T = TypeVar("T")

Invalidates = Union[Sequence[QueryKey], Callable[..., Iterable[QueryKey]]]


def error_message(exc: BaseException) -> str:
    if isinstance(exc, ApiStatusError):
        return exc.message
    return str(exc) or exc.__class__.__name__


class Mutation(Generic[T]):
    def __init__(
        self,
        fn: Callable[..., Awaitable[T]],
        *,
        cache: QueryCache,
        notifier: Notifier | None = None,
        invalidates: Invalidates = (),
        name: str | None = None,
        success_title: str | Callable[[Any], str] | None = None,
        error_title: str = "Error",
        on_success: Callable[[T], None] | None = None,
    ) -> None:
        self._fn = fn
        self._cache = cache
        self._notifier = notifier
        self._invalidates = invalidates
        self.name = name or getattr(fn, "__name__", "mutation")
        self._success_title = success_title
        self._error_title = error_title
        self._on_success = on_success

        self._pending = 0
        self.error: BaseException | None = None
        self.data: T | None = None

    @property
    def is_pending(self) -> bool:
        return self._pending > 0

    @property
    def error_message(self) -> str | None:
        return error_message(self.error) if self.error is not None else None

    def reset(self) -> None:
        self.error = None
        self.data = None

    def _keys_for(self, args: tuple, kwargs: dict) -> list[QueryKey]:
        if callable(self._invalidates):
            return list(self._invalidates(*args, **kwargs))
        return list(self._invalidates)

    async def run(self, *args: Any, **kwargs: Any) -> T:
        """
        Execute the write; raise on failure after recording and surfacing it.
        """
        self._pending += 1
        self.error = None
        try:
            try:
                result = await self._fn(*args, **kwargs)
            except ValidationError as e:
                # Request models are built before the call; this is the response.
                raise MalformedResponseError(
                    f"Unexpected response shape from {self.name}: {e.error_count()} errors"
                ) from e
        except ApiError as e:
            self.error = e
            logger.warning("mutation_failed name=%s error=%s", self.name, e)
            if self._notifier is not None:
                self._notifier.error(self._error_title, error_message(e))
            raise
        finally:
            self._pending -= 1

        self.data = result
        keys = self._keys_for(args, kwargs)
        if keys:
            self._cache.invalidate(*keys)
        if self._on_success is not None:
            self._on_success(result)
        if self._notifier is not None and self._success_title:
            title = self._success_title
            self._notifier.toast(title(result) if callable(title) else title)
        logger.info("mutation_ok name=%s invalidated=%s", self.name, len(keys))
        return result

    async def mutate(self, *args: Any, **kwargs: Any) -> T | None:
        """
        Fire-and-forget flavour: failures stay on `error` and in the toast queue.
        """
        try:
            return await self.run(*args, **kwargs)
        except ApiError:
            return None
