"""
Auth session store.

State is derived from the cached "who am I" read:

    Unknown -> Loading -> Authenticated(user) | Anonymous

A 401 on that read means "nobody is logged in"; any other failure is logged
and also treated as logged out, so views never see an exception from here.
"""

from __future__ import annotations

import enum
import logging
from typing import Any

from pydantic import ValidationError

from nftfolio.core.cache import QueryCache, QuerySnapshot, QueryStatus, Subscription
from nftfolio.core.http import ApiClient, ApiError
from nftfolio.core.keys import SESSION_KEY
from nftfolio.core.mutation import Mutation
from nftfolio.core.notifications import Notifier

from . import schemas

logger = logging.getLogger(__name__)

SESSION_PATH = SESSION_KEY[0]

LOGIN_FAILED = "Login failed"


class SessionState(str, enum.Enum):
    UNKNOWN = "unknown"
    LOADING = "loading"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


def state_from_snapshot(snap: QuerySnapshot | None) -> SessionState:
    if snap is None or snap.status is QueryStatus.IDLE:
        return SessionState.UNKNOWN
    if snap.status is QueryStatus.LOADING:
        return SessionState.LOADING
    if snap.status is QueryStatus.SUCCESS and snap.data is not None:
        return SessionState.AUTHENTICATED
    return SessionState.ANONYMOUS


class SessionStore:
    def __init__(self, *, client: ApiClient, cache: QueryCache, notifier: Notifier) -> None:
        self._client = client
        self._cache = cache
        self._notifier = notifier
        self._subscription: Subscription | None = None
        self.error: str | None = None

        self.login_mutation: Mutation[schemas.User | None] = Mutation(
            self._post_login,
            cache=cache,
            notifier=notifier,
            invalidates=[SESSION_KEY],
            name="login",
            error_title=LOGIN_FAILED,
        )
        self.logout_mutation: Mutation[None] = Mutation(
            self._post_logout,
            cache=cache,
            notifier=notifier,
            name="logout",
            error_title="Logout failed",
            on_success=self._clear_session,
        )
        self.register_mutation: Mutation[Any] = Mutation(
            self._post_register,
            cache=cache,
            notifier=notifier,
            name="register",
            success_title="Registration successful",
            error_title="Registration failed",
        )

    async def _load_user(self) -> schemas.User | None:
        try:
            data = await self._client.get_json(SESSION_PATH, on_unauthorized="none")
        except ApiError as e:
            logger.warning("session_read_failed error=%s", e)
            return None
        if not isinstance(data, dict):
            return None
        try:
            return schemas.User.model_validate(data)
        except ValidationError as e:
            logger.warning("session_user_invalid errors=%s", e.error_count())
            return None

    def load(self) -> None:
        """
        Start observing the session key (mount). Safe to call more than once.
        """
        if self._subscription is not None and self._subscription.active:
            return None
        self._subscription = self._cache.observe(SESSION_KEY, self._load_user, self._on_change)

    async def refresh(self) -> schemas.User | None:
        return await self._cache.fetch(SESSION_KEY, self._load_user, force=True)

    async def wait_user(self) -> schemas.User | None:
        """
        Resolve the current user, reusing a fresh cached value when there is one.
        """
        return await self._cache.fetch(SESSION_KEY, self._load_user)

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def _on_change(self, snap: QuerySnapshot) -> None:
        logger.debug("session_state state=%s", state_from_snapshot(snap).value)

    @property
    def state(self) -> SessionState:
        return state_from_snapshot(self._cache.get_entry(SESSION_KEY))

    @property
    def user(self) -> schemas.User | None:
        data = self._cache.get_data(SESSION_KEY)
        return data if isinstance(data, schemas.User) else None

    @property
    def role(self) -> schemas.Role | None:
        user = self.user
        return user.role if user is not None else None

    @property
    def is_admin(self) -> bool:
        return self.role is schemas.Role.ADMIN

    @property
    def is_loading(self) -> bool:
        return self.state in (SessionState.UNKNOWN, SessionState.LOADING)

    async def _post_login(self, credentials: schemas.LoginRequest) -> schemas.User | None:
        data = await self._client.send_json("POST", "/api/auth/login", credentials.to_wire())
        if isinstance(data, dict) and "id" in data:
            return schemas.User.model_validate(data)
        return None

    async def _post_logout(self) -> None:
        await self._client.request("POST", "/api/auth/logout")

    async def _post_register(self, data: schemas.RegisterRequest) -> Any:
        return await self._client.send_json("POST", "/api/auth/register", data.to_wire(exclude_none=True))

    def _clear_session(self, _: None) -> None:
        # Phase 1: drop the user locally so views react before the refetch.
        self._cache.set_data(SESSION_KEY, None)
        # Phase 2: reconcile with the server; a no-op if it agrees.
        self._cache.invalidate(SESSION_KEY)

    async def login(self, credentials: schemas.LoginRequest) -> bool:
        self.error = None
        result = await self.login_mutation.mutate(credentials)
        if self.login_mutation.error is not None:
            self.error = self.login_mutation.error_message or LOGIN_FAILED
            return False
        logger.info("login_ok user=%s", result.username if result is not None else "?")
        return True

    async def logout(self) -> bool:
        await self.logout_mutation.mutate()
        return self.logout_mutation.error is None

    async def register(self, data: schemas.RegisterRequest) -> bool:
        await self.register_mutation.mutate(data)
        return self.register_mutation.error is None
