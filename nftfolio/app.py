"""
Application container.

One `Portfolio` per running front end: it owns the HTTP client, the query
cache, the toast queue and the session store, and hands the same instances
to every feature service. Nothing here is module-global; tests build a fresh
container (or awaits `reset()`) per case.

    async with Portfolio(settings) as portfolio:
        items = await portfolio.items.list_items()
"""

from __future__ import annotations

import logging

import httpx

from nftfolio.auth.guard import GuardDecision, guard_session
from nftfolio.auth.schemas import Role
from nftfolio.auth.session import SessionStore
from nftfolio.authors.service import AuthorService
from nftfolio.categories.service import CategoryService
from nftfolio.contact.service import ContactService
from nftfolio.core.cache import QueryCache, QueryKey
from nftfolio.core.config import ClientSettings, load_settings
from nftfolio.core.http import ApiClient
from nftfolio.core.logging_setup import configure_logging
from nftfolio.core.notifications import Notifier
from nftfolio.dashboards.service import DashboardService
from nftfolio.favorites.service import FavoritesService
from nftfolio.items.reordering import ItemReorderingController
from nftfolio.items.schemas import PortfolioItem
from nftfolio.items.service import ItemService
from nftfolio.nfts.service import NftService
from nftfolio.share.service import ShareService
from nftfolio.site_settings.service import SiteSettingsService

logger = logging.getLogger(__name__)


class Portfolio:
    def __init__(
        self,
        settings: ClientSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings or load_settings()
        self.client = ApiClient(
            base_url=self.settings.base_url,
            timeout_s=self.settings.timeout_s,
            transport=transport,
        )
        self.cache = QueryCache()
        self.notifier = Notifier()

        deps = {"client": self.client, "cache": self.cache, "notifier": self.notifier}
        self.session = SessionStore(**deps)
        self.items = ItemService(**deps)
        self.categories = CategoryService(**deps)
        self.authors = AuthorService(**deps)
        self.site_settings = SiteSettingsService(**deps)
        self.share = ShareService(**deps)
        self.contact = ContactService(**deps)
        self.nfts = NftService(**deps)
        self.dashboards = DashboardService(**deps)
        self.favorites = FavoritesService(**deps, session=self.session)
        self._started = False

    async def __aenter__(self) -> Portfolio:
        await self.start()
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()

    async def start(self) -> None:
        """
        Application start: configure logging and begin the session read.
        """
        if self._started:
            return None
        configure_logging(self.settings.log_level)
        self.session.load()
        self._started = True
        logger.info("portfolio_started base_url=%s", self.settings.base_url)

    async def aclose(self) -> None:
        self.session.close()
        self.cache.reset()
        await self.client.aclose()
        self._started = False

    async def reset(self) -> None:
        """
        Drop cached reads and pending toasts; the HTTP client stays open.
        A started container resumes its session read on the running loop.
        """
        self.session.close()
        self.cache.reset()
        self.notifier.clear()
        if self._started:
            self.session.load()

    def guard(self, required_role: Role | None = None) -> GuardDecision:
        return guard_session(
            self.session,
            required_role=required_role,
            login_route=self.settings.login_route,
            default_route=self.settings.home_route,
        )

    def reordering(
        self,
        source_key: QueryKey | str,
        initial_items: list[PortfolioItem] | None = None,
    ) -> ItemReorderingController:
        return ItemReorderingController(
            items_service=self.items,
            source_key=source_key,
            initial_items=initial_items or [],
            notifier=self.notifier,
        )
