import asyncio
import logging
from typing import Optional

import httpx

from tracker.accounts import AccountStore
from tracker.api import ApiClient
from tracker.auth import AuthStore
from tracker.categories import CategoryStore
from tracker.config import Settings
from tracker.dashboard import DashboardStore
from tracker.events import EventBus
from tracker.session import TokenStore
from tracker.transactions import TransactionStore

logger = logging.getLogger(__name__)


class FinanceClient:
    """Facade wiring the API client, the bus and the five state containers.

    Every collaborator can be injected; anything left out is built from
    `settings`. The view layer receives this object instead of reaching
    for module-level state.
    """

    def __init__(
        self,
        settings: Settings,
        bus: Optional[EventBus] = None,
        tokens=None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self.bus = bus or EventBus()
        self.tokens = tokens if tokens is not None else TokenStore(settings.session_file)
        self.api = ApiClient(settings.api_url, self.tokens, timeout=settings.timeout, transport=transport)

        self.auth = AuthStore(self.api, self.bus, self.tokens)
        self.accounts = AccountStore(self.api, self.bus)
        self.categories = CategoryStore(self.api, self.bus)
        self.transactions = TransactionStore(self.api, self.bus, page_size=settings.page_size)
        self.dashboard = DashboardStore(self.api, self.bus)
        logger.debug("client ready for %s", settings.api_url)

    async def refresh(self, time_range: str = "month") -> None:
        """Everything the dashboard screen needs, the way it loads on open."""
        await asyncio.gather(
            self.dashboard.load_all(time_range),
            self.accounts.load(),
            self.categories.load(),
            self.transactions.load(),
        )

    async def aclose(self) -> None:
        await self.api.aclose()

    async def __aenter__(self) -> "FinanceClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()
