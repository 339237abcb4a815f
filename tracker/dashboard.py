import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from tracker.api import ApiClient
from tracker.domain import AccountsOverview, DashboardSummary, Trends
from tracker.events import EventBus
from tracker.reshape import merge_total_balance, overview_from_wire, summary_from_wire, to_backend_period, trends_from_wire
from tracker.state import StateContainer

logger = logging.getLogger(__name__)

TIME_RANGES = ("week", "month", "year")
DEFAULT_RANGE = "month"


def normalize_range(time_range) -> str:
    return time_range if time_range in TIME_RANGES else DEFAULT_RANGE


@dataclass(frozen=True)
class DashboardState:
    summary: Optional[DashboardSummary] = None
    trends: Optional[Trends] = None
    overview: Optional[AccountsOverview] = None
    time_range: str = DEFAULT_RANGE
    loading: bool = False
    error: Optional[str] = None


class DashboardStore(StateContainer[DashboardState]):
    name = "dashboard"

    def __init__(self, api: ApiClient, bus: EventBus):
        super().__init__(api, bus, DashboardState())

    async def load_summary(self, time_range: str | None = None) -> Optional[DashboardSummary]:
        period = to_backend_period(time_range or self._state.time_range)
        outcome = await self._request(
            "summary",
            "Failed to fetch dashboard summary",
            lambda: self._api.get("/dashboard/summary", params={"period": period}),
        )
        if not outcome.ok:
            return None
        summary = merge_total_balance(summary_from_wire(outcome.payload), self._state.overview)
        if outcome.latest:
            self._set(summary=summary)
        return summary

    async def load_trends(self, time_range: str | None = None) -> Optional[Trends]:
        time_range = normalize_range(time_range or self._state.time_range)
        outcome = await self._request(
            "trends",
            "Failed to fetch trends",
            lambda: self._api.get("/dashboard/trends", params={"period": to_backend_period(time_range)}),
        )
        if not outcome.ok:
            return None
        trends = trends_from_wire(outcome.payload)
        if outcome.latest:
            self._set(trends=trends, time_range=time_range)
        return trends

    async def load_overview(self) -> Optional[AccountsOverview]:
        outcome = await self._request("overview", "Failed to fetch accounts overview", lambda: self._api.get("/dashboard/accounts"))
        if not outcome.ok:
            return None
        overview = overview_from_wire(outcome.payload)
        if outcome.latest:
            self._set(overview=overview, summary=merge_total_balance(self._state.summary, overview))
        return overview

    async def load_all(self, time_range: str = DEFAULT_RANGE) -> DashboardState:
        """Fetch summary, trends and overview concurrently.

        Each part fails on its own; whatever succeeded is kept and nothing
        is rolled back.
        """
        time_range = normalize_range(time_range)
        self._error_from = None
        self._set(time_range=time_range, error=None)
        summary, trends, overview = await asyncio.gather(
            self.load_summary(time_range),
            self.load_trends(time_range),
            self.load_overview(),
        )
        failed = [name for name, part in (("summary", summary), ("trends", trends), ("overview", overview)) if part is None]
        if failed:
            logger.info("dashboard loaded partially, missing: %s", ", ".join(failed))
        return self._state

    async def set_time_range(self, time_range: str) -> Optional[Trends]:
        time_range = normalize_range(time_range)
        self._set(time_range=time_range)
        return await self.load_trends(time_range)

    def clear(self) -> None:
        self._error_from = None
        self._set(summary=None, trends=None, overview=None, time_range=DEFAULT_RANGE, error=None)
