"""Platform operator console: cross-tenant stats, companies, activity."""

import logging

from src.api.errors import ApiError
from src.api.resources import SuperAdminAPI
from src.core.schemas import ActivityLog, ActivityLogFilters, CompanyWithStats, SuperAdminStats
from src.dashboard.listing import FilteredList

logger = logging.getLogger(__name__)


class SuperAdminConsole:
    def __init__(self, api: SuperAdminAPI, *, debounce_s: float = 0.3) -> None:
        self._api = api
        self.stats: SuperAdminStats | None = None
        self.companies: list[CompanyWithStats] = []
        self.logs: FilteredList[ActivityLog, ActivityLogFilters] = FilteredList(
            self._fetch_logs, ActivityLogFilters(), debounce_s=debounce_s, name="platform logs",
        )

    async def load_stats(self) -> SuperAdminStats | None:
        try:
            self.stats = await self._api.stats()
        except ApiError as e:
            logger.error("Failed to fetch stats: %s", e)
        return self.stats

    async def load_companies(self) -> list[CompanyWithStats]:
        try:
            self.companies = await self._api.companies()
        except ApiError as e:
            logger.error("Failed to fetch companies: %s", e)
        return self.companies

    def filter_company(self, company_id: str | None) -> None:
        """Narrow the activity log to one tenant, or all when None."""
        self.logs.set_filters(company_id=company_id or None)

    async def _fetch_logs(self, filters: ActivityLogFilters | None) -> list[ActivityLog]:
        return await self._api.activity_logs(filters)
