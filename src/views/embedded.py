"""Embedded (iframe) dashboard and its tenant check.

The embed URL carries the company the snippet was generated for. Before any
data is fetched, that company is compared with the signed-in admin's:

  - no company_id in the URL   → MISCONFIGURED, blocking error
  - not signed in              → REDIRECT to the embed login for that company
  - different company          → SECURITY_ERROR, only relogin is offered
  - same company               → READY, stats are loaded

The backend still authorizes every data call; this only decides which
tenant's dashboard is shown.
"""

import asyncio
import logging
from enum import Enum

from src.api.errors import ApiError
from src.api.resources import ApplicationAPI, JobAPI
from src.core.schemas import DashboardStats
from src.dashboard.guard import embed_guard
from src.dashboard.navigation import EMBED_LOGIN, Router, build_route, query_param
from src.session.store import SessionContext

logger = logging.getLogger(__name__)

MISSING_COMPANY = (
    "Invalid embed code: Company ID is missing. "
    "Please use the embed code from your dashboard."
)
COMPANY_MISMATCH = (
    "Security Error: The embed code does not match your account. "
    "Please log out and use the correct embed code from your dashboard."
)


class EmbedState(str, Enum):
    LOADING = "loading"
    MISCONFIGURED = "misconfigured"
    REDIRECT = "redirect"
    SECURITY_ERROR = "security_error"
    READY = "ready"


def embed_snippet(frontend_url: str, company_id: str) -> str:
    """The iframe snippet an admin pastes into their own site."""
    src = f"{frontend_url.rstrip('/')}/jobs/{company_id}"
    return (
        "<iframe\n"
        f'  src="{src}"\n'
        '  width="100%"\n'
        '  height="800px"\n'
        '  frameborder="0">\n'
        "</iframe>"
    )


class EmbeddedDashboard:
    """View-model for ``/embed/dashboard?company_id=...``."""

    def __init__(
        self,
        route: str,
        session: SessionContext,
        router: Router,
        jobs: JobAPI,
        applications: ApplicationAPI,
    ) -> None:
        self.company_id = query_param(route, "company_id")
        self._session = session
        self._router = router
        self._jobs = jobs
        self._applications = applications
        self._guard = embed_guard(session, router, self.company_id)

        self.state = EmbedState.LOADING
        self.error: str | None = None
        self.stats = DashboardStats()

    async def open(self) -> EmbedState:
        """Run the tenant check and, when it passes, load the stats."""
        if not self.company_id:
            logger.error("Embed opened without company_id")
            return self._block(EmbedState.MISCONFIGURED, MISSING_COMPANY)

        self._guard.mount()
        store = self._session.admin
        if not store.is_authenticated:
            self.state = EmbedState.REDIRECT
            return self.state

        if store.identity is None or store.identity.company_id != self.company_id:
            logger.warning("Embed for company %s opened by another tenant", self.company_id)
            return self._block(EmbedState.SECURITY_ERROR, COMPANY_MISMATCH)

        self.state = EmbedState.READY
        await self.load()
        return self.state

    async def load(self) -> None:
        if self.state != EmbedState.READY:
            return
        try:
            jobs, applications = await asyncio.gather(
                self._jobs.get_all(), self._applications.get_all(),
            )
        except ApiError as e:
            logger.error("Failed to fetch dashboard data: %s", e)
            return
        self.stats = DashboardStats.compute(jobs, applications)

    def relogin(self) -> None:
        """The only action offered on an error screen."""
        self._guard.unmount()
        self._session.admin.logout()
        self._router.push(build_route(EMBED_LOGIN, company_id=self.company_id))

    def close(self) -> None:
        self._guard.unmount()

    def _block(self, state: EmbedState, message: str) -> EmbedState:
        self.state = state
        self.error = message
        return state
