"""Login and registration flows for the three sign-in pages.

Each flow holds the form's ``error`` and ``loading`` state. A successful call
persists the session through the matching store and navigates to the
dashboard; a failure keeps the session untouched and stores the message.
"""

import logging

from src.api.errors import ApiError
from src.api.resources import AuthAPI, SuperAdminAPI
from src.core.schemas import RegisterRequest
from src.dashboard.navigation import (
    ADMIN_DASHBOARD,
    EMBED_DASHBOARD,
    SUPER_ADMIN_DASHBOARD,
    Router,
    build_route,
)
from src.session.store import SessionContext

logger = logging.getLogger(__name__)

LOGIN_FAILED = "Login failed"
REGISTRATION_FAILED = "Registration failed"
EMBED_LOGIN_MISMATCH = (
    "This login does not match the embed code. "
    "Please use the correct embed code for your company."
)


class _Form:
    def __init__(self) -> None:
        self.error: str | None = None
        self.loading = False

    def _fail(self, e: ApiError, fallback: str) -> bool:
        self.error = e.user_message(fallback)
        logger.warning("%s: %s", fallback, e)
        return False


class AdminLoginFlow(_Form):
    """Tenant admin login and company registration."""

    def __init__(self, auth: AuthAPI, session: SessionContext, router: Router) -> None:
        super().__init__()
        self._auth = auth
        self._session = session
        self._router = router

    async def login(self, email: str, password: str) -> bool:
        self.error = None
        self.loading = True
        try:
            response = await self._auth.login(email, password)
        except ApiError as e:
            return self._fail(e, LOGIN_FAILED)
        finally:
            self.loading = False
        self._session.admin.login(response.admin, response.token)
        self._router.push(ADMIN_DASHBOARD)
        return True

    async def register(self, request: RegisterRequest) -> bool:
        """Create a company with its first admin, then sign that admin in."""
        self.error = None
        self.loading = True
        try:
            response = await self._auth.register(request)
        except ApiError as e:
            return self._fail(e, REGISTRATION_FAILED)
        finally:
            self.loading = False
        self._session.admin.login(response.admin, response.token)
        self._router.push(ADMIN_DASHBOARD)
        return True


class SuperAdminLoginFlow(_Form):
    def __init__(self, api: SuperAdminAPI, session: SessionContext, router: Router) -> None:
        super().__init__()
        self._api = api
        self._session = session
        self._router = router

    async def login(self, email: str, password: str) -> bool:
        self.error = None
        self.loading = True
        try:
            response = await self._api.login(email, password)
        except ApiError as e:
            return self._fail(e, LOGIN_FAILED)
        finally:
            self.loading = False
        self._session.super_admin.login(response.super_admin, response.token)
        self._router.push(SUPER_ADMIN_DASHBOARD)
        return True


class EmbedLoginFlow(_Form):
    """Login inside the iframe, bound to the embed's company.

    When the page was opened with a company_id, an admin of any other company
    is refused and the session is not persisted.
    """

    def __init__(
        self,
        auth: AuthAPI,
        session: SessionContext,
        router: Router,
        company_id: str | None = None,
    ) -> None:
        super().__init__()
        self._auth = auth
        self._session = session
        self._router = router
        self.company_id = company_id or None

    async def login(self, email: str, password: str) -> bool:
        self.error = None
        self.loading = True
        try:
            response = await self._auth.login(email, password)
        except ApiError as e:
            return self._fail(e, LOGIN_FAILED)
        finally:
            self.loading = False

        company_id = response.admin.company_id
        if self.company_id and company_id != self.company_id:
            logger.warning(
                "Embed login for company %s refused on embed for %s",
                company_id, self.company_id,
            )
            self.error = EMBED_LOGIN_MISMATCH
            return False

        self._session.admin.login(response.admin, response.token)
        self._router.push(build_route(EMBED_DASHBOARD, company_id=self.company_id or company_id))
        return True
