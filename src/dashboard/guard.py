"""Route guard for protected dashboard layouts.

Three flags decide what a layout shows:
  - mounted: the layout has been mounted at least once
  - initialized: the session store finished rehydrating
  - is_authenticated: the store holds a token

Until mounted and initialized, nothing protected is rendered (only the
placeholder, which is None for the full dashboard). Once settled, an
unauthenticated session is redirected to the login route exactly once.
"""

import logging
from collections.abc import Callable
from typing import Any, TypeVar

from src.dashboard.navigation import ADMIN_LOGIN, EMBED_LOGIN, SUPER_ADMIN_LOGIN, Router, build_route
from src.session.store import SessionContext, SessionStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RouteGuard:
    """Gate a layout on a session store."""

    def __init__(
        self,
        store: SessionStore[Any],
        router: Router,
        login_route: str,
        *,
        placeholder: str | None = None,
    ) -> None:
        self._store = store
        self._router = router
        self._login_route = login_route
        self._placeholder = placeholder
        self._unsubscribe: Callable[[], None] | None = None
        self._redirected = False
        self.mounted = False

    @property
    def settled(self) -> bool:
        return self.mounted and self._store.initialized

    @property
    def can_render(self) -> bool:
        return self.settled and self._store.is_authenticated

    @property
    def redirected(self) -> bool:
        return self._redirected

    def mount(self) -> None:
        """Mount the layout and rehydrate the session once."""
        if self.mounted:
            return
        self.mounted = True
        self._unsubscribe = self._store.subscribe(self._on_change)
        self._store.check_auth()

    def unmount(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.mounted = False

    def render(self, content: Callable[[], T]) -> T | str | None:
        """Build protected content only when allowed; otherwise the placeholder."""
        if not self.can_render:
            return self._placeholder
        return content()

    def _on_change(self, store: SessionStore[Any]) -> None:
        if store.is_authenticated:
            self._redirected = False
            return
        if self.settled and not self._redirected:
            self._redirected = True
            logger.info("Not signed in, redirecting to %s", self._login_route)
            self._router.push(self._login_route)


def admin_guard(session: SessionContext, router: Router) -> RouteGuard:
    """Full admin dashboard: renders nothing while unresolved."""
    return RouteGuard(session.admin, router, ADMIN_LOGIN)


def embed_guard(
    session: SessionContext, router: Router, company_id: str | None = None,
) -> RouteGuard:
    """Iframe dashboard: shows a loading placeholder while unresolved.

    The login redirect keeps the embed's company_id.
    """
    login_route = build_route(EMBED_LOGIN, company_id=company_id)
    return RouteGuard(session.admin, router, login_route, placeholder="Loading...")


def super_admin_guard(session: SessionContext, router: Router) -> RouteGuard:
    return RouteGuard(session.super_admin, router, SUPER_ADMIN_LOGIN)
