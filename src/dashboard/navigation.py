"""Client-side routes and a minimal router that records navigation."""

import logging
from urllib.parse import parse_qs, urlencode, urlsplit

logger = logging.getLogger(__name__)

ADMIN_LOGIN = "/admin/login"
ADMIN_DASHBOARD = "/admin/dashboard"
EMBED_LOGIN = "/embed/login"
EMBED_DASHBOARD = "/embed/dashboard"
SUPER_ADMIN_LOGIN = "/super-admin/login"
SUPER_ADMIN_DASHBOARD = "/super-admin/dashboard"
APPLICATION_STATUS = "/application-status"


def build_route(path: str, **params: str | None) -> str:
    """Append non-empty query params to a route."""
    query = {k: v for k, v in params.items() if v}
    if not query:
        return path
    return f"{path}?{urlencode(query)}"


def query_param(route: str, name: str) -> str | None:
    """Read one query parameter from a route or URL. Empty values give None."""
    values = parse_qs(urlsplit(route).query).get(name)
    if not values or not values[0]:
        return None
    return values[0]


class Router:
    """Records pushed routes. The last one is where the user is."""

    def __init__(self, initial: str = "/") -> None:
        self.history: list[str] = [initial]

    @property
    def current(self) -> str:
        return self.history[-1]

    def push(self, route: str) -> None:
        logger.debug("Navigate: %s -> %s", self.current, route)
        self.history.append(route)
