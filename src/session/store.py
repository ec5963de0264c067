"""Session stores for the two auth scopes.

A tenant admin and a platform super-admin can be signed in at the same time,
so each scope gets its own store with its own storage keys. Stores are plain
objects handed around inside a SessionContext; nothing here is global.
"""

import json
import logging
from collections.abc import Callable
from typing import Generic, TypeVar

from pydantic import BaseModel, ValidationError

from src.core.schemas import Admin, SuperAdmin
from src.session.storage import Storage

logger = logging.getLogger(__name__)

IdentityT = TypeVar("IdentityT", bound=BaseModel)

Listener = Callable[["SessionStore"], None]

ADMIN_TOKEN_KEY = "token"
ADMIN_IDENTITY_KEY = "user"
SUPER_ADMIN_TOKEN_KEY = "super_admin_token"
SUPER_ADMIN_IDENTITY_KEY = "super_admin"


class SessionStore(Generic[IdentityT]):
    """Current identity and bearer token for one auth scope.

    State is ``identity``, ``token``, ``is_authenticated`` and ``initialized``.
    ``initialized`` flips to True after the first ``check_auth``, ``login`` or
    ``logout`` and never goes back. Listeners are called after every change.
    """

    def __init__(
        self,
        storage: Storage,
        identity_model: type[IdentityT],
        *,
        token_key: str,
        identity_key: str,
    ) -> None:
        self._storage = storage
        self._identity_model = identity_model
        self._token_key = token_key
        self._identity_key = identity_key
        self._listeners: list[Listener] = []

        self.identity: IdentityT | None = None
        self.token: str | None = None
        self.is_authenticated = False
        self.initialized = False

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener. Returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def login(self, identity: IdentityT, token: str) -> None:
        """Persist identity and token, then mark the session authenticated."""
        self._storage.set_item(self._token_key, token)
        self._storage.set_item(self._identity_key, identity.model_dump_json())
        self._set(identity, token)
        logger.info("Signed in (%s)", self._token_key)

    def logout(self) -> None:
        """Forget the session in storage and in memory."""
        self._storage.remove_item(self._token_key)
        self._storage.remove_item(self._identity_key)
        self._set(None, None)
        logger.info("Signed out (%s)", self._token_key)

    def check_auth(self) -> None:
        """Rehydrate from storage. Safe to call when nothing was persisted."""
        token = self._storage.get_item(self._token_key)
        if token:
            self._set(self._load_identity(), token)
        else:
            self._set(None, None)

    def _load_identity(self) -> IdentityT | None:
        raw = self._storage.get_item(self._identity_key)
        if not raw:
            return None
        try:
            return self._identity_model.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning("Stored identity under '%s' is unreadable: %s", self._identity_key, e)
            return None

    def _set(self, identity: IdentityT | None, token: str | None) -> None:
        self.identity = identity
        self.token = token
        self.is_authenticated = token is not None
        self.initialized = True
        for listener in list(self._listeners):
            listener(self)


def admin_store(storage: Storage) -> SessionStore[Admin]:
    """Store for a company admin session."""
    return SessionStore(
        storage, Admin, token_key=ADMIN_TOKEN_KEY, identity_key=ADMIN_IDENTITY_KEY,
    )


def super_admin_store(storage: Storage) -> SessionStore[SuperAdmin]:
    """Store for a platform super-admin session."""
    return SessionStore(
        storage,
        SuperAdmin,
        token_key=SUPER_ADMIN_TOKEN_KEY,
        identity_key=SUPER_ADMIN_IDENTITY_KEY,
    )


class SessionContext:
    """Both auth scopes for one client, sharing one storage."""

    def __init__(self, storage: Storage) -> None:
        self.storage = storage
        self.admin = admin_store(storage)
        self.super_admin = super_admin_store(storage)

    def check_auth(self) -> None:
        self.admin.check_auth()
        self.super_admin.check_auth()

    def bearer_token(self) -> str | None:
        """Token to send, read from storage at request time.

        The super-admin token wins when both are present.
        """
        return (
            self.storage.get_item(SUPER_ADMIN_TOKEN_KEY)
            or self.storage.get_item(ADMIN_TOKEN_KEY)
            or None
        )
