from collections.abc import AsyncIterator, Iterator

import pytest

from src.api.client import ApiClient
from src.core.config import ApiConfig, Settings, ToastConfig
from src.dashboard.navigation import Router
from src.dashboard.toasts import ToastBus
from src.session.storage import MemoryStorage
from src.session.store import SessionContext
from tests.fakes import BASE_URL, FakeBackend


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        api=ApiConfig(base_url=BASE_URL),
        toasts=ToastConfig(success_s=0.05, error_s=0.08, info_s=0.05, warning_s=0.05),
    )


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def session(storage: MemoryStorage) -> SessionContext:
    return SessionContext(storage)


@pytest.fixture
def router() -> Router:
    return Router()


@pytest.fixture
def toasts(settings: Settings) -> Iterator[ToastBus]:
    bus = ToastBus(settings.toasts)
    yield bus
    bus.close()


@pytest.fixture
async def api(
    settings: Settings, session: SessionContext, backend: FakeBackend,
) -> AsyncIterator[ApiClient]:
    client = ApiClient.authenticated(settings, session, transport=backend.transport)
    yield client
    await client.aclose()


@pytest.fixture
async def public_api(settings: Settings, backend: FakeBackend) -> AsyncIterator[ApiClient]:
    client = ApiClient.public(settings, transport=backend.transport)
    yield client
    await client.aclose()
