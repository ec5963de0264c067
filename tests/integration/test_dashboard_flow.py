"""End-to-end dashboard flows against the fake backend.

Covers the list fetch protocol, guard gating, mutation refetch, the embed
tenant check and toast expiry through the real view-models and HTTP client.
"""

import asyncio
from collections.abc import Iterator

import httpx
import pytest

from src.api.client import ApiClient
from src.api.resources import AIShortlistAPI, ApplicationAPI, JobAPI
from src.core.config import ToastConfig
from src.core.schemas import Admin, ApplicationStatus
from src.dashboard.guard import admin_guard
from src.dashboard.mutations import MutationRunner
from src.dashboard.navigation import ADMIN_LOGIN, Router
from src.dashboard.toasts import ToastBus
from src.session.store import SessionContext
from src.views.admin import ApplicationsView
from src.views.embedded import EmbeddedDashboard, EmbedState
from tests.fakes import FakeBackend, admin_payload, application_payload, job_payload

DEBOUNCE = 0.05


class AtsState:
    """Applications held server-side; replies are computed from this state."""

    def __init__(self) -> None:
        self.applications = {
            "a1": application_payload("a1", full_name="Carla Candidate"),
            "a2": application_payload("a2", full_name="Dan Developer"),
            "a3": application_payload("a3", full_name="Eve Engineer", status="rejected"),
        }

    def list_applications(self, request: httpx.Request) -> dict:
        status = request.url.params.get("status")
        rows = [a for a in self.applications.values() if status is None or a["status"] == status]
        return {"applications": rows}

    def shortlist(self, request: httpx.Request) -> dict:
        application_id = request.url.path.split("/")[-2]
        self.applications[application_id]["status"] = "shortlisted"
        return {"message": "Application shortlisted"}


@pytest.fixture
def state(backend: FakeBackend) -> AtsState:
    ats = AtsState()
    backend.on("GET", "/applications", ats.list_applications)
    backend.on("GET", "/jobs", {"jobs": [job_payload("job-1")]})
    backend.on("PUT", "/applications/a1/shortlist", ats.shortlist)
    return ats


@pytest.fixture
def toasts() -> Iterator[ToastBus]:
    bus = ToastBus(ToastConfig())
    yield bus
    bus.close()


@pytest.fixture
def view(api: ApiClient, toasts: ToastBus) -> Iterator[ApplicationsView]:
    applications = ApplicationsView(
        ApplicationAPI(api),
        JobAPI(api),
        AIShortlistAPI(api),
        MutationRunner(toasts),
        toasts,
        debounce_s=DEBOUNCE,
    )
    yield applications
    applications.list.close()


def _statuses(backend: FakeBackend) -> list[str | None]:
    return [r.url.params.get("status") for r in backend.calls("GET", "/applications")]


# ---------------------------------------------------------------------------
# Filtered list
# ---------------------------------------------------------------------------


class TestApplicationsList:
    async def test_initial_load_ignores_preset_filters(
        self, view: ApplicationsView, backend: FakeBackend, state: AtsState,
    ) -> None:
        view.list.set_filters(status=ApplicationStatus.REJECTED)
        await view.list.load()
        assert _statuses(backend)[0] is None
        assert len(view.list.items) == 3

    async def test_rapid_filter_changes_send_one_request(
        self, view: ApplicationsView, backend: FakeBackend, state: AtsState,
    ) -> None:
        await view.list.load()
        view.list.set_filters(status=ApplicationStatus.PENDING)
        await asyncio.sleep(DEBOUNCE * 0.4)
        view.list.set_filters(status=ApplicationStatus.REJECTED)
        assert view.list.is_filtering
        assert view.list.loading is False

        await asyncio.sleep(DEBOUNCE * 2)
        await view.list.wait()
        assert _statuses(backend) == [None, "rejected"]
        assert [a.id for a in view.list.items] == ["a3"]
        assert not view.list.is_filtering

    async def test_slow_stale_response_is_discarded(
        self, view: ApplicationsView, backend: FakeBackend, state: AtsState,
    ) -> None:
        # Second request is slow, third is fast.
        backend.on("GET", "/applications", state.list_applications, delay=DEBOUNCE * 4)
        backend.on("GET", "/applications", state.list_applications)

        await view.list.load()
        view.list.set_filters(status=ApplicationStatus.PENDING)
        await asyncio.sleep(DEBOUNCE * 1.5)
        # The pending request is now in flight and slow.
        view.list.set_filters(status=ApplicationStatus.REJECTED)
        await asyncio.sleep(DEBOUNCE * 6)
        await view.list.wait()

        assert _statuses(backend) == [None, "pending", "rejected"]
        assert [a.id for a in view.list.items] == ["a3"]


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


class TestShortlistFlow:
    async def test_list_reflects_new_status_once(
        self, view: ApplicationsView, backend: FakeBackend, state: AtsState, toasts: ToastBus,
    ) -> None:
        await view.list.load()
        assert await view.shortlist("a1") is True

        ids = [a.id for a in view.list.items]
        assert sorted(ids) == ["a1", "a2", "a3"]
        a1 = next(a for a in view.list.items if a.id == "a1")
        assert a1.status == ApplicationStatus.SHORTLISTED
        assert [t.message for t in toasts.toasts] == ["Candidate shortlisted! Email sent."]
        assert len(backend.calls("PUT", "/applications/a1/shortlist")) == 1

    async def test_filtered_refetch_after_mutation(
        self, view: ApplicationsView, backend: FakeBackend, state: AtsState,
    ) -> None:
        await view.list.load()
        view.list.set_filters(status=ApplicationStatus.SHORTLISTED)
        await asyncio.sleep(DEBOUNCE * 2)
        await view.list.wait()
        assert view.list.items == []

        await view.shortlist("a1")
        assert [a.id for a in view.list.items] == ["a1"]


# ---------------------------------------------------------------------------
# Guard and embed
# ---------------------------------------------------------------------------


class TestGuardAndEmbed:
    async def test_guard_redirects_once_then_admits(
        self, session: SessionContext, router: Router,
    ) -> None:
        guard = admin_guard(session, router)
        assert guard.render(lambda: "dashboard") is None
        guard.mount()
        session.check_auth()
        assert router.history == ["/", ADMIN_LOGIN]

        session.admin.login(Admin.model_validate(admin_payload()), "tok")
        assert guard.render(lambda: "dashboard") == "dashboard"

    async def test_embed_for_other_tenant_fetches_nothing(
        self, session: SessionContext, router: Router, api: ApiClient, backend: FakeBackend,
    ) -> None:
        session.admin.login(Admin.model_validate(admin_payload("A")), "tok")
        embed = EmbeddedDashboard(
            "/embed/dashboard?company_id=B", session, router, JobAPI(api), ApplicationAPI(api),
        )
        assert await embed.open() == EmbedState.SECURITY_ERROR
        assert backend.requests == []
        embed.close()


# ---------------------------------------------------------------------------
# Toasts
# ---------------------------------------------------------------------------


class TestToastLifecycle:
    async def test_expiry_and_dismiss(self) -> None:
        bus = ToastBus(ToastConfig(success_s=0.1, error_s=0.3))
        seen: list[int] = []
        bus.subscribe(lambda toasts: seen.append(len(toasts)))
        bus.success("Saved")
        failed = bus.error("Failed")
        bus.success("Kept")
        assert len(bus.toasts) == 3

        bus.dismiss(failed)
        assert [t.message for t in bus.toasts] == ["Saved", "Kept"]
        await asyncio.sleep(0.2)
        assert bus.toasts == []
        assert seen[0] == 0
        bus.close()
