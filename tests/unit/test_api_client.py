"""Tests for the async REST client."""

import httpx
import pytest

from src.api.client import ApiClient
from src.api.errors import ApiError
from src.core.schemas import Admin
from src.session.store import SessionContext
from tests.fakes import BASE_URL, FakeBackend

ADMIN = Admin(id="admin-1", name="Ana", email="ana@acme.test", company_id="company-1")


class TestAuthorizationHeader:
    async def test_no_token_no_header(self, api: ApiClient, backend: FakeBackend) -> None:
        backend.on("GET", "/jobs", {"jobs": []})
        await api.get("/jobs")
        assert "authorization" not in backend.requests[0].headers

    async def test_token_read_per_request(
        self, api: ApiClient, backend: FakeBackend, session: SessionContext,
    ) -> None:
        backend.on("GET", "/jobs", {"jobs": []})
        await api.get("/jobs")
        session.admin.login(ADMIN, "tok-1")
        await api.get("/jobs")
        session.admin.logout()
        await api.get("/jobs")

        headers = [r.headers.get("authorization") for r in backend.requests]
        assert headers == [None, "Bearer tok-1", None]

    async def test_public_client_never_authenticates(
        self, public_api: ApiClient, backend: FakeBackend, session: SessionContext,
    ) -> None:
        session.admin.login(ADMIN, "tok-1")
        backend.on("GET", "/jobs/public/company-1", {"jobs": []})
        await public_api.get("/jobs/public/company-1")
        assert public_api.is_public
        assert "authorization" not in backend.requests[0].headers


class TestRequests:
    async def test_none_params_dropped(self, api: ApiClient, backend: FakeBackend) -> None:
        backend.on("GET", "/applications", {"applications": []})
        await api.get("/applications", params={"status": "pending", "job_id": None})
        assert dict(backend.requests[0].url.params) == {"status": "pending"}

    async def test_json_body(self, api: ApiClient, backend: FakeBackend) -> None:
        backend.on("POST", "/auth/login", {"token": "t"})
        data = await api.post("/auth/login", {"email": "a@b.test", "password": "pw"})
        assert data == {"token": "t"}
        assert backend.bodies("POST", "/auth/login") == [{"email": "a@b.test", "password": "pw"}]

    async def test_base_url_prefix(self, api: ApiClient, backend: FakeBackend) -> None:
        backend.on("DELETE", "/jobs/j1", {"message": "ok"})
        await api.delete("/jobs/j1")
        assert str(backend.requests[0].url) == f"{BASE_URL}/jobs/j1"


class TestErrors:
    async def test_server_error_message(self, api: ApiClient, backend: FakeBackend) -> None:
        backend.on("PUT", "/jobs/j1", {"error": "Job not found"}, status=404)
        with pytest.raises(ApiError) as exc_info:
            await api.put("/jobs/j1", {"status": "closed"})
        err = exc_info.value
        assert err.status_code == 404
        assert err.server_message == "Job not found"
        assert err.user_message("Failed to close job") == "Job not found"

    async def test_details_used_when_no_error(self, api: ApiClient, backend: FakeBackend) -> None:
        backend.on("POST", "/applications/ai-shortlist", {"details": "CV unreadable"}, status=500)
        with pytest.raises(ApiError) as exc_info:
            await api.post("/applications/ai-shortlist", {})
        assert exc_info.value.server_message is None
        assert exc_info.value.user_message("Failed") == "CV unreadable"

    async def test_fallback_message(self, api: ApiClient, backend: FakeBackend) -> None:
        backend.on("GET", "/jobs", {}, status=500)
        with pytest.raises(ApiError) as exc_info:
            await api.get("/jobs")
        assert exc_info.value.user_message("Failed to fetch jobs") == "Failed to fetch jobs"

    async def test_transport_failure(self, settings) -> None:
        def boom(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with ApiClient(settings.api.base_url, transport=httpx.MockTransport(boom)) as client:
            with pytest.raises(ApiError) as exc_info:
                await client.get("/jobs")
        assert exc_info.value.status_code is None
        assert "connection refused" in str(exc_info.value)


class TestDecode:
    async def test_empty_body(self, settings) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(204))
        async with ApiClient(settings.api.base_url, transport=transport) as client:
            assert await client.delete("/crm/notes/n1") == {}

    async def test_non_object_body(self, settings) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json=[1, 2]))
        async with ApiClient(settings.api.base_url, transport=transport) as client:
            assert await client.get("/jobs") == {}

    async def test_non_json_error_body(self, settings) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(502, text="Bad gateway"))
        async with ApiClient(settings.api.base_url, transport=transport) as client:
            with pytest.raises(ApiError) as exc_info:
                await client.get("/jobs")
        assert exc_info.value.status_code == 502
        assert exc_info.value.server_message is None
