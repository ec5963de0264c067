"""Typed wrappers over the backend endpoints, one class per area.

Each wrapper takes an ApiClient of the right scope: admin/super-admin areas
take the authenticated client, the candidate portal and uploads take the
public one.
"""

import logging
from typing import Any

from pydantic import BaseModel, Field

from src.api.client import ApiClient
from src.api.uploads import UploadFile, UploadKind, validate_upload
from src.core.schemas import (
    ActivityLog,
    ActivityLogFilters,
    Application,
    ApplicationFilters,
    ApplicationStatus,
    ApplicationStatusView,
    ApplicationSubmission,
    AuthResponse,
    CandidateDetails,
    CandidateNote,
    CandidateSearchPage,
    CandidateSearchRequest,
    CompanyWithStats,
    CVAnalysisResult,
    Job,
    JobDraft,
    JobFilters,
    JobStatus,
    ManualCandidate,
    ReferralInfo,
    RegisterRequest,
    ShortlistCriteria,
    SuperAdminAuthResponse,
    SuperAdminStats,
    TimelineItem,
    sort_timeline,
)

logger = logging.getLogger(__name__)


class BulkDeleteResult(BaseModel):
    message: str = ""
    deleted_count: int = 0
    total_found: int = 0


class AnalysisOutcome(BaseModel):
    """Result of analyzing one application."""

    message: str = ""
    application: Application
    analysis: CVAnalysisResult
    auto_shortlisted: bool = False


class BatchAnalysisEntry(BaseModel):
    application_id: str
    candidate_name: str = ""
    match_score: float = 0.0
    shortlisted: bool = False
    analysis: CVAnalysisResult | None = None


class BatchAnalysisResult(BaseModel):
    message: str = ""
    total_analyzed: int = 0
    shortlisted_count: int = 0
    results: list[BatchAnalysisEntry] = Field(default_factory=list)


def _items(data: dict[str, Any], key: str) -> list[Any]:
    """List under key; the backend sends null for empty lists."""
    value = data.get(key)
    return value if isinstance(value, list) else []


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class AuthAPI:
    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def register(self, request: RegisterRequest) -> AuthResponse:
        data = await self._client.post(
            "/auth/register", request.model_dump(exclude_none=True),
        )
        return AuthResponse.model_validate(data)

    async def login(self, email: str, password: str) -> AuthResponse:
        data = await self._client.post("/auth/login", {"email": email, "password": password})
        return AuthResponse.model_validate(data)


class SuperAdminAPI:
    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def login(self, email: str, password: str) -> SuperAdminAuthResponse:
        data = await self._client.post(
            "/super-admin/login", {"email": email, "password": password},
        )
        return SuperAdminAuthResponse.model_validate(data)

    async def stats(self) -> SuperAdminStats:
        data = await self._client.get("/super-admin/stats")
        return SuperAdminStats.model_validate(data.get("stats") or {})

    async def companies(self) -> list[CompanyWithStats]:
        data = await self._client.get("/super-admin/companies")
        return [CompanyWithStats.model_validate(c) for c in _items(data, "companies")]

    async def activity_logs(self, filters: ActivityLogFilters | None = None) -> list[ActivityLog]:
        params = filters.to_params() if filters else None
        data = await self._client.get("/super-admin/activity-logs", params=params)
        return [ActivityLog.model_validate(log) for log in _items(data, "logs")]


# ---------------------------------------------------------------------------
# Jobs and applications
# ---------------------------------------------------------------------------


class JobAPI:
    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def create(self, draft: JobDraft) -> Job:
        data = await self._client.post("/jobs", draft.to_payload())
        return Job.model_validate(data["job"])

    async def get_all(self, filters: JobFilters | None = None) -> list[Job]:
        params = filters.to_params() if filters else None
        data = await self._client.get("/jobs", params=params)
        return [Job.model_validate(j) for j in _items(data, "jobs")]

    async def get(self, job_id: str) -> Job:
        data = await self._client.get(f"/jobs/{job_id}")
        return Job.model_validate(data["job"])

    async def public(self, company_id: str) -> list[Job]:
        """Open jobs of a company whose deadline has not passed."""
        data = await self._client.get(f"/jobs/public/{company_id}")
        return [Job.model_validate(j) for j in _items(data, "jobs")]

    async def update(self, job_id: str, draft: JobDraft) -> Job:
        data = await self._client.put(f"/jobs/{job_id}", draft.to_payload())
        return Job.model_validate(data["job"])

    async def set_status(self, job: Job, status: JobStatus) -> dict[str, Any]:
        """Change only the status of a job.

        The update endpoint always overwrites auto_shortlist and
        shortlist_criteria, so the current values are sent back with it.
        """
        criteria = job.shortlist_criteria.to_json() if job.shortlist_criteria else ""
        return await self._client.put(f"/jobs/{job.id}", {
            "status": status.value,
            "auto_shortlist": job.auto_shortlist,
            "shortlist_criteria": criteria,
        })

    async def delete(self, job_id: str) -> dict[str, Any]:
        return await self._client.delete(f"/jobs/{job_id}")


class ApplicationAPI:
    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def submit(self, submission: ApplicationSubmission) -> Application:
        data = await self._client.post("/applications", submission.model_dump())
        return Application.model_validate(data["application"])

    async def add_manual(self, candidate: ManualCandidate) -> Application:
        """Add a candidate on behalf of the company. The server analyzes the CV."""
        data = await self._client.post("/candidates/manual", candidate.model_dump(mode="json"))
        return Application.model_validate(data["application"])

    async def get_all(self, filters: ApplicationFilters | None = None) -> list[Application]:
        params = filters.to_params() if filters else None
        data = await self._client.get("/applications", params=params)
        return [Application.model_validate(a) for a in _items(data, "applications")]

    async def shortlist(self, application_id: str) -> dict[str, Any]:
        return await self._client.put(f"/applications/{application_id}/shortlist")

    async def reject(self, application_id: str) -> dict[str, Any]:
        return await self._client.put(f"/applications/{application_id}/reject")

    async def delete(self, application_id: str) -> dict[str, Any]:
        return await self._client.delete(f"/applications/{application_id}")

    async def bulk_delete(self, status: ApplicationStatus) -> BulkDeleteResult:
        data = await self._client.post("/applications/bulk-delete", {"status": status.value})
        return BulkDeleteResult.model_validate(data)

    async def track_cv_view(self, application_id: str) -> dict[str, Any]:
        return await self._client.post(f"/applications/{application_id}/track-cv-view")


class AIShortlistAPI:
    """Server-side CV analysis. The client only sends criteria."""

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def analyze(
        self,
        application_id: str,
        criteria: ShortlistCriteria | None = None,
    ) -> AnalysisOutcome:
        criteria = criteria or ShortlistCriteria()
        payload = {"application_id": application_id, **criteria.model_dump()}
        data = await self._client.post("/applications/ai-shortlist", payload)
        return AnalysisOutcome.model_validate(data)

    async def analyze_batch(
        self,
        job_id: str,
        criteria: ShortlistCriteria | None = None,
        threshold: float | None = None,
    ) -> BatchAnalysisResult:
        criteria = criteria or ShortlistCriteria()
        payload: dict[str, Any] = {"job_id": job_id, **criteria.model_dump()}
        if threshold is not None:
            payload["threshold"] = threshold
        data = await self._client.post("/applications/ai-shortlist-batch", payload)
        return BatchAnalysisResult.model_validate(data)


class CandidateSearchAPI:
    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def search(self, request: CandidateSearchRequest) -> CandidateSearchPage:
        data = await self._client.post("/candidates/search", request.to_payload())
        return CandidateSearchPage.model_validate(
            {**data, "candidates": _items(data, "candidates")},
        )

    async def details(self, candidate_id: str) -> CandidateDetails:
        data = await self._client.get(f"/candidates/{candidate_id}")
        return CandidateDetails.model_validate(data)


class ActivityLogAPI:
    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def get_all(self, filters: ActivityLogFilters | None = None) -> list[ActivityLog]:
        params = filters.to_params() if filters else None
        data = await self._client.get("/activity-logs", params=params)
        return [ActivityLog.model_validate(log) for log in _items(data, "logs")]


# ---------------------------------------------------------------------------
# CRM: notes, talent pool, referrals, timeline
# ---------------------------------------------------------------------------


class CRMAPI:
    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def add_note(
        self, application_id: str, note: str, *, is_private: bool = False,
    ) -> CandidateNote:
        data = await self._client.post(
            "/crm/notes",
            {"application_id": application_id, "note": note, "is_private": is_private},
        )
        return CandidateNote.model_validate(data["note"])

    async def notes(self, application_id: str) -> list[CandidateNote]:
        data = await self._client.get(f"/crm/applications/{application_id}/notes")
        return [CandidateNote.model_validate(n) for n in _items(data, "notes")]

    async def update_note(
        self, note_id: str, note: str, *, is_private: bool = False,
    ) -> CandidateNote:
        data = await self._client.put(
            f"/crm/notes/{note_id}", {"note": note, "is_private": is_private},
        )
        return CandidateNote.model_validate(data["note"])

    async def delete_note(self, note_id: str) -> dict[str, Any]:
        return await self._client.delete(f"/crm/notes/{note_id}")

    async def talent_pool(self) -> list[Application]:
        data = await self._client.get("/crm/talent-pool")
        return [Application.model_validate(a) for a in _items(data, "applications")]

    async def add_to_talent_pool(self, application_id: str) -> dict[str, Any]:
        return await self._client.post("/crm/talent-pool", {"application_id": application_id})

    async def remove_from_talent_pool(self, application_id: str) -> dict[str, Any]:
        return await self._client.delete(f"/crm/talent-pool/{application_id}")

    async def update_referral(self, application_id: str, referral: ReferralInfo) -> dict[str, Any]:
        return await self._client.put(
            f"/crm/applications/{application_id}/referral", referral.model_dump(),
        )

    async def timeline(self, application_id: str) -> list[TimelineItem]:
        """Relationship timeline, newest first."""
        data = await self._client.get(f"/crm/applications/{application_id}/timeline")
        items = [TimelineItem.model_validate(t) for t in _items(data, "timeline")]
        return sort_timeline(items)


# ---------------------------------------------------------------------------
# Public: candidate portal and uploads
# ---------------------------------------------------------------------------


class CandidatePortalAPI:
    """Candidate self-service. Must be given a public client."""

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def check_status(self, email: str, application_id: str) -> ApplicationStatusView:
        data = await self._client.post(
            "/candidate/status", {"email": email, "application_id": application_id},
        )
        return ApplicationStatusView.model_validate(data["application"])

    async def applications_by_email(self, email: str) -> list[ApplicationStatusView]:
        data = await self._client.get("/candidate/applications", params={"email": email})
        return [ApplicationStatusView.model_validate(a) for a in _items(data, "applications")]


class UploadAPI:
    """Multipart uploads. Files are validated before anything is sent."""

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def upload(self, upload: UploadFile, kind: UploadKind) -> str:
        """Upload a file and return its public URL."""
        validate_upload(upload, kind)
        logger.info("Uploading %s '%s' (%d bytes)", kind.value, upload.filename, upload.size)
        data = await self._client.post(
            f"/upload/{kind.value}",
            files={"file": (upload.filename, upload.content, upload.content_type)},
        )
        return str(data.get("file_url", ""))

    async def upload_cv(self, upload: UploadFile) -> str:
        return await self.upload(upload, UploadKind.CV)

    async def upload_portfolio(self, upload: UploadFile) -> str:
        return await self.upload(upload, UploadKind.PORTFOLIO)
