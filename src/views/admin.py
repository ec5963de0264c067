"""Tenant admin dashboard screens.

Lists are FilteredList instances; every mutation goes through the shared
MutationRunner and ends with a refetch of the affected list.
"""

import asyncio
import logging
from typing import Any

from src.api.errors import ApiError, FormValidationError, UploadValidationError
from src.api.resources import (
    AIShortlistAPI,
    ActivityLogAPI,
    AnalysisOutcome,
    ApplicationAPI,
    BulkDeleteResult,
    CandidateSearchAPI,
    JobAPI,
    UploadAPI,
)
from src.api.uploads import UploadFile
from src.core.schemas import (
    ActivityLog,
    ActivityLogFilters,
    Application,
    ApplicationFilters,
    ApplicationStatus,
    CandidateDetails,
    CandidateSearchPage,
    CandidateSearchRequest,
    CandidateSearchResult,
    DashboardStats,
    Job,
    JobDraft,
    JobFilters,
    JobStatus,
    ManualCandidate,
)
from src.dashboard.listing import FilteredList
from src.dashboard.mutations import MutationRunner
from src.dashboard.navigation import ADMIN_DASHBOARD, Router
from src.dashboard.toasts import ToastBus
from src.views.public import MISSING_CV

logger = logging.getLogger(__name__)

JOBS_ROUTE = f"{ADMIN_DASHBOARD}/jobs"
APPLICATIONS_ROUTE = f"{ADMIN_DASHBOARD}/applications"

MISSING_JOB = "Please select a job"

ACTION_ICONS = {
    "company_registered": "🏢",
    "job_created": "➕",
    "job_updated": "✏️",
    "job_deleted": "🗑️",
    "job_status_changed": "🔄",
    "application_shortlisted": "✅",
    "application_rejected": "❌",
    "application_status_changed": "🔄",
}


def score_band(score: float) -> str:
    """Display band for an application's match score."""
    if score >= 80:
        return "high"
    if score >= 60:
        return "medium"
    return "low"


def match_band(score: float) -> str:
    """Display band for a candidate-search match score."""
    if score >= 70:
        return "high"
    if score >= 40:
        return "medium"
    return "low"


def action_icon(action_type: str) -> str:
    return ACTION_ICONS.get(action_type, "📝")


# ---------------------------------------------------------------------------
# Overview
# ---------------------------------------------------------------------------


class DashboardOverview:
    def __init__(self, jobs: JobAPI, applications: ApplicationAPI) -> None:
        self._jobs = jobs
        self._applications = applications
        self.stats = DashboardStats()
        self.loading = True

    async def load(self) -> DashboardStats:
        try:
            jobs, applications = await asyncio.gather(
                self._jobs.get_all(), self._applications.get_all(),
            )
            self.stats = DashboardStats.compute(jobs, applications)
        except ApiError as e:
            logger.error("Failed to fetch dashboard data: %s", e)
        finally:
            self.loading = False
        return self.stats


# ---------------------------------------------------------------------------
# Jobs
# ---------------------------------------------------------------------------


class JobsView:
    """Job list with a status filter, open/close toggle and delete."""

    def __init__(self, jobs: JobAPI, runner: MutationRunner, *, debounce_s: float = 0.3) -> None:
        self._jobs = jobs
        self._runner = runner
        self.list: FilteredList[Job, JobFilters] = FilteredList(
            self._fetch, JobFilters(), debounce_s=debounce_s, name="jobs",
        )

    async def _fetch(self, filters: JobFilters | None) -> list[Job]:
        return await self._jobs.get_all(filters)

    async def toggle_status(self, job: Job) -> bool:
        """Close an open job, or reopen any other."""
        new_status = JobStatus.CLOSED if job.is_open else JobStatus.OPEN
        if new_status == JobStatus.OPEN:
            action, done = "reopen", "reopened"
        else:
            action, done = "close", "closed"
        return await self._runner.run(
            lambda: self._jobs.set_status(job, new_status),
            confirm=f"Are you sure you want to {action} this job?",
            success=f"Job {done} successfully",
            failure=f"Failed to {action} job",
            refresh=self.list.refresh,
        )

    async def delete(self, job_id: str) -> bool:
        return await self._runner.run(
            lambda: self._jobs.delete(job_id),
            confirm="Are you sure you want to delete this job?",
            success="Job deleted successfully",
            failure="Failed to delete job",
            refresh=self.list.refresh,
        )


class JobEditor:
    """Create a job, or load and update an existing one."""

    def __init__(self, jobs: JobAPI, toasts: ToastBus, router: Router) -> None:
        self._jobs = jobs
        self._toasts = toasts
        self._router = router
        self.job_id: str | None = None
        self.draft: JobDraft | None = None

    async def load(self, job_id: str) -> JobDraft | None:
        """Prefill the form from the server. On failure, go back to the list."""
        try:
            job = await self._jobs.get(job_id)
        except ApiError as e:
            self._toasts.error(e.user_message("Failed to load job"))
            self._router.push(JOBS_ROUTE)
            return None
        self.job_id = job.id
        self.draft = JobDraft.from_job(job)
        return self.draft

    async def save(self, draft: JobDraft) -> Job | None:
        creating = self.job_id is None
        try:
            if creating:
                job = await self._jobs.create(draft)
            else:
                job = await self._jobs.update(self.job_id, draft)
        except ApiError as e:
            fallback = "Failed to create job" if creating else "Failed to update job"
            self._toasts.error(e.user_message(fallback))
            return None
        self._toasts.success("Job posted successfully!" if creating else "Job updated successfully!")
        self._router.push(JOBS_ROUTE)
        return job


# ---------------------------------------------------------------------------
# Applications
# ---------------------------------------------------------------------------


class ApplicationsView:
    """Applications with job/status/date filters, review actions and AI analysis."""

    def __init__(
        self,
        applications: ApplicationAPI,
        jobs: JobAPI,
        ai: AIShortlistAPI,
        runner: MutationRunner,
        toasts: ToastBus,
        *,
        debounce_s: float = 0.3,
    ) -> None:
        self._applications = applications
        self._jobs = jobs
        self._ai = ai
        self._runner = runner
        self._toasts = toasts
        self.jobs: list[Job] = []
        self.analyzing: set[str] = set()
        self._fetches = 0
        self.list: FilteredList[Application, ApplicationFilters] = FilteredList(
            self._fetch, ApplicationFilters(), debounce_s=debounce_s, name="applications",
        )

    async def _fetch(self, filters: ApplicationFilters | None) -> list[Application]:
        # The job list feeds the job filter dropdown.
        # Only the newest fetch may replace it.
        self._fetches += 1
        seq = self._fetches
        applications, jobs = await asyncio.gather(
            self._applications.get_all(filters), self._jobs.get_all(),
        )
        if seq == self._fetches:
            self.jobs = jobs
        return applications

    async def shortlist(self, application_id: str) -> bool:
        return await self._runner.run(
            lambda: self._applications.shortlist(application_id),
            confirm="Shortlist this candidate?",
            success="Candidate shortlisted! Email sent.",
            failure="Failed to shortlist candidate",
            refresh=self.list.refresh,
        )

    async def reject(self, application_id: str) -> bool:
        return await self._runner.run(
            lambda: self._applications.reject(application_id),
            confirm="Reject this candidate?",
            success="Candidate rejected. Email sent.",
            failure="Failed to reject candidate",
            refresh=self.list.refresh,
        )

    async def delete(self, application: Application) -> bool:
        return await self._runner.run(
            lambda: self._applications.delete(application.id),
            confirm=(
                f"Are you sure you want to delete the application from {application.full_name}? "
                "This action cannot be undone."
            ),
            success="Application deleted successfully",
            failure="Failed to delete application",
            refresh=self.list.refresh,
        )

    async def bulk_delete(self, status: ApplicationStatus) -> bool:
        label = status.value

        def success(result: BulkDeleteResult) -> str:
            return result.message or f"Deleted {result.deleted_count} {label} application(s)"

        return await self._runner.run(
            lambda: self._applications.bulk_delete(status),
            confirm=(
                f"Are you sure you want to delete ALL {label} applications? "
                "This action cannot be undone."
            ),
            success=success,
            failure="Failed to delete applications",
            refresh=self.list.refresh,
        )

    async def analyze(self, application: Application) -> bool:
        """Ask the server to score one CV against its job."""
        if not any(job.id == application.job_id for job in self.jobs):
            self._toasts.error("Job not found for this application")
            return False

        def success(outcome: AnalysisOutcome) -> str:
            return f"CV analyzed successfully! Match Score: {outcome.analysis.match_score:g}%"

        self.analyzing.add(application.id)
        try:
            return await self._runner.run(
                lambda: self._ai.analyze(application.id),
                success=success,
                failure="Failed to analyze CV. Please try again.",
                refresh=self.list.refresh,
            )
        finally:
            self.analyzing.discard(application.id)

    async def view_cv(self, application: Application) -> str:
        """Record the CV view and return the resume URL to open."""
        try:
            await self._applications.track_cv_view(application.id)
        except ApiError as e:
            logger.warning("Failed to track CV view for %s: %s", application.id, e)
        return application.resume_url


class ManualCandidateForm:
    """Add a candidate by hand: pick a job, give a CV link or upload one.

    Rejected or failed uploads end in an error toast. Submitting without a
    job or a CV raises FormValidationError and sends nothing.
    """

    def __init__(
        self,
        applications: ApplicationAPI,
        jobs: JobAPI,
        uploads: UploadAPI,
        toasts: ToastBus,
        router: Router,
    ) -> None:
        self._applications = applications
        self._jobs = jobs
        self._uploads = uploads
        self._toasts = toasts
        self._router = router
        self.jobs: list[Job] = []
        self.resume_url = ""
        self.uploading = False

    async def load_jobs(self) -> list[Job]:
        try:
            self.jobs = await self._jobs.get_all()
        except ApiError as e:
            logger.error("Failed to fetch jobs: %s", e)
            self._toasts.error("Failed to load jobs")
        return self.jobs

    async def upload_cv(self, upload: UploadFile) -> str | None:
        self.uploading = True
        try:
            url = await self._uploads.upload_cv(upload)
        except UploadValidationError as e:
            self._toasts.error(str(e))
            return None
        except ApiError as e:
            self._toasts.error(e.user_message("Failed to upload CV"))
            return None
        finally:
            self.uploading = False
        self.resume_url = url
        return url

    async def submit(self, candidate: ManualCandidate) -> Application | None:
        if not candidate.job_id:
            raise FormValidationError(MISSING_JOB)
        if not candidate.resume_url and self.resume_url:
            candidate = candidate.model_copy(update={"resume_url": self.resume_url})
        if not candidate.resume_url.strip():
            raise FormValidationError(MISSING_CV)

        try:
            application = await self._applications.add_manual(candidate)
        except ApiError as e:
            self._toasts.error(e.user_message("Failed to add candidate. Please try again."))
            return None

        logger.info("Added candidate %s to job %s", application.id, candidate.job_id)
        self._toasts.success("Candidate added successfully! CV will be analyzed automatically.")
        self._router.push(APPLICATIONS_ROUTE)
        return application


# ---------------------------------------------------------------------------
# Candidate search
# ---------------------------------------------------------------------------


class CandidateSearchView:
    """Search form over the candidate pool.

    The list holds at most one page so results and total always come from
    the same response. Editing criteria refetches after the quiet period;
    ``search`` submits right away.
    """

    def __init__(
        self, search: CandidateSearchAPI, toasts: ToastBus, *, debounce_s: float = 0.3,
    ) -> None:
        self._search = search
        self._toasts = toasts
        self.selected: CandidateDetails | None = None
        self.list: FilteredList[CandidateSearchPage, CandidateSearchRequest] = FilteredList(
            self._fetch,
            CandidateSearchRequest(),
            debounce_s=debounce_s,
            on_error=self._on_error,
            name="candidates",
        )

    @property
    def results(self) -> list[CandidateSearchResult]:
        return self.list.items[0].candidates if self.list.items else []

    @property
    def total(self) -> int:
        return self.list.items[0].total if self.list.items else 0

    @property
    def searched(self) -> bool:
        return bool(self.list.items)

    async def search(self, request: CandidateSearchRequest) -> list[CandidateSearchResult]:
        self.list.filters = request
        await self.list.refresh()
        return self.results

    def set_criteria(self, **changes: Any) -> None:
        self.list.set_filters(**changes)

    async def details(self, candidate_id: str) -> CandidateDetails | None:
        try:
            self.selected = await self._search.details(candidate_id)
        except ApiError as e:
            logger.error("Failed to load candidate %s: %s", candidate_id, e)
            self._toasts.error("Failed to load candidate details.")
            return None
        return self.selected

    async def _fetch(self, request: CandidateSearchRequest | None) -> list[CandidateSearchPage]:
        page = await self._search.search(request or CandidateSearchRequest())
        return [page]

    def _on_error(self, error: ApiError) -> None:
        self._toasts.error("Failed to search candidates. Please try again.")


# ---------------------------------------------------------------------------
# Activity log
# ---------------------------------------------------------------------------


class ActivityLogView:
    def __init__(self, logs: ActivityLogAPI, *, debounce_s: float = 0.3) -> None:
        self._logs = logs
        self.list: FilteredList[ActivityLog, ActivityLogFilters] = FilteredList(
            self._fetch, ActivityLogFilters(), debounce_s=debounce_s, name="activity logs",
        )

    async def _fetch(self, filters: ActivityLogFilters | None) -> list[ActivityLog]:
        return await self._logs.get_all(filters)
