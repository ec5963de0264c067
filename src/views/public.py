"""Candidate-facing screens: job board, application form, status lookup.

All of these run on the public API client and never send credentials.
"""

import logging
from collections.abc import Awaitable, Callable

from pydantic import BaseModel

from src.api.errors import ApiError, FormValidationError
from src.api.resources import ApplicationAPI, CandidatePortalAPI, JobAPI, UploadAPI
from src.api.uploads import UploadFile
from src.core.schemas import ApplicationStatusView, ApplicationSubmission, Job
from src.dashboard.navigation import APPLICATION_STATUS, build_route, query_param
from src.dashboard.toasts import ToastBus

logger = logging.getLogger(__name__)

MISSING_CV = "Please provide a CV/resume (either URL or file upload)"
MISSING_LOOKUP = "Please enter both email and application ID"


class JobBoard:
    """Open positions of one company."""

    def __init__(self, jobs: JobAPI, company_id: str) -> None:
        self._jobs = jobs
        self.company_id = company_id
        self.items: list[Job] = []
        self.loading = True

    @property
    def empty(self) -> bool:
        return not self.loading and not self.items

    async def load(self) -> list[Job]:
        try:
            jobs = await self._jobs.public(self.company_id)
            self.items = [job for job in jobs if job.is_open]
        except ApiError as e:
            logger.error("Failed to fetch jobs for %s: %s", self.company_id, e)
        finally:
            self.loading = False
        return self.items


class SubmissionReceipt(BaseModel):
    application_id: str
    message: str
    status_route: str


class ApplicationForm:
    """Apply to one job, with optional CV and portfolio uploads.

    Upload checks raise UploadValidationError before anything is sent; a
    submission without a CV raises FormValidationError.
    """

    def __init__(
        self,
        job_id: str,
        applications: ApplicationAPI,
        uploads: UploadAPI,
        toasts: ToastBus,
    ) -> None:
        self.job_id = job_id
        self._applications = applications
        self._uploads = uploads
        self._toasts = toasts
        self.resume_url = ""
        self.portfolio_url = ""
        self.uploading = False

    async def upload_cv(self, upload: UploadFile) -> str | None:
        url = await self._upload(self._uploads.upload_cv, upload, "CV")
        if url:
            self.resume_url = url
        return url

    async def upload_portfolio(self, upload: UploadFile) -> str | None:
        url = await self._upload(self._uploads.upload_portfolio, upload, "portfolio")
        if url:
            self.portfolio_url = url
        return url

    async def submit(self, submission: ApplicationSubmission) -> SubmissionReceipt | None:
        """Send the application. Uploaded file URLs fill in blank URL fields."""
        updates = {"job_id": self.job_id}
        if not submission.resume_url and self.resume_url:
            updates["resume_url"] = self.resume_url
        if not submission.portfolio_url and self.portfolio_url:
            updates["portfolio_url"] = self.portfolio_url
        submission = submission.model_copy(update=updates)
        if not submission.resume_url.strip():
            raise FormValidationError(MISSING_CV)

        try:
            application = await self._applications.submit(submission)
        except ApiError as e:
            # Submission errors come back under "message", not "error".
            message = e.payload.get("message")
            if not isinstance(message, str) or not message:
                message = "Failed to submit application. Please try again."
            self._toasts.error(message)
            return None

        message = (
            f"Application submitted successfully! Your Application ID: {application.id}"
        )
        self._toasts.success(message)
        logger.info("Application %s submitted for job %s", application.id, self.job_id)
        return SubmissionReceipt(
            application_id=application.id,
            message=message,
            status_route=build_route(
                APPLICATION_STATUS, email=submission.email, applicationId=application.id,
            ),
        )

    async def _upload(
        self,
        send: Callable[[UploadFile], Awaitable[str]],
        upload: UploadFile,
        label: str,
    ) -> str | None:
        self.uploading = True
        try:
            url = await send(upload)
        except ApiError as e:
            self._toasts.error(e.user_message(f"Failed to upload {label}"))
            return None
        finally:
            self.uploading = False
        self._toasts.success(f"{label[0].upper()}{label[1:]} uploaded successfully!")
        return url


class ApplicationStatusLookup:
    """A candidate checks their application by email and id."""

    def __init__(self, portal: CandidatePortalAPI, toasts: ToastBus) -> None:
        self._portal = portal
        self._toasts = toasts
        self.application: ApplicationStatusView | None = None
        self.applications: list[ApplicationStatusView] = []
        self.loading = False

    async def open(self, route: str) -> ApplicationStatusView | None:
        """Check right away when the link carries both email and id."""
        email = query_param(route, "email")
        application_id = query_param(route, "applicationId")
        if email and application_id:
            return await self.check(email, application_id)
        return None

    async def check(self, email: str, application_id: str) -> ApplicationStatusView | None:
        if not email.strip() or not application_id.strip():
            raise FormValidationError(MISSING_LOOKUP)
        self.loading = True
        try:
            self.application = await self._portal.check_status(email.strip(), application_id.strip())
        except ApiError as e:
            self._toasts.error(e.user_message(
                "Failed to load application status. "
                "Please check your email and application ID.",
            ))
            self.application = None
        finally:
            self.loading = False
        return self.application

    async def by_email(self, email: str) -> list[ApplicationStatusView]:
        """Every application sent from one address."""
        if not email.strip():
            msg = "Please enter your email"
            raise FormValidationError(msg)
        try:
            self.applications = await self._portal.applications_by_email(email.strip())
        except ApiError as e:
            self._toasts.error(e.user_message("Failed to load applications"))
            self.applications = []
        return self.applications
