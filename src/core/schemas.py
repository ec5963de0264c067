"""Core data models exchanged with the ATS backend.

The backend owns every entity; these models only decode what it returns and
encode what the client sends. JSON blobs stored as text (analysis results,
shortlist criteria, activity metadata) are decoded once here, at the boundary.
"""

import json
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

# Deepest nesting of JSON-in-a-string seen from the backend is two levels.
_MAX_JSON_DEPTH = 3


def parse_json_blob(value: Any) -> dict[str, Any] | None:
    """Decode a JSON object that may arrive as a dict, JSON text, or
    double-encoded JSON text.

    Returns None for empty or malformed input instead of raising.
    """
    for _ in range(_MAX_JSON_DEPTH):
        if not isinstance(value, str):
            break
        if not value.strip():
            return None
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            logger.debug("Ignoring malformed JSON blob: %.60s", value)
            return None
    return value if isinstance(value, dict) else None


def split_csv(text: str) -> list[str]:
    """Split comma-separated form input, dropping blanks."""
    return [part.strip() for part in text.split(",") if part.strip()]


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse a backend ISO timestamp (nanosecond precision, ``Z`` suffix)."""
    if not value:
        return None
    text = value.strip().replace("Z", "+00:00")
    if "." in text:
        head, _, rest = text.partition(".")
        digits = ""
        while rest and rest[0].isdigit():
            digits, rest = digits + rest[0], rest[1:]
        text = f"{head}.{digits[:6].ljust(6, '0')}{rest}"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# ---------------------------------------------------------------------------
# Tenants and identities
# ---------------------------------------------------------------------------


class Company(BaseModel):
    """A tenant."""

    id: str
    company_name: str
    email: str = ""
    company_website: str = ""
    embedded_mode: bool = False
    embed_domain: str | None = None
    subscription_status: str = "trial"
    subscription_tier: str = "starter"
    created_at: str = ""
    updated_at: str = ""


class CompanyWithStats(Company):
    job_count: int = 0
    application_count: int = 0


class Admin(BaseModel):
    """A company admin. Always scoped to one company."""

    id: str
    name: str
    email: str
    company_id: str


class SuperAdmin(BaseModel):
    """A platform operator."""

    id: str
    name: str
    email: str


class AuthResponse(BaseModel):
    token: str
    admin: Admin
    message: str = ""


class SuperAdminAuthResponse(BaseModel):
    token: str
    super_admin: SuperAdmin
    message: str = ""


class RegisterRequest(BaseModel):
    company_name: str
    email: str
    password: str
    name: str
    embedded_mode: bool = False
    embed_domain: str | None = None

    @field_validator("company_name", "email", "password", "name")
    @classmethod
    def required(cls, v: str) -> str:
        if not v.strip():
            msg = "field must not be empty"
            raise ValueError(msg)
        return v


# ---------------------------------------------------------------------------
# Jobs
# ---------------------------------------------------------------------------


class JobStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"
    ARCHIVED = "archived"


class ShortlistCriteria(BaseModel):
    """Per-job thresholds used by server-side analysis to auto-score candidates."""

    required_skills: list[str] = Field(default_factory=list)
    min_experience: int = Field(default=0, ge=0)
    required_languages: list[str] = Field(default_factory=list)
    match_job_description: bool = True

    @classmethod
    def from_form(
        cls,
        skills: str = "",
        min_experience: int = 0,
        languages: str = "",
        match_job_description: bool = True,
    ) -> "ShortlistCriteria | None":
        """Build criteria from comma-separated form input.

        Returns None when no skill, experience or language was supplied.
        """
        if not (skills.strip() or min_experience > 0 or languages.strip()):
            return None
        return cls(
            required_skills=split_csv(skills),
            min_experience=min_experience,
            required_languages=split_csv(languages),
            match_job_description=match_job_description,
        )

    def to_json(self) -> str:
        return self.model_dump_json()


class Job(BaseModel):
    """A postable opening."""

    id: str
    company_id: str = ""
    title: str
    description: str = ""
    requirements: str = ""
    location: str = ""
    job_type: str = ""
    salary_range: str = ""
    deadline: str = ""
    status: JobStatus = JobStatus.OPEN
    auto_shortlist: bool = True
    shortlist_criteria: ShortlistCriteria | None = None
    created_at: str = ""
    updated_at: str = ""

    @field_validator("shortlist_criteria", mode="before")
    @classmethod
    def decode_criteria(cls, v: Any) -> Any:
        if isinstance(v, ShortlistCriteria):
            return v
        return parse_json_blob(v)

    @property
    def is_open(self) -> bool:
        return self.status == JobStatus.OPEN


class JobDraft(BaseModel):
    """Create/update payload for a job."""

    title: str
    description: str
    requirements: str = ""
    location: str = ""
    job_type: str = "full-time"
    salary_range: str = ""
    deadline: str
    status: JobStatus | None = None
    auto_shortlist: bool = True
    shortlist_criteria: ShortlistCriteria | None = None

    @field_validator("title", "description", "deadline")
    @classmethod
    def required(cls, v: str) -> str:
        if not v.strip():
            msg = "field must not be empty"
            raise ValueError(msg)
        return v.strip()

    @classmethod
    def from_job(cls, job: Job) -> "JobDraft":
        """Prefill a draft from an existing job for editing."""
        return cls(
            title=job.title,
            description=job.description or job.title,
            requirements=job.requirements,
            location=job.location,
            job_type=job.job_type or "full-time",
            salary_range=job.salary_range,
            deadline=job.deadline[:10] if job.deadline else "",
            status=job.status,
            auto_shortlist=job.auto_shortlist,
            shortlist_criteria=job.shortlist_criteria,
        )

    def to_payload(self) -> dict[str, Any]:
        """Encode for the backend: criteria travel as JSON text ("" when unset)."""
        data = self.model_dump(mode="json", exclude={"shortlist_criteria", "status"})
        if self.status is not None:
            data["status"] = self.status.value
        data["shortlist_criteria"] = (
            self.shortlist_criteria.to_json() if self.shortlist_criteria else ""
        )
        return data


# ---------------------------------------------------------------------------
# Applications
# ---------------------------------------------------------------------------


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    CV_VIEWED = "cv_viewed"
    SHORTLISTED = "shortlisted"
    REJECTED = "rejected"


class CVAnalysisResult(BaseModel):
    """Server-computed match analysis. Opaque to the client beyond display."""

    match_score: float = 0.0
    skills: list[str] = Field(default_factory=list)
    experience: float = 0.0
    education: str = ""
    languages: list[str] = Field(default_factory=list)
    summary: str = ""
    match_reason: str = ""
    missing_skills: list[str] = Field(default_factory=list)
    strengths: list[str] = Field(default_factory=list)
    skills_match: float | None = None
    experience_match: float | None = None
    language_match: float | None = None


class Application(BaseModel):
    """A candidate's submission to a job."""

    id: str
    job_id: str | None = None
    company_id: str = ""
    full_name: str
    email: str
    phone: str = ""
    resume_url: str = ""
    cover_letter: str = ""
    years_of_experience: int = 0
    current_position: str = ""
    linkedin_url: str = ""
    portfolio_url: str = ""
    status: ApplicationStatus = ApplicationStatus.PENDING
    score: float = 0.0
    analysis_result: CVAnalysisResult | None = None
    applied_at: str = ""
    reviewed_at: str | None = None
    cv_viewed_at: str | None = None
    referral_source: str = ""
    referred_by_name: str = ""
    referred_by_email: str = ""
    referred_by_phone: str = ""
    in_talent_pool: bool = False
    talent_pool_added_at: str | None = None
    job: Job | None = None

    @field_validator("analysis_result", mode="before")
    @classmethod
    def decode_analysis(cls, v: Any) -> Any:
        if isinstance(v, CVAnalysisResult):
            return v
        return parse_json_blob(v)

    @field_validator("job", mode="before")
    @classmethod
    def drop_empty_job(cls, v: Any) -> Any:
        # Deleted jobs come back as a zero-valued object.
        if isinstance(v, dict) and not v.get("title"):
            return None
        return v

    @property
    def is_analyzed(self) -> bool:
        """A zero or absent score means "not analyzed", not "zero match"."""
        return self.score > 0 or self.analysis_result is not None


class ApplicationSubmission(BaseModel):
    """Public application form payload."""

    job_id: str
    full_name: str
    email: str
    phone: str = ""
    years_of_experience: int = Field(default=0, ge=0)
    current_position: str = ""
    linkedin_url: str = ""
    portfolio_url: str = ""
    cover_letter: str = ""
    resume_url: str = ""

    @field_validator("job_id", "full_name", "email")
    @classmethod
    def required(cls, v: str) -> str:
        if not v.strip():
            msg = "field must not be empty"
            raise ValueError(msg)
        return v.strip()


class ManualCandidate(BaseModel):
    """Candidate an admin adds by hand, e.g. sourced outside the job board.

    ``job_id`` and ``resume_url`` may be blank here; the form checks them
    before sending so it can report which one is missing.
    """

    full_name: str
    email: str
    job_id: str = ""
    phone: str = ""
    resume_url: str = ""
    cover_letter: str = ""
    years_of_experience: int = Field(default=0, ge=0)
    current_position: str = ""
    linkedin_url: str = ""
    portfolio_url: str = ""
    status: ApplicationStatus = ApplicationStatus.PENDING
    notes: str = ""

    @field_validator("full_name", "email")
    @classmethod
    def required(cls, v: str) -> str:
        if not v.strip():
            msg = "field must not be empty"
            raise ValueError(msg)
        return v.strip()


class ReferralInfo(BaseModel):
    referral_source: str = ""
    referred_by_name: str = ""
    referred_by_email: str = ""
    referred_by_phone: str = ""


# ---------------------------------------------------------------------------
# CRM
# ---------------------------------------------------------------------------


class CandidateNote(BaseModel):
    id: str
    application_id: str
    admin_id: str = ""
    note: str
    is_private: bool = False
    created_at: str = ""
    updated_at: str = ""
    admin: Admin | None = None

    @field_validator("admin", mode="before")
    @classmethod
    def drop_empty_admin(cls, v: Any) -> Any:
        if isinstance(v, dict) and not v.get("id"):
            return None
        return v


class TimelineItem(BaseModel):
    """One entry of an application's relationship timeline."""

    model_config = ConfigDict(frozen=True)

    type: str
    title: str
    description: str = ""
    timestamp: str | None = None
    icon: str = ""
    author: str | None = None
    admin: str | None = None
    sender: str | None = None
    is_private: bool = False


def sort_timeline(items: list[TimelineItem]) -> list[TimelineItem]:
    """Order timeline items newest first. Undated items sink to the end."""
    floor = datetime.min.replace(tzinfo=timezone.utc)
    return sorted(
        items,
        key=lambda item: parse_timestamp(item.timestamp) or floor,
        reverse=True,
    )


# ---------------------------------------------------------------------------
# Activity logs
# ---------------------------------------------------------------------------


class ActivityLog(BaseModel):
    """Immutable audit record of an admin or system action."""

    model_config = ConfigDict(frozen=True)

    id: str
    company_id: str | None = None
    admin_id: str | None = None
    action_type: str
    entity_type: str
    entity_id: str | None = None
    description: str = ""
    metadata: dict[str, Any] | None = None
    created_at: str = ""
    admin: Admin | None = None
    company: Company | None = None

    @field_validator("metadata", mode="before")
    @classmethod
    def decode_metadata(cls, v: Any) -> Any:
        return parse_json_blob(v)


# ---------------------------------------------------------------------------
# Candidate search
# ---------------------------------------------------------------------------


class CandidateSearchRequest(BaseModel):
    query: str | None = None
    skills: list[str] = Field(default_factory=list)
    min_experience: int | None = None
    max_experience: int | None = None
    current_position: str | None = None
    languages: list[str] = Field(default_factory=list)
    has_portfolio: bool = False
    has_linkedin: bool = False
    status: str | None = None
    limit: int = Field(default=50, ge=1)

    @classmethod
    def from_form(
        cls,
        *,
        query: str = "",
        skills: str = "",
        min_experience: str = "",
        max_experience: str = "",
        current_position: str = "",
        languages: str = "",
        has_portfolio: bool = False,
        has_linkedin: bool = False,
        status: str = "",
        limit: int = 50,
    ) -> "CandidateSearchRequest":
        """Build a request from raw search-form text fields."""
        return cls(
            query=query.strip() or None,
            skills=split_csv(skills),
            min_experience=int(min_experience) if min_experience.strip() else None,
            max_experience=int(max_experience) if max_experience.strip() else None,
            current_position=current_position.strip() or None,
            languages=split_csv(languages),
            has_portfolio=has_portfolio,
            has_linkedin=has_linkedin,
            status=status or None,
            limit=limit or 50,
        )

    def to_payload(self) -> dict[str, Any]:
        """Only send what was filled in; flags are sent only when set."""
        payload: dict[str, Any] = {"limit": self.limit}
        for key in ("query", "min_experience", "max_experience", "current_position", "status"):
            value = getattr(self, key)
            if value is not None:
                payload[key] = value
        if self.skills:
            payload["skills"] = self.skills
        if self.languages:
            payload["languages"] = self.languages
        if self.has_portfolio:
            payload["has_portfolio"] = True
        if self.has_linkedin:
            payload["has_linkedin"] = True
        return payload


class CandidateSearchResult(BaseModel):
    application: Application
    match_score: float = 0.0
    matched_skills: list[str] = Field(default_factory=list)
    matched_reasons: list[str] = Field(default_factory=list)


class CandidateSearchPage(BaseModel):
    candidates: list[CandidateSearchResult] = Field(default_factory=list)
    count: int = 0
    total: int = 0


class CandidateDetails(BaseModel):
    candidate: Application
    cv_text: str = ""
    skills: list[str] = Field(default_factory=list)
    experience: float = 0.0


# ---------------------------------------------------------------------------
# Candidate portal
# ---------------------------------------------------------------------------


class JobSummary(BaseModel):
    id: str
    title: str
    company_name: str | None = None


class ApplicationStatusView(BaseModel):
    """What a candidate sees about their own application."""

    id: str
    full_name: str
    email: str
    status: ApplicationStatus
    applied_at: str = ""
    reviewed_at: str | None = None
    score: float = 0.0
    job: JobSummary


# ---------------------------------------------------------------------------
# Dashboards
# ---------------------------------------------------------------------------


class SuperAdminStats(BaseModel):
    total_companies: int = 0
    active_companies: int = 0
    total_jobs: int = 0
    open_jobs: int = 0
    total_applications: int = 0
    pending_applications: int = 0
    shortlisted_applications: int = 0
    total_admins: int = 0


class DashboardStats(BaseModel):
    """Tenant dashboard summary computed from the jobs and applications lists."""

    total_jobs: int = 0
    open_jobs: int = 0
    total_applications: int = 0
    shortlisted: int = 0
    recent_applications: list[Application] = Field(default_factory=list)

    @classmethod
    def compute(
        cls,
        jobs: list[Job],
        applications: list[Application],
        recent: int = 5,
    ) -> "DashboardStats":
        return cls(
            total_jobs=len(jobs),
            open_jobs=sum(1 for j in jobs if j.status == JobStatus.OPEN),
            total_applications=len(applications),
            shortlisted=sum(
                1 for a in applications if a.status == ApplicationStatus.SHORTLISTED
            ),
            recent_applications=applications[:recent],
        )


# ---------------------------------------------------------------------------
# List filters
# ---------------------------------------------------------------------------


class _Filters(BaseModel):
    """Base for list filters. Empty values are never sent."""

    def to_params(self) -> dict[str, str]:
        params: dict[str, str] = {}
        for key, value in self.model_dump(mode="json").items():
            if value not in (None, ""):
                params[key] = str(value)
        return params


class JobFilters(_Filters):
    status: JobStatus | None = None


class ApplicationFilters(_Filters):
    job_id: str | None = None
    status: ApplicationStatus | None = None
    date_from: str | None = None
    date_to: str | None = None


class ActivityLogFilters(_Filters):
    company_id: str | None = None
    action_type: str | None = None
    entity_type: str | None = None
    date_from: str | None = None
    date_to: str | None = None
