"""Tests for backend data models and boundary decoding."""

import json
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from src.core.schemas import (
    ActivityLog,
    ActivityLogFilters,
    Application,
    ApplicationFilters,
    ApplicationStatus,
    ApplicationSubmission,
    CandidateNote,
    CandidateSearchRequest,
    DashboardStats,
    Job,
    JobDraft,
    JobFilters,
    JobStatus,
    RegisterRequest,
    ShortlistCriteria,
    TimelineItem,
    parse_json_blob,
    parse_timestamp,
    sort_timeline,
    split_csv,
)
from tests.fakes import application_payload, job_payload

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestParseJsonBlob:
    def test_dict_passthrough(self) -> None:
        assert parse_json_blob({"a": 1}) == {"a": 1}

    def test_json_text(self) -> None:
        assert parse_json_blob('{"match_score": 72}') == {"match_score": 72}

    def test_double_encoded(self) -> None:
        inner = json.dumps({"match_score": 72})
        assert parse_json_blob(json.dumps(inner)) == {"match_score": 72}

    @pytest.mark.parametrize("value", [None, "", "   ", "not json", "[1, 2]", 42])
    def test_unusable_input_gives_none(self, value: object) -> None:
        assert parse_json_blob(value) is None


class TestSplitCsv:
    def test_strips_and_drops_blanks(self) -> None:
        assert split_csv(" Go, SQL ,, Docker ,") == ["Go", "SQL", "Docker"]

    def test_empty(self) -> None:
        assert split_csv("") == []


class TestParseTimestamp:
    def test_nanoseconds_truncated(self) -> None:
        parsed = parse_timestamp("2026-10-02T09:00:00.123456789Z")
        assert parsed == datetime(2026, 10, 2, 9, 0, 0, 123456, tzinfo=timezone.utc)

    def test_offset_kept(self) -> None:
        parsed = parse_timestamp("2026-10-02T09:00:00+02:00")
        assert parsed is not None
        assert parsed.utcoffset().total_seconds() == 7200

    def test_naive_assumed_utc(self) -> None:
        parsed = parse_timestamp("2026-10-02T09:00:00")
        assert parsed is not None
        assert parsed.tzinfo == timezone.utc

    @pytest.mark.parametrize("value", [None, "", "yesterday"])
    def test_invalid(self, value: str | None) -> None:
        assert parse_timestamp(value) is None


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class TestRegisterRequest:
    def test_valid(self) -> None:
        r = RegisterRequest(company_name="Acme", email="a@acme.test", password="secret", name="Ana")
        assert r.embedded_mode is False
        assert r.embed_domain is None

    def test_blank_field_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RegisterRequest(company_name="  ", email="a@acme.test", password="secret", name="Ana")


# ---------------------------------------------------------------------------
# Jobs
# ---------------------------------------------------------------------------


class TestShortlistCriteria:
    def test_from_form(self) -> None:
        c = ShortlistCriteria.from_form("Go, SQL", 3, "English")
        assert c is not None
        assert c.required_skills == ["Go", "SQL"]
        assert c.min_experience == 3
        assert c.required_languages == ["English"]
        assert c.match_job_description is True

    def test_from_empty_form(self) -> None:
        assert ShortlistCriteria.from_form("  ", 0, "") is None

    def test_negative_experience_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ShortlistCriteria(min_experience=-1)


class TestJob:
    def test_criteria_decoded_from_text(self) -> None:
        criteria = {"required_skills": ["Go"], "min_experience": 2}
        job = Job.model_validate(job_payload(shortlist_criteria=json.dumps(criteria)))
        assert job.shortlist_criteria is not None
        assert job.shortlist_criteria.required_skills == ["Go"]
        assert job.shortlist_criteria.min_experience == 2

    def test_empty_criteria(self) -> None:
        assert Job.model_validate(job_payload(shortlist_criteria="")).shortlist_criteria is None

    def test_is_open(self) -> None:
        assert Job.model_validate(job_payload()).is_open
        assert not Job.model_validate(job_payload(status="closed")).is_open


class TestJobDraft:
    def test_required_fields(self) -> None:
        with pytest.raises(ValidationError):
            JobDraft(title="", description="x", deadline="2026-12-31")
        with pytest.raises(ValidationError):
            JobDraft(title="x", description="x", deadline=" ")

    def test_payload_without_criteria(self) -> None:
        payload = JobDraft(title="Dev", description="Build", deadline="2026-12-31").to_payload()
        assert payload["shortlist_criteria"] == ""
        assert "status" not in payload
        assert payload["job_type"] == "full-time"

    def test_payload_encodes_criteria_as_text(self) -> None:
        draft = JobDraft(
            title="Dev",
            description="Build",
            deadline="2026-12-31",
            status=JobStatus.CLOSED,
            shortlist_criteria=ShortlistCriteria(required_skills=["Go"]),
        )
        payload = draft.to_payload()
        assert payload["status"] == "closed"
        assert json.loads(payload["shortlist_criteria"])["required_skills"] == ["Go"]

    def test_from_job(self) -> None:
        job = Job.model_validate(job_payload(status="closed"))
        draft = JobDraft.from_job(job)
        assert draft.title == job.title
        assert draft.deadline == "2026-12-31"
        assert draft.status == JobStatus.CLOSED


# ---------------------------------------------------------------------------
# Applications
# ---------------------------------------------------------------------------


class TestApplication:
    def test_unanalyzed(self) -> None:
        app = Application.model_validate(application_payload())
        assert app.analysis_result is None
        assert app.is_analyzed is False

    def test_analysis_decoded(self) -> None:
        analysis = {"match_score": 81.5, "skills": ["Go"], "summary": "Strong"}
        app = Application.model_validate(
            application_payload(score=81.5, analysis_result=json.dumps(analysis)),
        )
        assert app.analysis_result is not None
        assert app.analysis_result.match_score == 81.5
        assert app.is_analyzed

    def test_zero_valued_job_dropped(self) -> None:
        app = Application.model_validate(application_payload(job={"id": "", "title": ""}))
        assert app.job is None

    def test_status(self) -> None:
        app = Application.model_validate(application_payload(status="cv_viewed"))
        assert app.status == ApplicationStatus.CV_VIEWED

    def test_unknown_status_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Application.model_validate(application_payload(status="hired"))


class TestApplicationSubmission:
    def test_required_fields(self) -> None:
        with pytest.raises(ValidationError):
            ApplicationSubmission(job_id="job-1", full_name=" ", email="c@mail.test")

    def test_resume_url_defaults_empty(self) -> None:
        s = ApplicationSubmission(job_id="job-1", full_name="Carla", email="c@mail.test")
        assert s.resume_url == ""


# ---------------------------------------------------------------------------
# CRM and logs
# ---------------------------------------------------------------------------


class TestCandidateNote:
    def test_empty_admin_dropped(self) -> None:
        note = CandidateNote.model_validate(
            {"id": "n1", "application_id": "app-1", "note": "Call back", "admin": {"id": ""}},
        )
        assert note.admin is None


class TestSortTimeline:
    def test_newest_first_undated_last(self) -> None:
        items = [
            TimelineItem(type="note", title="old", timestamp="2026-01-01T00:00:00Z"),
            TimelineItem(type="status", title="undated"),
            TimelineItem(type="email", title="new", timestamp="2026-06-01T00:00:00.5Z"),
        ]
        assert [i.title for i in sort_timeline(items)] == ["new", "old", "undated"]


class TestActivityLog:
    def test_metadata_decoded(self) -> None:
        log = ActivityLog.model_validate({
            "id": "l1",
            "action_type": "job_created",
            "entity_type": "job",
            "metadata": '{"title": "Dev"}',
        })
        assert log.metadata == {"title": "Dev"}

    def test_frozen(self) -> None:
        log = ActivityLog(id="l1", action_type="job_created", entity_type="job")
        with pytest.raises(ValidationError):
            log.description = "changed"


# ---------------------------------------------------------------------------
# Candidate search
# ---------------------------------------------------------------------------


class TestCandidateSearchRequest:
    def test_from_form_only_sends_filled_fields(self) -> None:
        request = CandidateSearchRequest.from_form(
            query=" python ", skills="Go, SQL", min_experience="3", has_linkedin=True,
        )
        assert request.to_payload() == {
            "limit": 50,
            "query": "python",
            "min_experience": 3,
            "skills": ["Go", "SQL"],
            "has_linkedin": True,
        }

    def test_empty_form(self) -> None:
        assert CandidateSearchRequest.from_form().to_payload() == {"limit": 50}


# ---------------------------------------------------------------------------
# Dashboards and filters
# ---------------------------------------------------------------------------


class TestDashboardStats:
    def test_compute(self) -> None:
        jobs = [
            Job.model_validate(job_payload("j1")),
            Job.model_validate(job_payload("j2", status="closed")),
        ]
        apps = [
            Application.model_validate(application_payload(f"a{i}", status=status))
            for i, status in enumerate(
                ["pending", "shortlisted", "rejected", "shortlisted", "pending", "cv_viewed"],
            )
        ]
        stats = DashboardStats.compute(jobs, apps)
        assert stats.total_jobs == 2
        assert stats.open_jobs == 1
        assert stats.total_applications == 6
        assert stats.shortlisted == 2
        assert [a.id for a in stats.recent_applications] == ["a0", "a1", "a2", "a3", "a4"]

    def test_empty(self) -> None:
        stats = DashboardStats.compute([], [])
        assert stats.total_jobs == 0
        assert stats.recent_applications == []


class TestFilters:
    def test_empty_values_not_sent(self) -> None:
        f = ApplicationFilters(job_id="", status=ApplicationStatus.SHORTLISTED, date_from=None)
        assert f.to_params() == {"status": "shortlisted"}

    def test_job_filters(self) -> None:
        assert JobFilters().to_params() == {}
        assert JobFilters(status=JobStatus.OPEN).to_params() == {"status": "open"}

    def test_activity_filters(self) -> None:
        f = ActivityLogFilters(company_id="c1", action_type="job_created")
        assert f.to_params() == {"company_id": "c1", "action_type": "job_created"}
