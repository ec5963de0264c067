"""CLI console for the ATS portal."""

import argparse
import asyncio
import getpass
import logging
import sys
from collections.abc import Callable

import httpx

from src.api.client import ApiClient
from src.api.errors import ApiError
from src.api.resources import (
    CRMAPI,
    AIShortlistAPI,
    ActivityLogAPI,
    ApplicationAPI,
    AuthAPI,
    CandidatePortalAPI,
    CandidateSearchAPI,
    JobAPI,
    SuperAdminAPI,
    UploadAPI,
)
from src.api.uploads import UploadFile
from src.core.config import Settings
from src.core.schemas import (
    ActivityLog,
    ActivityLogFilters,
    ApplicationFilters,
    ApplicationStatus,
    ApplicationSubmission,
    CandidateSearchRequest,
    DashboardStats,
    JobDraft,
    JobFilters,
    JobStatus,
    ManualCandidate,
    ReferralInfo,
    RegisterRequest,
    ShortlistCriteria,
)
from src.dashboard.guard import RouteGuard, admin_guard, super_admin_guard
from src.dashboard.mutations import MutationRunner, always_confirm
from src.dashboard.navigation import (
    ADMIN_DASHBOARD,
    EMBED_DASHBOARD,
    SUPER_ADMIN_DASHBOARD,
    Router,
    build_route,
)
from src.dashboard.toasts import Toast, ToastBus
from src.session.storage import SqliteStorage, Storage
from src.session.store import SessionContext
from src.views.admin import (
    APPLICATIONS_ROUTE,
    JOBS_ROUTE,
    ActivityLogView,
    ApplicationsView,
    CandidateSearchView,
    DashboardOverview,
    JobEditor,
    JobsView,
    ManualCandidateForm,
    action_icon,
    match_band,
    score_band,
)
from src.views.auth import AdminLoginFlow, SuperAdminLoginFlow
from src.views.crm import CandidateNotesView, TalentPoolView
from src.views.embedded import EmbeddedDashboard, EmbedState, embed_snippet
from src.views.public import ApplicationForm, ApplicationStatusLookup, JobBoard
from src.views.super_admin import SuperAdminConsole

logger = logging.getLogger(__name__)

JOB_TEXT_FIELDS = (
    "title", "description", "deadline", "requirements", "location", "job_type", "salary_range",
)


def _add_job_fields(parser: argparse.ArgumentParser, *, required: bool) -> None:
    """Job form flags. When editing, every flag is optional."""
    parser.add_argument("--title", required=required)
    parser.add_argument("--description", required=required)
    parser.add_argument("--deadline", required=required, metavar="YYYY-MM-DD")
    parser.add_argument("--requirements")
    parser.add_argument("--location")
    parser.add_argument("--type", dest="job_type", help="full-time, part-time, contract, ...")
    parser.add_argument("--salary", dest="salary_range")
    parser.add_argument("--skills", help="Comma-separated skills for auto-shortlisting")
    parser.add_argument("--min-experience", type=int, metavar="YEARS")
    parser.add_argument("--languages", help="Comma-separated languages")
    parser.add_argument(
        "--auto-shortlist", action=argparse.BooleanOptionalAction, default=None,
        help="Score new applications automatically",
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        default="config/settings.yaml",
        help="Path to settings YAML file (default: config/settings.yaml)",
    )
    common.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )
    common.add_argument(
        "--yes", "-y",
        action="store_true",
        help="Answer yes to every confirmation prompt",
    )

    parser = argparse.ArgumentParser(
        description="ATS portal console - manage jobs and applications",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- session ---
    login_parser = subparsers.add_parser("login", parents=[common], help="Sign in as a company admin")
    login_parser.add_argument("--email", required=True)
    login_parser.add_argument("--password", help="Prompted for when omitted")

    register_parser = subparsers.add_parser(
        "register", parents=[common], help="Register a company and its first admin",
    )
    register_parser.add_argument("--company", required=True, help="Company name")
    register_parser.add_argument("--name", required=True, help="Admin full name")
    register_parser.add_argument("--email", required=True)
    register_parser.add_argument("--password", help="Prompted for when omitted")
    register_parser.add_argument("--embedded", action="store_true", help="Enable embedded mode")
    register_parser.add_argument("--embed-domain", help="Domain allowed to embed the dashboard")

    logout_parser = subparsers.add_parser("logout", parents=[common], help="Sign out")
    logout_parser.add_argument(
        "--super-admin", action="store_true", help="Sign out the super-admin session instead",
    )

    subparsers.add_parser("whoami", parents=[common], help="Show the signed-in identities")
    subparsers.add_parser("dashboard", parents=[common], help="Show the company dashboard summary")

    # --- admin dashboard ---
    jobs_parser = subparsers.add_parser("jobs", parents=[common], help="List and manage jobs")
    jobs_parser.add_argument("--status", choices=[s.value for s in JobStatus])
    jobs_parser.add_argument("--toggle", metavar="JOB_ID", help="Close an open job or reopen it")
    jobs_parser.add_argument("--delete", metavar="JOB_ID", help="Delete a job")

    create_parser = subparsers.add_parser("job-create", parents=[common], help="Post a new job")
    _add_job_fields(create_parser, required=True)
    edit_parser = subparsers.add_parser("job-edit", parents=[common], help="Update an existing job")
    edit_parser.add_argument("job_id")
    _add_job_fields(edit_parser, required=False)

    apps_parser = subparsers.add_parser(
        "applications", parents=[common], help="List and manage applications",
    )
    apps_parser.add_argument("--job", metavar="JOB_ID", help="Only applications to this job")
    apps_parser.add_argument("--status", choices=[s.value for s in ApplicationStatus])
    apps_parser.add_argument("--from", dest="date_from", metavar="YYYY-MM-DD")
    apps_parser.add_argument("--to", dest="date_to", metavar="YYYY-MM-DD")
    apps_parser.add_argument("--analyze", metavar="APPLICATION_ID", help="Run AI CV analysis")
    apps_parser.add_argument("--delete", metavar="APPLICATION_ID", help="Delete one application")
    apps_parser.add_argument(
        "--bulk-delete",
        choices=[s.value for s in ApplicationStatus],
        help="Delete every application with this status",
    )

    for name, help_text in (("shortlist", "Shortlist a candidate"), ("reject", "Reject a candidate")):
        p = subparsers.add_parser(name, parents=[common], help=help_text)
        p.add_argument("application_id")

    manual_parser = subparsers.add_parser(
        "add-candidate", parents=[common], help="Add a candidate to a job by hand",
    )
    manual_parser.add_argument("job_id")
    manual_parser.add_argument("--name", required=True, help="Full name")
    manual_parser.add_argument("--email", required=True)
    manual_parser.add_argument("--phone", default="")
    manual_parser.add_argument("--cv", metavar="PATH", help="CV file to upload (PDF, DOC, DOCX)")
    manual_parser.add_argument("--resume-url", default="", help="Link to an already hosted CV")
    manual_parser.add_argument("--experience", type=int, default=0, help="Years of experience")
    manual_parser.add_argument("--position", default="", help="Current position")
    manual_parser.add_argument("--linkedin", default="")
    manual_parser.add_argument("--portfolio-url", default="")
    manual_parser.add_argument("--cover-letter", default="")
    manual_parser.add_argument(
        "--status", choices=[s.value for s in ApplicationStatus], default=ApplicationStatus.PENDING.value,
    )
    manual_parser.add_argument("--notes", default="", help="Why this candidate was added")

    notes_parser = subparsers.add_parser(
        "notes", parents=[common], help="Notes, referral and timeline of an application",
    )
    notes_parser.add_argument("application_id")
    notes_parser.add_argument("--add", metavar="TEXT", help="Add a note")
    notes_parser.add_argument("--private", action="store_true", help="Make the added note private")
    notes_parser.add_argument("--delete", metavar="NOTE_ID", help="Delete a note")
    notes_parser.add_argument("--referral-source", help="Where the candidate came from")
    notes_parser.add_argument("--referred-by-name", default="")
    notes_parser.add_argument("--referred-by-email", default="")
    notes_parser.add_argument("--referred-by-phone", default="")
    notes_parser.add_argument("--talent-pool", action="store_true", help="Add to the talent pool")

    embed_code_parser = subparsers.add_parser(
        "embed-code", parents=[common], help="Print the careers page embed snippet",
    )
    embed_code_parser.add_argument("--frontend-url", help="Override the configured frontend_url")

    embed_parser = subparsers.add_parser(
        "embed", parents=[common], help="Open the embedded dashboard for a company",
    )
    embed_parser.add_argument("--company", metavar="COMPANY_ID", help="Company the embed code is for")

    search_parser = subparsers.add_parser("candidates", parents=[common], help="Search the candidate pool")
    search_parser.add_argument("--query", default="", help="Free text")
    search_parser.add_argument("--skills", default="", help="Comma-separated skills")
    search_parser.add_argument("--min-experience", default="", metavar="YEARS")
    search_parser.add_argument("--max-experience", default="", metavar="YEARS")
    search_parser.add_argument("--languages", default="", help="Comma-separated languages")
    search_parser.add_argument("--limit", type=int, default=50)

    pool_parser = subparsers.add_parser("talent-pool", parents=[common], help="Show the talent pool")
    pool_parser.add_argument("--remove", metavar="APPLICATION_ID", help="Remove from the pool")

    logs_parser = subparsers.add_parser("logs", parents=[common], help="Show the activity log")
    logs_parser.add_argument("--action-type")
    logs_parser.add_argument("--entity-type")
    logs_parser.add_argument("--from", dest="date_from", metavar="YYYY-MM-DD")
    logs_parser.add_argument("--to", dest="date_to", metavar="YYYY-MM-DD")

    # --- candidate portal ---
    board_parser = subparsers.add_parser("board", parents=[common], help="List a company's open jobs")
    board_parser.add_argument("company_id")

    apply_parser = subparsers.add_parser("apply", parents=[common], help="Apply to a job")
    apply_parser.add_argument("job_id")
    apply_parser.add_argument("--name", required=True, help="Full name")
    apply_parser.add_argument("--email", required=True)
    apply_parser.add_argument("--phone", default="")
    apply_parser.add_argument("--cv", metavar="PATH", help="CV file to upload (PDF, DOC, DOCX)")
    apply_parser.add_argument("--resume-url", default="", help="Link to an already hosted CV")
    apply_parser.add_argument("--portfolio", metavar="PATH", help="Portfolio file to upload")
    apply_parser.add_argument("--experience", type=int, default=0, help="Years of experience")
    apply_parser.add_argument("--position", default="", help="Current position")
    apply_parser.add_argument("--linkedin", default="")
    apply_parser.add_argument("--cover-letter", default="")

    status_parser = subparsers.add_parser(
        "status", parents=[common], help="Check the status of an application",
    )
    status_parser.add_argument("--email", required=True)
    status_parser.add_argument("--id", dest="application_id", help="Application ID (all when omitted)")

    # --- super admin ---
    super_parser = subparsers.add_parser("super-login", parents=[common], help="Sign in as super admin")
    super_parser.add_argument("--email", required=True)
    super_parser.add_argument("--password", help="Prompted for when omitted")

    platform_parser = subparsers.add_parser(
        "platform", parents=[common], help="Platform-wide stats and activity",
    )
    platform_parser.add_argument("--company", metavar="COMPANY_ID", help="Only this company's activity")
    platform_parser.add_argument("--companies", action="store_true", help="List every company")

    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def ask(prompt: str) -> bool:
    answer = input(f"{prompt} [y/N] ")
    return answer.strip().lower() in ("y", "yes")


class ToastPrinter:
    """Prints each toast once, when it first appears on the bus."""

    def __init__(self) -> None:
        self._seen: set[str] = set()

    def __call__(self, toasts: list[Toast]) -> None:
        for toast in toasts:
            if toast.id in self._seen:
                continue
            self._seen.add(toast.id)
            stream = sys.stderr if toast.type.value == "error" else sys.stdout
            print(f"[{toast.type.value}] {toast.message}", file=stream)


class Console:
    """Everything one command needs, wired for a single run."""

    def __init__(
        self,
        settings: Settings,
        storage: Storage,
        confirm: Callable[[str], bool] = ask,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self.session = SessionContext(storage)
        self.router = Router()
        self.toasts = ToastBus(settings.toasts)
        self.runner = MutationRunner(self.toasts, confirm)
        self.api = ApiClient.authenticated(settings, self.session, transport=transport)
        self.public_api = ApiClient.public(settings, transport=transport)

    async def aclose(self) -> None:
        self.toasts.close()
        await self.api.aclose()
        await self.public_api.aclose()

    def require(self, guard: RouteGuard) -> None:
        guard.mount()
        if not guard.can_render:
            msg = f"Not signed in (redirected to {self.router.current})"
            raise PermissionError(msg)


def _password(args: argparse.Namespace) -> str:
    return args.password or getpass.getpass("Password: ")


def _job_draft(args: argparse.Namespace, base: JobDraft | None = None) -> JobDraft:
    """Build a job draft from the job flags. Flags left unset keep base's values."""
    data = base.model_dump() if base else {}
    data.update({f: getattr(args, f) for f in JOB_TEXT_FIELDS if getattr(args, f) is not None})
    if args.auto_shortlist is not None:
        data["auto_shortlist"] = args.auto_shortlist
    if args.skills is not None or args.min_experience is not None or args.languages is not None:
        data["shortlist_criteria"] = ShortlistCriteria.from_form(
            skills=args.skills or "",
            min_experience=args.min_experience or 0,
            languages=args.languages or "",
        )
    return JobDraft.model_validate(data)


def _print_stats(stats: DashboardStats) -> None:
    print(
        f"Jobs: {stats.total_jobs} ({stats.open_jobs} open)  "
        f"Applications: {stats.total_applications} ({stats.shortlisted} shortlisted)"
    )
    for app in stats.recent_applications:
        print(f"  {app.applied_at[:10]}  {app.full_name}  [{app.status.value}]")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


async def cmd_login(console: Console, args: argparse.Namespace) -> None:
    flow = AdminLoginFlow(AuthAPI(console.api), console.session, console.router)
    if not await flow.login(args.email, _password(args)):
        raise PermissionError(flow.error)
    admin = console.session.admin.identity
    print(f"Signed in as {admin.name} <{admin.email}> (company {admin.company_id})")


async def cmd_register(console: Console, args: argparse.Namespace) -> None:
    request = RegisterRequest(
        company_name=args.company,
        name=args.name,
        email=args.email,
        password=_password(args),
        embedded_mode=args.embedded,
        embed_domain=args.embed_domain,
    )
    flow = AdminLoginFlow(AuthAPI(console.api), console.session, console.router)
    if not await flow.register(request):
        raise PermissionError(flow.error)
    admin = console.session.admin.identity
    print(f"Registered {args.company}. Company ID: {admin.company_id}")


async def cmd_logout(console: Console, args: argparse.Namespace) -> None:
    store = console.session.super_admin if args.super_admin else console.session.admin
    store.logout()
    print("Signed out")


async def cmd_whoami(console: Console, args: argparse.Namespace) -> None:
    console.session.check_auth()
    admin = console.session.admin
    super_admin = console.session.super_admin
    if not admin.is_authenticated and not super_admin.is_authenticated:
        print("Not signed in")
        return
    if admin.is_authenticated:
        who = f"{admin.identity.name} <{admin.identity.email}>" if admin.identity else "unknown"
        print(f"Admin: {who}")
    if super_admin.is_authenticated:
        identity = super_admin.identity
        who = f"{identity.name} <{identity.email}>" if identity else "unknown"
        print(f"Super admin: {who}")


async def cmd_dashboard(console: Console, args: argparse.Namespace) -> None:
    console.router.push(ADMIN_DASHBOARD)
    console.require(admin_guard(console.session, console.router))
    overview = DashboardOverview(JobAPI(console.api), ApplicationAPI(console.api))
    _print_stats(await overview.load())


async def cmd_embed(console: Console, args: argparse.Namespace) -> None:
    route = build_route(EMBED_DASHBOARD, company_id=args.company)
    console.router.push(route)
    dashboard = EmbeddedDashboard(
        route, console.session, console.router, JobAPI(console.api), ApplicationAPI(console.api),
    )
    try:
        state = await dashboard.open()
    finally:
        dashboard.close()
    if state == EmbedState.REDIRECT:
        msg = f"Not signed in (redirected to {console.router.current})"
        raise PermissionError(msg)
    if state == EmbedState.MISCONFIGURED:
        raise ValueError(dashboard.error)
    if state != EmbedState.READY:
        raise PermissionError(dashboard.error)
    _print_stats(dashboard.stats)


async def cmd_embed_code(console: Console, args: argparse.Namespace) -> None:
    console.require(admin_guard(console.session, console.router))
    admin = console.session.admin.identity
    if admin is None:
        msg = "Signed-in admin is unknown, please sign in again"
        raise PermissionError(msg)
    print(embed_snippet(args.frontend_url or console.settings.frontend_url, admin.company_id))
    print(f"Embedded dashboard: {build_route(EMBED_DASHBOARD, company_id=admin.company_id)}")


async def cmd_jobs(console: Console, args: argparse.Namespace) -> None:
    console.router.push(JOBS_ROUTE)
    console.require(admin_guard(console.session, console.router))
    view = JobsView(JobAPI(console.api), console.runner, debounce_s=console.settings.lists.debounce_s)
    view.list.filters = JobFilters(status=args.status)
    await view.list.refresh()

    if args.toggle:
        job = next((j for j in view.list.items if j.id == args.toggle), None)
        if job is None:
            job = await JobAPI(console.api).get(args.toggle)
        await view.toggle_status(job)
    elif args.delete:
        await view.delete(args.delete)

    if not view.list.items:
        print("No jobs")
    for job in view.list.items:
        print(f"{job.id}  [{job.status.value:8}] {job.title}  ({job.location or 'n/a'})  deadline {job.deadline[:10]}")


async def cmd_job_create(console: Console, args: argparse.Namespace) -> None:
    console.require(admin_guard(console.session, console.router))
    editor = JobEditor(JobAPI(console.api), console.toasts, console.router)
    job = await editor.save(_job_draft(args))
    if job is None:
        msg = "Job was not created"
        raise ValueError(msg)
    print(f"{job.id}  [{job.status.value}] {job.title}")


async def cmd_job_edit(console: Console, args: argparse.Namespace) -> None:
    console.require(admin_guard(console.session, console.router))
    editor = JobEditor(JobAPI(console.api), console.toasts, console.router)
    draft = await editor.load(args.job_id)
    if draft is None:
        msg = f"Job could not be loaded: {args.job_id}"
        raise ValueError(msg)
    job = await editor.save(_job_draft(args, draft))
    if job is None:
        msg = "Job was not updated"
        raise ValueError(msg)
    print(f"{job.id}  [{job.status.value}] {job.title}")


async def cmd_applications(console: Console, args: argparse.Namespace) -> None:
    console.router.push(APPLICATIONS_ROUTE)
    console.require(admin_guard(console.session, console.router))
    view = ApplicationsView(
        ApplicationAPI(console.api),
        JobAPI(console.api),
        AIShortlistAPI(console.api),
        console.runner,
        console.toasts,
        debounce_s=console.settings.lists.debounce_s,
    )
    view.list.filters = ApplicationFilters(
        job_id=args.job, status=args.status, date_from=args.date_from, date_to=args.date_to,
    )
    await view.list.refresh()

    if args.analyze or args.delete:
        target_id = args.analyze or args.delete
        application = next((a for a in view.list.items if a.id == target_id), None)
        if application is None:
            msg = f"Application not found: {target_id}"
            raise ValueError(msg)
        if args.analyze:
            await view.analyze(application)
        else:
            await view.delete(application)
    elif args.bulk_delete:
        await view.bulk_delete(ApplicationStatus(args.bulk_delete))

    if not view.list.items:
        print("No applications")
    for app in view.list.items:
        score = f"{app.score:5.1f}% {score_band(app.score):6}" if app.is_analyzed else "not analyzed"
        job = app.job.title if app.job else "(deleted job)"
        print(f"{app.id}  [{app.status.value:11}] {app.full_name} <{app.email}>  {job}  {score}")


async def cmd_review(console: Console, args: argparse.Namespace) -> None:
    console.require(admin_guard(console.session, console.router))
    view = ApplicationsView(
        ApplicationAPI(console.api),
        JobAPI(console.api),
        AIShortlistAPI(console.api),
        console.runner,
        console.toasts,
    )
    action = view.shortlist if args.command == "shortlist" else view.reject
    await action(args.application_id)
    for app in view.list.items:
        if app.id == args.application_id:
            print(f"{app.full_name}: {app.status.value}")


async def cmd_add_candidate(console: Console, args: argparse.Namespace) -> None:
    console.router.push(f"{APPLICATIONS_ROUTE}/manual-add")
    console.require(admin_guard(console.session, console.router))
    form = ManualCandidateForm(
        ApplicationAPI(console.api),
        JobAPI(console.api),
        UploadAPI(console.api),
        console.toasts,
        console.router,
    )
    jobs = await form.load_jobs()
    if not any(job.id == args.job_id for job in jobs):
        msg = f"Job not found: {args.job_id}"
        raise ValueError(msg)
    if args.cv and await form.upload_cv(UploadFile.from_path(args.cv)) is None:
        msg = "CV was not uploaded"
        raise ValueError(msg)

    candidate = ManualCandidate(
        job_id=args.job_id,
        full_name=args.name,
        email=args.email,
        phone=args.phone,
        resume_url=args.resume_url,
        years_of_experience=args.experience,
        current_position=args.position,
        linkedin_url=args.linkedin,
        portfolio_url=args.portfolio_url,
        cover_letter=args.cover_letter,
        status=ApplicationStatus(args.status),
        notes=args.notes,
    )
    application = await form.submit(candidate)
    if application is None:
        msg = "Candidate was not added"
        raise ValueError(msg)
    print(f"{application.id}  [{application.status.value}] {application.full_name} <{application.email}>")


async def cmd_notes(console: Console, args: argparse.Namespace) -> None:
    console.require(admin_guard(console.session, console.router))
    view = CandidateNotesView(CRMAPI(console.api), console.runner, console.toasts, args.application_id)
    await view.load()
    if args.add is not None:
        await view.add_note(args.add, is_private=args.private)
    if args.delete:
        await view.delete_note(args.delete)
    if args.referral_source is not None:
        await view.set_referral(ReferralInfo(
            referral_source=args.referral_source,
            referred_by_name=args.referred_by_name,
            referred_by_email=args.referred_by_email,
            referred_by_phone=args.referred_by_phone,
        ))
    if args.talent_pool:
        await view.add_to_talent_pool()

    if not view.notes:
        print("No notes")
    for note in view.notes:
        author = note.admin.name if note.admin else "unknown"
        private = " (private)" if note.is_private else ""
        print(f"{note.id}  {note.created_at[:16]}  {author}{private}: {note.note}")
    if view.timeline:
        print("Timeline:")
    for item in view.timeline:
        print(f"  {(item.timestamp or '')[:16]:16}  {item.title}")


async def cmd_candidates(console: Console, args: argparse.Namespace) -> None:
    console.require(admin_guard(console.session, console.router))
    view = CandidateSearchView(CandidateSearchAPI(console.api), console.toasts)
    request = CandidateSearchRequest.from_form(
        query=args.query,
        skills=args.skills,
        min_experience=args.min_experience,
        max_experience=args.max_experience,
        languages=args.languages,
        limit=args.limit,
    )
    results = await view.search(request)
    if view.searched:
        print(f"{len(results)} of {view.total} candidates")
    for result in results:
        app = result.application
        skills = ", ".join(result.matched_skills)
        print(
            f"{app.id}  {result.match_score:5.1f}% {match_band(result.match_score):6} "
            f"{app.full_name} <{app.email}>  {skills}"
        )


async def cmd_talent_pool(console: Console, args: argparse.Namespace) -> None:
    console.require(admin_guard(console.session, console.router))
    view = TalentPoolView(CRMAPI(console.api), console.runner, console.toasts)
    await view.load()
    if args.remove:
        application = next((a for a in view.items if a.id == args.remove), None)
        if application is None:
            msg = f"Not in talent pool: {args.remove}"
            raise ValueError(msg)
        await view.remove(application)
    if not view.items:
        print("Talent pool is empty")
    for app in view.items:
        print(f"{app.id}  {app.full_name} <{app.email}>  {app.current_position or ''}")


async def cmd_logs(console: Console, args: argparse.Namespace) -> None:
    console.require(admin_guard(console.session, console.router))
    view = ActivityLogView(ActivityLogAPI(console.api))
    view.list.filters = ActivityLogFilters(
        action_type=args.action_type,
        entity_type=args.entity_type,
        date_from=args.date_from,
        date_to=args.date_to,
    )
    await view.list.refresh()
    _print_logs(view.list.items)


async def cmd_board(console: Console, args: argparse.Namespace) -> None:
    board = JobBoard(JobAPI(console.public_api), args.company_id)
    jobs = await board.load()
    if board.empty:
        print("No open positions")
    for job in jobs:
        print(f"{job.id}  {job.title}  ({job.location or 'n/a'}, {job.job_type})  apply by {job.deadline[:10]}")


async def cmd_apply(console: Console, args: argparse.Namespace) -> None:
    form = ApplicationForm(
        args.job_id,
        ApplicationAPI(console.public_api),
        UploadAPI(console.public_api),
        console.toasts,
    )
    if args.cv:
        await form.upload_cv(UploadFile.from_path(args.cv))
    if args.portfolio:
        await form.upload_portfolio(UploadFile.from_path(args.portfolio))

    submission = ApplicationSubmission(
        job_id=args.job_id,
        full_name=args.name,
        email=args.email,
        phone=args.phone,
        years_of_experience=args.experience,
        current_position=args.position,
        linkedin_url=args.linkedin,
        cover_letter=args.cover_letter,
        resume_url=args.resume_url,
    )
    receipt = await form.submit(submission)
    if receipt is None:
        msg = "Application was not submitted"
        raise ValueError(msg)
    print(f"Track your application at {receipt.status_route}")


async def cmd_status(console: Console, args: argparse.Namespace) -> None:
    lookup = ApplicationStatusLookup(CandidatePortalAPI(console.public_api), console.toasts)
    if args.application_id:
        found = await lookup.check(args.email, args.application_id)
        results = [found] if found else []
    else:
        results = await lookup.by_email(args.email)
    for view in results:
        company = f" at {view.job.company_name}" if view.job.company_name else ""
        print(f"{view.id}  {view.job.title}{company}: {view.status.value} (applied {view.applied_at[:10]})")


async def cmd_super_login(console: Console, args: argparse.Namespace) -> None:
    flow = SuperAdminLoginFlow(SuperAdminAPI(console.api), console.session, console.router)
    if not await flow.login(args.email, _password(args)):
        raise PermissionError(flow.error)
    print(f"Signed in as super admin {console.session.super_admin.identity.name}")


async def cmd_platform(console: Console, args: argparse.Namespace) -> None:
    console.router.push(SUPER_ADMIN_DASHBOARD)
    console.require(super_admin_guard(console.session, console.router))
    view = SuperAdminConsole(SuperAdminAPI(console.api))
    stats = await view.load_stats()
    if stats is not None:
        print(
            f"Companies: {stats.total_companies} ({stats.active_companies} active)  "
            f"Jobs: {stats.total_jobs} ({stats.open_jobs} open)  "
            f"Applications: {stats.total_applications} "
            f"({stats.pending_applications} pending, {stats.shortlisted_applications} shortlisted)  "
            f"Admins: {stats.total_admins}"
        )
    if args.companies:
        for company in await view.load_companies():
            print(
                f"{company.id}  {company.company_name}  [{company.subscription_status}] "
                f"jobs={company.job_count} applications={company.application_count}"
            )
        return
    view.logs.filters = ActivityLogFilters(company_id=args.company)
    await view.logs.refresh()
    _print_logs(view.logs.items)


def _print_logs(logs: list[ActivityLog]) -> None:
    if not logs:
        print("No activity")
    for log in logs:
        print(f"{log.created_at[:19]}  {action_icon(log.action_type)} {log.action_type}: {log.description}")


COMMANDS = {
    "login": cmd_login,
    "register": cmd_register,
    "logout": cmd_logout,
    "whoami": cmd_whoami,
    "dashboard": cmd_dashboard,
    "embed": cmd_embed,
    "embed-code": cmd_embed_code,
    "jobs": cmd_jobs,
    "job-create": cmd_job_create,
    "job-edit": cmd_job_edit,
    "applications": cmd_applications,
    "shortlist": cmd_review,
    "reject": cmd_review,
    "add-candidate": cmd_add_candidate,
    "notes": cmd_notes,
    "candidates": cmd_candidates,
    "talent-pool": cmd_talent_pool,
    "logs": cmd_logs,
    "board": cmd_board,
    "apply": cmd_apply,
    "status": cmd_status,
    "super-login": cmd_super_login,
    "platform": cmd_platform,
}


async def run(
    settings: Settings,
    args: argparse.Namespace,
    storage: Storage,
    transport: httpx.AsyncBaseTransport | None = None,
) -> None:
    confirm = always_confirm if args.yes else ask
    console = Console(settings, storage, confirm, transport)
    console.toasts.subscribe(ToastPrinter())
    try:
        await COMMANDS[args.command](console, args)
    finally:
        await console.aclose()


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = Settings.load(args.config)
    except ValueError as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"[{settings.mode_banner()}] {settings.api.base_url}")
    storage = SqliteStorage.open(settings.storage.path)
    try:
        asyncio.run(run(settings, args, storage))
    except (ApiError, PermissionError, FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        storage.close()


if __name__ == "__main__":
    main()
