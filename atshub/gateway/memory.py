"""In-memory gateway: a dictionary-backed stand-in for the host platform.

Used by the CLI demo mode and the integration tests. It keeps just enough
server-side behaviour for the views to be exercised end to end.
"""

import itertools
import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import PurePath

from atshub.core.config import GatewayConfig
from atshub.core.schemas import (
    KEEP_API_KEY,
    ActiveUser,
    Application,
    ApplicationDetail,
    AvailableUser,
    Candidate,
    CandidateApplication,
    CandidateInterviews,
    CvFileInfo,
    InterviewRecord,
    Job,
    JobDashboardItem,
    ParsedCvData,
    PipelineStats,
    SetupStatus,
    Stage,
    UpcomingInterview,
)
from atshub.gateway.base import Gateway, GatewayError

logger = logging.getLogger(__name__)

_STAGE_VALUES = {s.value for s in Stage}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryGateway(Gateway):
    """Gateway whose records live in process memory.

    ``parsed_cv`` is what the stand-in CV parser returns; when it is None,
    parsing fails the way an unconfigured parser would.
    """

    def __init__(
        self,
        *,
        users: list[ActiveUser] | None = None,
        parsed_cv: ParsedCvData | None = None,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._now = now
        self._ids = itertools.count(1)
        self.jobs: dict[str, Job] = {}
        self.candidates: dict[str, Candidate] = {}
        self.applications: dict[str, Application] = {}
        self.interviews: dict[str, InterviewRecord] = {}
        self.users: list[ActiveUser] = list(users or [])
        self.parsed_cv = parsed_cv
        self.setup = SetupStatus()
        self.cv_files: dict[str, CvFileInfo] = {}
        self._stage_since: dict[str, datetime] = {}
        self._applied_at: dict[str, datetime] = {}

    @classmethod
    def from_config(cls, config: GatewayConfig) -> "InMemoryGateway":
        return cls.sample()

    @classmethod
    def sample(cls) -> "InMemoryGateway":
        """A small seeded data set: two open jobs, three candidates, one interview."""
        gw = cls(
            users=[
                ActiveUser(user_id="005A", user_name="Maria Recruiter"),
                ActiveUser(user_id="005B", user_name="Tom Lead"),
            ],
        )
        backend = gw.add_job(Job(title="Backend Engineer", department="Engineering",
                                 location="Remote", priority="High"))
        gw.add_job(Job(title="Product Designer", department="Design", location="Lisbon"))
        ada = gw.add_candidate("Ada Lovelace", source="LinkedIn", skills="Python; SQL; Rust")
        grace = gw.add_candidate("Grace Hopper", source="Referral", skills="COBOL; Compilers")
        alan = gw.add_candidate("Alan Turing", source="Website", skills="Cryptography")
        gw.add_application(ada, backend, Stage.NEW, rating=3)
        screening = gw.add_application(grace, backend, Stage.SCREENING, rating=4)
        gw.add_application(alan, backend, Stage.HIRED, rating=5)
        gw._store_interview(InterviewRecord(
            id=gw._next_id("a0I"),
            application_id=screening,
            interview_type="Video Call",
            scheduled_date=gw._now() + timedelta(days=2),
            round=1,
            duration_minutes=45,
            interviewer_id="005A",
        ))
        return gw

    @property
    def gateway_id(self) -> str:
        return "memory"

    # --- Seeding helpers ---

    def _next_id(self, prefix: str) -> str:
        return f"{prefix}{next(self._ids):06d}"

    def add_job(self, job: Job) -> str:
        job_id = job.id or self._next_id("a01")
        self.jobs[job_id] = job.model_copy(update={"id": job_id})
        return job_id

    def add_candidate(self, name: str, *, source: str = "", skills: str = "",
                      languages: str = "", email: str = "") -> str:
        contact_id = self._next_id("003")
        self.candidates[contact_id] = Candidate(
            contact_id=contact_id,
            name=name,
            email=email,
            candidate_source=source,
            skills=skills,
            languages=languages,
            created_date=self._now(),
        )
        return contact_id

    def add_application(self, contact_id: str, job_id: str, stage: Stage = Stage.NEW,
                        *, rating: float | None = None) -> str:
        app_id = self._next_id("a02")
        self.applications[app_id] = Application(
            id=app_id,
            candidate_id=contact_id,
            candidate_name=self.candidates[contact_id].name,
            job_id=job_id,
            job_title=self.jobs[job_id].title,
            stage=stage.value,
            overall_rating=rating,
            email=self.candidates[contact_id].email,
        )
        self._stage_since[app_id] = self._now()
        self._applied_at[app_id] = self._now()
        return app_id

    def _job(self, job_id: str) -> Job:
        if job_id not in self.jobs:
            raise GatewayError("Job not found.", status=404)
        return self.jobs[job_id]

    def _application(self, application_id: str) -> Application:
        if application_id not in self.applications:
            raise GatewayError("Application not found.", status=404)
        app = self.applications[application_id]
        days = (self._now() - self._stage_since[application_id]).total_seconds() / 86400
        return app.model_copy(update={"days_in_stage": days})

    def _user_name(self, user_id: str) -> str:
        return next((u.user_name for u in self.users if u.user_id == user_id), "")

    def _store_interview(self, interview: InterviewRecord) -> None:
        app = self.applications[interview.application_id]
        self.interviews[interview.id] = interview.model_copy(update={
            "job_title": app.job_title,
            "interviewer_name": self._user_name(interview.interviewer_id),
            "interviewer2_name": self._user_name(interview.interviewer2_id),
        })

    def _stats(self, job_id: str) -> PipelineStats:
        apps = [a for a in self.applications.values() if a.job_id == job_id]
        counts = {s: sum(1 for a in apps if a.stage == s.value) for s in Stage}
        return PipelineStats(
            total_new=counts[Stage.NEW],
            total_screening=counts[Stage.SCREENING],
            total_interview=counts[Stage.INTERVIEW],
            total_evaluation=counts[Stage.EVALUATION],
            total_offer=counts[Stage.OFFER],
            total_hired=counts[Stage.HIRED],
            total_active=len(apps) - counts[Stage.HIRED],
        )

    # --- Jobs & dashboard ---

    async def get_job_dashboard(self) -> list[JobDashboardItem]:
        now = self._now()
        week_start = (now - timedelta(days=now.weekday())).replace(
            hour=0, minute=0, second=0, microsecond=0,
        )
        week_end = week_start + timedelta(days=7)
        items = []
        for job in await self.get_open_jobs():
            job_id = job.id or ""
            this_week = sum(
                1 for iv in self.interviews.values()
                if self.applications[iv.application_id].job_id == job_id
                and iv.scheduled_date is not None
                and week_start <= iv.scheduled_date < week_end
            )
            items.append(JobDashboardItem(
                job=job, stats=self._stats(job_id), interviews_this_week=this_week,
            ))
        return items

    async def get_open_jobs(self) -> list[Job]:
        return [j for j in self.jobs.values() if j.status == "Open"]

    async def save_job(self, job: Job) -> None:
        if job.id:
            self._job(job.id)
            self.jobs[job.id] = job.model_copy()
        else:
            self.add_job(job)

    async def close_job(self, job_id: str) -> None:
        job = self._job(job_id)
        self.jobs[job_id] = job.model_copy(update={"status": "Closed"})

    # --- CV intake & candidates ---

    async def parse_cv(self, base64_pdf: str) -> ParsedCvData:
        if not base64_pdf:
            raise GatewayError("No document was provided.", status=400)
        if self.parsed_cv is None:
            raise GatewayError("CV parser is not configured.", status=503)
        return self.parsed_cv.model_copy(deep=True)

    async def create_candidate_with_application(
        self,
        parsed: ParsedCvData,
        job_id: str | None,
        source: str,
        base64_pdf: str | None,
        file_name: str,
    ) -> str:
        if job_id:
            self._job(job_id)
        contact_id = self.add_candidate(
            f"{parsed.first_name} {parsed.last_name}".strip(),
            source=source,
            skills="; ".join(parsed.skills),
            languages="; ".join(parsed.languages),
            email=parsed.email,
        )
        if job_id:
            self.add_application(contact_id, job_id)
        if base64_pdf and file_name:
            name = PurePath(file_name)
            self.cv_files[contact_id] = CvFileInfo(
                content_version_id=self._next_id("068"),
                title=name.stem,
                file_extension=name.suffix.lstrip(".") or "pdf",
            )
        return contact_id

    async def get_candidates(self, search_term: str) -> list[Candidate]:
        term = search_term.strip().lower()
        matches = []
        for c in self.candidates.values():
            haystack = f"{c.name} {c.email} {c.skills}".lower()
            if term and term not in haystack:
                continue
            count = sum(1 for a in self.applications.values() if a.candidate_id == c.contact_id)
            matches.append(c.model_copy(update={"application_count": count}))
        return sorted(matches, key=lambda c: c.created_date or self._now(), reverse=True)

    async def assign_candidate_to_job(self, contact_id: str, job_id: str, source: str) -> None:
        self._job(job_id)
        if contact_id not in self.candidates:
            raise GatewayError("Candidate not found.", status=404)
        if any(a.candidate_id == contact_id and a.job_id == job_id
               for a in self.applications.values()):
            raise GatewayError("Candidate already has an application for this job.", status=400)
        self.add_application(contact_id, job_id)

    async def get_interviews_by_candidate(self, contact_id: str) -> CandidateInterviews:
        apps = [a for a in self.applications.values() if a.candidate_id == contact_id]
        app_ids = {a.id for a in apps}
        return CandidateInterviews(
            applications=[
                CandidateApplication(application_id=a.id, job_title=a.job_title, stage=a.stage)
                for a in apps
            ],
            interviews=[iv for iv in self.interviews.values() if iv.application_id in app_ids],
        )

    # --- Pipeline ---

    async def get_applications_by_job(self, job_id: str) -> list[Application]:
        return [self._application(a.id) for a in self.applications.values() if a.job_id == job_id]

    async def get_pipeline_stats(self, job_id: str) -> PipelineStats:
        return self._stats(job_id)

    async def update_application_stage(self, application_id: str, new_stage: str) -> None:
        app = self._application(application_id)
        if new_stage not in _STAGE_VALUES:
            raise GatewayError(f"Invalid stage: {new_stage}", status=400)
        self.applications[application_id] = app.model_copy(update={"stage": new_stage})
        self._stage_since[application_id] = self._now()

    async def get_application_detail(self, application_id: str) -> ApplicationDetail:
        app = self._application(application_id)
        return ApplicationDetail(
            application_id=app.id,
            candidate_id=app.candidate_id,
            candidate_name=app.candidate_name,
            job_title=app.job_title,
            stage=app.stage,
            overall_rating=app.overall_rating,
            applied_date=self._applied_at[app.id],
            email=app.email,
            interviews=[iv for iv in self.interviews.values() if iv.application_id == app.id],
        )

    async def update_application_rating(self, application_id: str, rating: int) -> None:
        app = self._application(application_id)
        if not 0 <= rating <= 5:
            raise GatewayError("Rating must be between 0 and 5.", status=400)
        self.applications[application_id] = app.model_copy(update={"overall_rating": rating})

    # --- Interviews ---

    async def get_interview(self, interview_id: str) -> InterviewRecord:
        if interview_id not in self.interviews:
            raise GatewayError("Interview not found.", status=404)
        return self.interviews[interview_id]

    async def save_interview(self, payload: dict[str, object]) -> None:
        interview_id = str(payload.get("Id") or "") or self._next_id("a0I")
        application_id = str(payload.get("Application__c") or "")
        self._application(application_id)
        scheduled = str(payload.get("Scheduled_Date__c") or "")
        try:
            scheduled_date = (
                datetime.fromisoformat(scheduled).replace(tzinfo=timezone.utc)
                if scheduled else None
            )
        except ValueError as e:
            raise GatewayError(f"Invalid date: {scheduled}", status=400) from e
        round_no = payload.get("Round__c")
        duration = payload.get("Duration_Minutes__c")
        self._store_interview(InterviewRecord(
            id=interview_id,
            application_id=application_id,
            interview_type=str(payload.get("Interview_Type__c") or ""),
            scheduled_date=scheduled_date,
            status=str(payload.get("Status__c") or "Scheduled"),
            round=int(str(round_no)) if round_no else None,
            duration_minutes=int(str(duration)) if duration else None,
            location=str(payload.get("Location__c") or ""),
            notes=str(payload.get("Notes__c") or ""),
            interviewer_id=str(payload.get("Interviewer__c") or ""),
            interviewer2_id=str(payload.get("Interviewer_2__c") or ""),
        ))

    async def delete_interview(self, interview_id: str) -> None:
        if self.interviews.pop(interview_id, None) is None:
            raise GatewayError("Interview not found.", status=404)

    async def get_upcoming_interviews(self) -> list[UpcomingInterview]:
        now = self._now()
        upcoming = []
        for iv in self.interviews.values():
            if iv.status != "Scheduled" or iv.scheduled_date is None or iv.scheduled_date < now:
                continue
            app = self.applications[iv.application_id]
            upcoming.append(UpcomingInterview(
                **iv.model_dump(),
                candidate_name=app.candidate_name,
                candidate_id=app.candidate_id,
            ))
        return sorted(upcoming, key=lambda u: u.scheduled_date or now)

    async def get_active_users(self) -> list[ActiveUser]:
        return list(self.users)

    # --- Setup ---

    async def get_setup_status(self) -> SetupStatus:
        return self.setup.model_copy(update={
            "users_with_perm_set": len(self.setup.assigned_users),
        })

    async def save_api_settings(self, api_key: str, endpoint: str, model: str) -> None:
        update: dict[str, object] = {"api_endpoint": endpoint, "ai_model": model}
        if api_key != KEEP_API_KEY:
            update["api_key_configured"] = bool(api_key)
            update["masked_api_key"] = f"****{api_key[-4:]}" if api_key else "Not configured"
        self.setup = self.setup.model_copy(update=update)

    async def test_api_connection(self) -> str:
        if not self.setup.api_key_configured:
            return "API key is not configured."
        return "SUCCESS"

    async def get_available_users(self) -> list[AvailableUser]:
        assigned = {u.user_id for u in self.setup.assigned_users}
        return [
            AvailableUser(user_id=u.user_id, user_name=u.user_name)
            for u in self.users if u.user_id not in assigned
        ]

    async def assign_permission_set(self, user_ids: list[str]) -> None:
        known = {u.user_id: u for u in self.users}
        missing = [uid for uid in user_ids if uid not in known]
        if missing:
            raise GatewayError(f"Unknown users: {', '.join(missing)}", status=400)
        assigned = list(self.setup.assigned_users)
        assigned.extend(known[uid] for uid in user_ids if known[uid] not in assigned)
        self.setup = self.setup.model_copy(update={"assigned_users": assigned})

    async def remove_permission_set(self, user_id: str) -> None:
        remaining = [u for u in self.setup.assigned_users if u.user_id != user_id]
        self.setup = self.setup.model_copy(update={"assigned_users": remaining})

    # --- Stored CV files ---

    async def get_latest_cv_file(self, contact_id: str) -> CvFileInfo | None:
        return self.cv_files.get(contact_id)

    async def parse_cv_for_contact(self, contact_id: str) -> ParsedCvData:
        if contact_id not in self.cv_files:
            raise GatewayError("No CV file found for this contact.", status=404)
        return await self.parse_cv(self.cv_files[contact_id].content_version_id)

    async def save_parsed_data_to_contact(self, contact_id: str, parsed: ParsedCvData) -> None:
        if contact_id not in self.candidates:
            raise GatewayError("Candidate not found.", status=404)
        candidate = self.candidates[contact_id]
        self.candidates[contact_id] = candidate.model_copy(update={
            "name": f"{parsed.first_name} {parsed.last_name}".strip() or candidate.name,
            "email": parsed.email or candidate.email,
            "phone": parsed.phone or candidate.phone,
            "skills": "; ".join(parsed.skills),
            "languages": "; ".join(parsed.languages),
        })
        logger.debug("Saved parsed CV data to %s", contact_id)
