"""Mirrors of the remote-owned ATS records.

The gateway owns every record; these models are the client's transient copies.
Field aliases carry the platform's wire names (``Title__c``, ``candidateName``)
so Python code can stay snake_case.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Stage(str, Enum):
    """Hiring funnel stages, in display order."""

    NEW = "New"
    SCREENING = "Screening"
    INTERVIEW = "Interview"
    EVALUATION = "Evaluation"
    OFFER = "Offer"
    HIRED = "Hired"

    @property
    def color(self) -> str:
        return STAGE_COLORS[self]


STAGE_ORDER: tuple[Stage, ...] = tuple(Stage)

STAGE_COLORS: dict[Stage, str] = {
    Stage.NEW: "#0176d3",
    Stage.SCREENING: "#9050e9",
    Stage.INTERVIEW: "#dd7a01",
    Stage.EVALUATION: "#0d9dda",
    Stage.OFFER: "#2e844a",
    Stage.HIRED: "#2e844a",
}

SOURCE_OPTIONS = ("LinkedIn", "Website", "Referral", "Job Board", "Agency", "Other")
JOB_TYPE_OPTIONS = ("Full-time", "Part-time", "Contract", "Internship", "Freelance")
JOB_STATUS_OPTIONS = ("Open", "On Hold", "Closed")
PRIORITY_OPTIONS = ("Low", "Medium", "High", "Urgent")
INTERVIEW_TYPE_OPTIONS = (
    "Phone Screen",
    "Video Call",
    "On-site",
    "Technical",
    "Panel",
    "Culture Fit",
    "Final Round",
)
INTERVIEW_STATUS_OPTIONS = ("Scheduled", "Completed", "Cancelled", "No Show", "Rescheduled")

# Sent in place of an API key to leave the stored key unchanged.
KEEP_API_KEY = "___KEEP___"


class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Job(_Record):
    """A job opening. ``id`` is None until the gateway has created it."""

    id: str | None = Field(default=None, alias="Id")
    title: str = Field(default="", alias="Title__c")
    department: str = Field(default="", alias="Department__c")
    location: str = Field(default="", alias="Location__c")
    job_type: str = Field(default="Full-time", alias="Job_Type__c")
    status: str = Field(default="Open", alias="Status__c")
    priority: str = Field(default="Medium", alias="Priority__c")
    description: str = Field(default="", alias="Description__c")
    requirements: str = Field(default="", alias="Requirements__c")
    openings: int = Field(default=1, ge=0, alias="Number_of_Openings__c")
    salary_min: float | None = Field(default=None, alias="Salary_Min__c")
    salary_max: float | None = Field(default=None, alias="Salary_Max__c")

    def to_payload(self) -> dict[str, Any]:
        """Wire payload for ``save_job``; no ``Id`` means create."""
        payload = self.model_dump(by_alias=True)
        if not self.id:
            payload.pop("Id")
        return payload


class PipelineStats(_Record):
    """Per-stage application counts for one job."""

    total_new: int = Field(default=0, alias="totalNew")
    total_screening: int = Field(default=0, alias="totalScreening")
    total_interview: int = Field(default=0, alias="totalInterview")
    total_evaluation: int = Field(default=0, alias="totalEvaluation")
    total_offer: int = Field(default=0, alias="totalOffer")
    total_hired: int = Field(default=0, alias="totalHired")
    total_active: int = Field(default=0, alias="totalActive")

    def count_for(self, stage: Stage) -> int:
        return getattr(self, f"total_{stage.value.lower()}")


class JobDashboardItem(_Record):
    job: Job
    stats: PipelineStats = Field(default_factory=PipelineStats)
    interviews_this_week: int = Field(default=0, alias="interviewsThisWeek")


class Application(_Record):
    """A candidate's application to one job, sitting in exactly one stage."""

    id: str
    candidate_id: str = Field(default="", alias="candidateId")
    candidate_name: str = Field(default="", alias="candidateName")
    job_id: str = Field(default="", alias="jobId")
    job_title: str = Field(default="", alias="jobTitle")
    stage: str = Stage.NEW.value
    overall_rating: float | None = Field(default=None, alias="overallRating")
    days_in_stage: float | None = Field(default=None, alias="daysInStage")
    email: str = ""


class InterviewRecord(_Record):
    id: str
    application_id: str = Field(default="", alias="applicationId")
    job_title: str = Field(default="", alias="jobTitle")
    interview_type: str = Field(default="", alias="interviewType")
    scheduled_date: datetime | None = Field(default=None, alias="scheduledDate")
    status: str = "Scheduled"
    round: int | None = None
    duration_minutes: int | None = Field(default=None, alias="durationMinutes")
    location: str = ""
    notes: str = ""
    interviewer_id: str = Field(default="", alias="interviewerId")
    interviewer_name: str = Field(default="", alias="interviewerName")
    interviewer2_id: str = Field(default="", alias="interviewer2Id")
    interviewer2_name: str = Field(default="", alias="interviewer2Name")


class UpcomingInterview(InterviewRecord):
    """Interview with denormalized candidate name for the dashboard."""

    candidate_name: str = Field(default="", alias="candidateName")
    candidate_id: str = Field(default="", alias="candidateId")


class ApplicationDetail(_Record):
    application_id: str = Field(alias="applicationId")
    candidate_id: str = Field(default="", alias="candidateId")
    candidate_name: str = Field(default="", alias="candidateName")
    job_title: str = Field(default="", alias="jobTitle")
    stage: str = Stage.NEW.value
    overall_rating: float | None = Field(default=None, alias="overallRating")
    applied_date: datetime | None = Field(default=None, alias="appliedDate")
    email: str = ""
    phone: str = ""
    interviews: list[InterviewRecord] = Field(default_factory=list)


class Candidate(_Record):
    """A candidate (contact) as returned by the search endpoint.

    ``skills`` and ``languages`` arrive as ``"; "``-delimited text.
    """

    contact_id: str = Field(alias="contactId")
    name: str = ""
    email: str = ""
    phone: str = ""
    candidate_source: str = Field(default="", alias="candidateSource")
    skills: str = ""
    languages: str = ""
    created_date: datetime | None = Field(default=None, alias="createdDate")
    application_count: int = Field(default=0, alias="applicationCount")


class CandidateApplication(_Record):
    application_id: str = Field(alias="applicationId")
    job_title: str = Field(default="", alias="jobTitle")
    stage: str = Stage.NEW.value


class CandidateInterviews(_Record):
    applications: list[CandidateApplication] = Field(default_factory=list)
    interviews: list[InterviewRecord] = Field(default_factory=list)


class ParsedCvData(_Record):
    """Structured fields extracted from a CV by the remote parser.

    Held only in client memory until saved. Unknown parser fields are kept.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    first_name: str = Field(default="", alias="firstName")
    last_name: str = Field(default="", alias="lastName")
    email: str = ""
    phone: str = ""
    skills: list[str] = Field(default_factory=list)
    languages: list[str] = Field(default_factory=list)
    education: list[dict[str, Any]] = Field(default_factory=list)
    work_experience: list[dict[str, Any]] = Field(default_factory=list, alias="workExperience")

    def with_field(self, field: str, value: Any) -> "ParsedCvData":
        """Return a copy with one field replaced, addressed by its wire name."""
        data = self.model_dump(by_alias=True)
        data[field] = value
        return ParsedCvData.model_validate(data)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class ActiveUser(_Record):
    user_id: str = Field(alias="userId")
    user_name: str = Field(default="", alias="userName")


class AvailableUser(ActiveUser):
    profile_name: str = Field(default="", alias="profileName")


class SetupStatus(_Record):
    api_key_configured: bool = Field(default=False, alias="apiKeyConfigured")
    masked_api_key: str = Field(default="Not configured", alias="maskedApiKey")
    api_endpoint: str = Field(default="", alias="apiEndpoint")
    ai_model: str = Field(default="", alias="modelName")
    users_with_perm_set: int = Field(default=0, alias="usersWithPermSet")
    assigned_users: list[ActiveUser] = Field(default_factory=list, alias="assignedUsers")


class CvFileInfo(_Record):
    content_version_id: str = Field(alias="contentVersionId")
    title: str = Field(default="", alias="Title")
    file_extension: str = Field(default="pdf", alias="FileExtension")

    @property
    def file_name(self) -> str:
        return f"{self.title}.{self.file_extension}"
