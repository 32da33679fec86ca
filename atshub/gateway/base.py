"""Abstract base class for the remote data gateway and its error type."""

from abc import ABC, abstractmethod
from types import TracebackType

from atshub.core.schemas import (
    ActiveUser,
    Application,
    ApplicationDetail,
    AvailableUser,
    Candidate,
    CandidateInterviews,
    CvFileInfo,
    InterviewRecord,
    Job,
    JobDashboardItem,
    ParsedCvData,
    PipelineStats,
    SetupStatus,
    UpcomingInterview,
)


class GatewayError(Exception):
    """A remote call was rejected or could not be completed.

    ``message`` is the server-supplied text when the platform sent one.
    """

    def __init__(self, message: str | None = None, *, status: int | None = None) -> None:
        super().__init__(message or "remote call failed")
        self.message = message
        self.status = status


def error_message(error: Exception, fallback: str) -> str:
    """Server message for a gateway failure, else the caller's fallback text."""
    if isinstance(error, GatewayError) and error.message:
        return error.message
    return fallback


class Gateway(ABC):
    """Every read and write the ATS views perform against the host platform.

    Implementations raise ``GatewayError`` for any rejection. All business
    rules (validation, stage rules, persistence) live behind this boundary.
    """

    @property
    @abstractmethod
    def gateway_id(self) -> str:
        """Unique identifier for this gateway (e.g. 'apex')."""

    async def aclose(self) -> None:
        """Release transport resources. Default: nothing to release."""

    async def __aenter__(self) -> "Gateway":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    # --- Jobs & dashboard ---

    @abstractmethod
    async def get_job_dashboard(self) -> list[JobDashboardItem]:
        """Open jobs with stage counts and interviews this week."""

    @abstractmethod
    async def get_open_jobs(self) -> list[Job]: ...

    @abstractmethod
    async def save_job(self, job: Job) -> None:
        """Create (no id) or update (id present) a job."""

    @abstractmethod
    async def close_job(self, job_id: str) -> None: ...

    # --- CV intake & candidates ---

    @abstractmethod
    async def parse_cv(self, base64_pdf: str) -> ParsedCvData:
        """Run the external CV parser on a base64-encoded PDF."""

    @abstractmethod
    async def create_candidate_with_application(
        self,
        parsed: ParsedCvData,
        job_id: str | None,
        source: str,
        base64_pdf: str | None,
        file_name: str,
    ) -> str:
        """Create a candidate, and an application when ``job_id`` is given.

        Returns the new candidate (contact) id.
        """

    @abstractmethod
    async def get_candidates(self, search_term: str) -> list[Candidate]: ...

    @abstractmethod
    async def assign_candidate_to_job(self, contact_id: str, job_id: str, source: str) -> None: ...

    @abstractmethod
    async def get_interviews_by_candidate(self, contact_id: str) -> CandidateInterviews: ...

    # --- Pipeline ---

    @abstractmethod
    async def get_applications_by_job(self, job_id: str) -> list[Application]: ...

    @abstractmethod
    async def get_pipeline_stats(self, job_id: str) -> PipelineStats: ...

    @abstractmethod
    async def update_application_stage(self, application_id: str, new_stage: str) -> None:
        """Move an application; transition legality is the server's concern."""

    @abstractmethod
    async def get_application_detail(self, application_id: str) -> ApplicationDetail: ...

    @abstractmethod
    async def update_application_rating(self, application_id: str, rating: int) -> None: ...

    # --- Interviews ---

    @abstractmethod
    async def get_interview(self, interview_id: str) -> InterviewRecord: ...

    @abstractmethod
    async def save_interview(self, payload: dict[str, object]) -> None:
        """Create (no ``Id``) or update an interview from its wire payload."""

    @abstractmethod
    async def delete_interview(self, interview_id: str) -> None: ...

    @abstractmethod
    async def get_upcoming_interviews(self) -> list[UpcomingInterview]: ...

    @abstractmethod
    async def get_active_users(self) -> list[ActiveUser]: ...

    # --- Setup ---

    @abstractmethod
    async def get_setup_status(self) -> SetupStatus: ...

    @abstractmethod
    async def save_api_settings(self, api_key: str, endpoint: str, model: str) -> None: ...

    @abstractmethod
    async def test_api_connection(self) -> str:
        """Returns ``"SUCCESS"`` or a diagnostic message."""

    @abstractmethod
    async def get_available_users(self) -> list[AvailableUser]: ...

    @abstractmethod
    async def assign_permission_set(self, user_ids: list[str]) -> None: ...

    @abstractmethod
    async def remove_permission_set(self, user_id: str) -> None: ...

    # --- Stored CV files ---

    @abstractmethod
    async def get_latest_cv_file(self, contact_id: str) -> CvFileInfo | None: ...

    @abstractmethod
    async def parse_cv_for_contact(self, contact_id: str) -> ParsedCvData: ...

    @abstractmethod
    async def save_parsed_data_to_contact(self, contact_id: str, parsed: ParsedCvData) -> None: ...
