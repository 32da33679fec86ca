"""Apex REST gateway: each operation is a POST to a controller method endpoint."""

import json
import logging
import os
from typing import Any

import httpx

from atshub.core.config import GatewayConfig
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
from atshub.gateway.base import Gateway, GatewayError

logger = logging.getLogger(__name__)

_APPLICATIONS = "ApplicationController"
_HUB = "ATSHubController"
_SETUP = "ATSSetupController"
_CV_FILES = "CVFileController"


class ApexRestGateway(Gateway):
    """Gateway backed by Apex REST endpoints on the host platform.

    Requests go to ``{instance_url}/services/apexrest/{namespace}/{Controller}/{method}``
    with the method's named parameters as a JSON object. Record payloads the
    controllers expect as JSON text (``jobJson``, ``interviewJson``,
    ``parsedDataJson``) are serialized before sending.
    """

    def __init__(
        self,
        instance_url: str,
        token: str,
        *,
        namespace: str = "ats",
        timeout_s: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=f"{instance_url.rstrip('/')}/services/apexrest/{namespace}",
            headers={"Authorization": f"Bearer {token}"},
            timeout=timeout_s,
            transport=transport,
        )

    @classmethod
    def from_config(cls, config: GatewayConfig) -> "ApexRestGateway":
        token = os.environ.get(config.token_env)
        if not token:
            msg = f"{config.token_env} environment variable is required"
            raise ValueError(msg)
        return cls(
            config.instance_url,
            token,
            namespace=config.api_namespace,
            timeout_s=config.timeout_s,
        )

    @property
    def gateway_id(self) -> str:
        return "apex"

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _call(self, controller: str, method: str, **params: Any) -> Any:
        logger.debug("Calling %s.%s", controller, method)
        try:
            response = await self._client.post(f"/{controller}/{method}", json=params)
        except httpx.HTTPError as e:
            logger.warning("Transport failure calling %s.%s: %s", controller, method, e)
            raise GatewayError(None) from e

        if response.is_error:
            message = _extract_message(response)
            logger.info(
                "%s.%s rejected (%d): %s", controller, method, response.status_code, message,
            )
            raise GatewayError(message, status=response.status_code)

        if not response.content:
            return None
        return response.json()

    # --- Jobs & dashboard ---

    async def get_job_dashboard(self) -> list[JobDashboardItem]:
        data = await self._call(_APPLICATIONS, "getJobDashboard")
        return [JobDashboardItem.model_validate(d) for d in data or []]

    async def get_open_jobs(self) -> list[Job]:
        data = await self._call(_HUB, "getOpenJobs")
        return [Job.model_validate(d) for d in data or []]

    async def save_job(self, job: Job) -> None:
        await self._call(_HUB, "saveJob", jobJson=json.dumps(job.to_payload()))

    async def close_job(self, job_id: str) -> None:
        await self._call(_HUB, "closeJob", jobId=job_id)

    # --- CV intake & candidates ---

    async def parse_cv(self, base64_pdf: str) -> ParsedCvData:
        data = await self._call(_HUB, "parseCvFromUpload", base64Pdf=base64_pdf)
        return ParsedCvData.model_validate(data or {})

    async def create_candidate_with_application(
        self,
        parsed: ParsedCvData,
        job_id: str | None,
        source: str,
        base64_pdf: str | None,
        file_name: str,
    ) -> str:
        data = await self._call(
            _HUB,
            "createCandidateWithApplication",
            parsedDataJson=json.dumps(parsed.to_payload()),
            jobId=job_id,
            source=source,
            base64Pdf=base64_pdf,
            fileName=file_name,
        )
        return str(data)

    async def get_candidates(self, search_term: str) -> list[Candidate]:
        data = await self._call(_HUB, "getCandidates", searchTerm=search_term)
        return [Candidate.model_validate(d) for d in data or []]

    async def assign_candidate_to_job(self, contact_id: str, job_id: str, source: str) -> None:
        await self._call(
            _HUB, "assignCandidateToJob", contactId=contact_id, jobId=job_id, source=source,
        )

    async def get_interviews_by_candidate(self, contact_id: str) -> CandidateInterviews:
        data = await self._call(_HUB, "getInterviewsByCandidate", contactId=contact_id)
        return CandidateInterviews.model_validate(data or {})

    # --- Pipeline ---

    async def get_applications_by_job(self, job_id: str) -> list[Application]:
        data = await self._call(_APPLICATIONS, "getApplicationsByJob", jobId=job_id)
        return [Application.model_validate(d) for d in data or []]

    async def get_pipeline_stats(self, job_id: str) -> PipelineStats:
        data = await self._call(_APPLICATIONS, "getPipelineStats", jobId=job_id)
        return PipelineStats.model_validate(data or {})

    async def update_application_stage(self, application_id: str, new_stage: str) -> None:
        await self._call(
            _APPLICATIONS, "updateApplicationStage",
            applicationId=application_id, newStage=new_stage,
        )

    async def get_application_detail(self, application_id: str) -> ApplicationDetail:
        data = await self._call(_HUB, "getApplicationDetail", applicationId=application_id)
        return ApplicationDetail.model_validate(data)

    async def update_application_rating(self, application_id: str, rating: int) -> None:
        await self._call(
            _HUB, "updateApplicationRating", applicationId=application_id, rating=rating,
        )

    # --- Interviews ---

    async def get_interview(self, interview_id: str) -> InterviewRecord:
        data = await self._call(_HUB, "getInterview", interviewId=interview_id)
        return InterviewRecord.model_validate(data)

    async def save_interview(self, payload: dict[str, object]) -> None:
        await self._call(_HUB, "saveInterview", interviewJson=json.dumps(payload))

    async def delete_interview(self, interview_id: str) -> None:
        await self._call(_HUB, "deleteInterview", interviewId=interview_id)

    async def get_upcoming_interviews(self) -> list[UpcomingInterview]:
        data = await self._call(_HUB, "getUpcomingInterviews")
        return [UpcomingInterview.model_validate(d) for d in data or []]

    async def get_active_users(self) -> list[ActiveUser]:
        data = await self._call(_HUB, "getActiveUsers")
        return [ActiveUser.model_validate(d) for d in data or []]

    # --- Setup ---

    async def get_setup_status(self) -> SetupStatus:
        data = await self._call(_SETUP, "getSetupStatus")
        return SetupStatus.model_validate(data or {})

    async def save_api_settings(self, api_key: str, endpoint: str, model: str) -> None:
        await self._call(_SETUP, "saveApiSettings", apiKey=api_key, endpoint=endpoint, model=model)

    async def test_api_connection(self) -> str:
        data = await self._call(_SETUP, "testApiConnection")
        return str(data or "")

    async def get_available_users(self) -> list[AvailableUser]:
        data = await self._call(_SETUP, "getAvailableUsers")
        return [AvailableUser.model_validate(d) for d in data or []]

    async def assign_permission_set(self, user_ids: list[str]) -> None:
        await self._call(_SETUP, "assignPermissionSetToUsers", userIds=user_ids)

    async def remove_permission_set(self, user_id: str) -> None:
        await self._call(_SETUP, "removePermissionSetFromUser", userId=user_id)

    # --- Stored CV files ---

    async def get_latest_cv_file(self, contact_id: str) -> CvFileInfo | None:
        data = await self._call(_CV_FILES, "getLatestCvFile", recordId=contact_id)
        if not data:
            return None
        return CvFileInfo.model_validate(data)

    async def parse_cv_for_contact(self, contact_id: str) -> ParsedCvData:
        data = await self._call(_CV_FILES, "parseCvForContact", contactId=contact_id)
        return ParsedCvData.model_validate(data or {})

    async def save_parsed_data_to_contact(self, contact_id: str, parsed: ParsedCvData) -> None:
        await self._call(
            _CV_FILES, "saveParsedDataToContact",
            contactId=contact_id, parsedDataJson=json.dumps(parsed.to_payload()),
        )


def _extract_message(response: httpx.Response) -> str | None:
    """Pull the platform's error text out of a failed response, if present.

    The platform answers either ``[{"message": ..., "errorCode": ...}]`` or
    ``{"message": ...}``.
    """
    try:
        data = response.json()
    except ValueError:
        return None
    if isinstance(data, list) and data and isinstance(data[0], dict):
        data = data[0]
    if isinstance(data, dict):
        message = data.get("message")
        return str(message) if message else None
    return None
