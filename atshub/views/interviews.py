"""Interview workflow: one shared form entered from three places.

The form is opened from the pipeline detail panel, the candidate detail panel
or an upcoming-interview card on the dashboard. The context tag picked when it
opens decides the defaults and which list is reloaded after a save. Every
successful write also refreshes the dashboard's upcoming-interview aggregate.
"""

import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field, field_validator

from atshub.core.schemas import CandidateApplication, InterviewRecord, UpcomingInterview
from atshub.gateway.base import Gateway, GatewayError, error_message
from atshub.ui.channels import ERROR, SUCCESS, WARNING, Notifier
from atshub.views.presenters import to_edit_field

logger = logging.getLogger(__name__)

Refresh = Callable[[], Awaitable[None]]

DEFAULT_INTERVIEW_TYPE = "Video Call"
DEFAULT_DURATION_MINUTES = 60


class FormContext(str, Enum):
    PIPELINE = "pipeline"
    CANDIDATE = "candidate"
    UPCOMING = "upcoming"


class InterviewSource(Protocol):
    """A detail panel whose interview list the form can edit and reload."""

    @property
    def is_open(self) -> bool: ...

    @property
    def interviews(self) -> list[InterviewRecord]: ...

    async def reload(self) -> None: ...


class PipelineSource(InterviewSource, Protocol):
    @property
    def application_id(self) -> str: ...


class CandidateSource(InterviewSource, Protocol):
    @property
    def applications(self) -> list[CandidateApplication]: ...


class InterviewForm(BaseModel):
    """Editable interview fields; ``scheduled_date`` uses the ``YYYY-MM-DDTHH:MM`` form."""

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    id: str | None = Field(default=None, alias="Id")
    application_id: str = Field(default="", alias="Application__c")
    interview_type: str = Field(default="", alias="Interview_Type__c")
    scheduled_date: str = Field(default="", alias="Scheduled_Date__c")
    status: str = Field(default="Scheduled", alias="Status__c")
    round: int | None = Field(default=1, alias="Round__c")
    duration_minutes: int | None = Field(default=DEFAULT_DURATION_MINUTES, alias="Duration_Minutes__c")
    location: str = Field(default="", alias="Location__c")
    notes: str = Field(default="", alias="Notes__c")
    interviewer_id: str = Field(default="", alias="Interviewer__c")
    interviewer2_id: str = Field(default="", alias="Interviewer_2__c")

    @field_validator("round", "duration_minutes", mode="before")
    @classmethod
    def blank_number_is_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def is_new(self) -> bool:
        return not self.id

    @classmethod
    def from_record(cls, interview: InterviewRecord, application_id: str = "") -> "InterviewForm":
        return cls(
            id=interview.id,
            application_id=interview.application_id or application_id,
            interview_type=interview.interview_type,
            scheduled_date=to_edit_field(interview.scheduled_date),
            status=interview.status or "Scheduled",
            round=interview.round or 1,
            duration_minutes=interview.duration_minutes or DEFAULT_DURATION_MINUTES,
            location=interview.location,
            notes=interview.notes,
            interviewer_id=interview.interviewer_id,
            interviewer2_id=interview.interviewer2_id,
        )

    def to_payload(self) -> dict[str, object]:
        """Wire payload for ``save_interview``; no ``Id`` means create."""
        payload = self.model_dump(by_alias=True)
        if not self.id:
            payload.pop("Id")
        return payload


class ActiveForm(BaseModel):
    """The open form, tagged with the context that opened it."""

    context: FormContext
    form: InterviewForm
    job_title: str = ""


class InterviewWorkflow:
    """Create, edit and delete interviews through one shared form."""

    def __init__(
        self,
        gateway: Gateway,
        notifier: Notifier,
        *,
        pipeline: PipelineSource,
        candidate: CandidateSource,
        on_upcoming_changed: Refresh,
    ) -> None:
        self._gateway = gateway
        self._notifier = notifier
        self._pipeline = pipeline
        self._candidate = candidate
        self._on_upcoming_changed = on_upcoming_changed
        self.active: ActiveForm | None = None
        self.saving = False
        self.upcoming_overlay_open = False
        self._after_save: dict[FormContext, Refresh] = {
            FormContext.PIPELINE: pipeline.reload,
            FormContext.CANDIDATE: candidate.reload,
            FormContext.UPCOMING: self._dismiss_upcoming_overlay,
        }

    @property
    def is_open(self) -> bool:
        return self.active is not None

    @property
    def is_save_disabled(self) -> bool:
        if self.saving or self.active is None:
            return True
        form = self.active.form
        return not (form.interview_type and form.scheduled_date and form.round)

    # --- Opening the form ---

    def new_for_pipeline(self) -> InterviewForm:
        form = InterviewForm(
            application_id=self._pipeline.application_id,
            interview_type=DEFAULT_INTERVIEW_TYPE,
            status="Completed",
            round=len(self._pipeline.interviews) + 1,
        )
        self.active = ActiveForm(context=FormContext.PIPELINE, form=form)
        return form

    def new_for_candidate(self) -> InterviewForm:
        apps = self._candidate.applications
        form = InterviewForm(
            application_id=apps[0].application_id if apps else "",
            interview_type=DEFAULT_INTERVIEW_TYPE,
            status="Scheduled",
            round=len(self._candidate.interviews) + 1,
        )
        self.active = ActiveForm(context=FormContext.CANDIDATE, form=form)
        return form

    def open_upcoming(self, interview: UpcomingInterview) -> InterviewForm:
        form = InterviewForm.from_record(interview)
        self.active = ActiveForm(
            context=FormContext.UPCOMING, form=form, job_title=interview.job_title,
        )
        self.upcoming_overlay_open = True
        return form

    def edit(self, interview_id: str) -> InterviewForm | None:
        """Open an existing interview from whichever open panel lists it.

        The pipeline detail panel is searched before the candidate panel.
        """
        candidates: list[tuple[FormContext, InterviewSource]] = [
            (FormContext.PIPELINE, self._pipeline),
            (FormContext.CANDIDATE, self._candidate),
        ]
        for context, source in candidates:
            if not source.is_open:
                continue
            found = next((iv for iv in source.interviews if iv.id == interview_id), None)
            if found is None:
                continue
            fallback_app = (
                self._pipeline.application_id if context is FormContext.PIPELINE else ""
            )
            form = InterviewForm.from_record(found, fallback_app)
            self.active = ActiveForm(context=context, form=form, job_title=found.job_title)
            return form
        logger.debug("Interview %s not found in any open panel", interview_id)
        return None

    def update_field(self, field: str, value: Any) -> None:
        if self.active is None:
            return
        setattr(self.active.form, field, value)

    def cancel(self) -> None:
        self.active = None

    def close_upcoming(self) -> None:
        self.upcoming_overlay_open = False
        self.active = None

    async def _dismiss_upcoming_overlay(self) -> None:
        self.upcoming_overlay_open = False

    # --- Writes ---

    def _validate(self, form: InterviewForm) -> str | None:
        if not form.interview_type or not form.scheduled_date:
            return "Interview type and date are required."
        if not form.application_id:
            return "Please select a job/application."
        return None

    async def save(self) -> bool:
        """Submit the open form. Returns True when the gateway accepted it.

        On rejection the form stays open with its values for a retry.
        """
        if self.active is None:
            return False
        active = self.active
        problem = self._validate(active.form)
        if problem:
            self._notifier.notify("Missing Information", problem, WARNING)
            return False

        self.saving = True
        try:
            await self._gateway.save_interview(active.form.to_payload())
        except GatewayError as e:
            logger.warning("Interview save rejected (%s)", active.context.value)
            self._notifier.notify("Error", error_message(e, "Failed to save interview."), ERROR)
            return False
        finally:
            self.saving = False

        self._notifier.notify(
            "Interview Saved",
            f"{active.form.interview_type} interview saved successfully.",
            SUCCESS,
        )
        self.active = None
        await self._after_save[active.context]()
        await self._on_upcoming_changed()
        return True

    async def delete(self, interview_id: str) -> bool:
        try:
            await self._gateway.delete_interview(interview_id)
        except GatewayError as e:
            logger.warning("Interview delete rejected for %s", interview_id)
            self._notifier.notify("Error", error_message(e, "Failed to delete interview."), ERROR)
            return False

        self._notifier.notify("Deleted", "Interview has been deleted.", SUCCESS)
        # Both panels are checked; either or both may be open.
        if self._pipeline.is_open:
            await self._pipeline.reload()
        if self._candidate.is_open:
            await self._candidate.reload()
        await self._on_upcoming_changed()
        return True
