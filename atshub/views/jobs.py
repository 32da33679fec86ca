"""Job editor: the create/edit job modal and the close-job action."""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from atshub.core.schemas import Job, JobDashboardItem
from atshub.gateway.base import Gateway, GatewayError, error_message
from atshub.ui.channels import ERROR, SUCCESS, WARNING, Notifier

logger = logging.getLogger(__name__)

Refresh = Callable[[], Awaitable[None]]


async def _nothing() -> None:
    return None


class JobEditor:
    def __init__(self, gateway: Gateway, notifier: Notifier, *, on_saved: Refresh = _nothing) -> None:
        self._gateway = gateway
        self._notifier = notifier
        self._on_saved = on_saved
        self.form: Job | None = None
        self.saving = False

    @property
    def is_open(self) -> bool:
        return self.form is not None

    @property
    def is_editing(self) -> bool:
        return bool(self.form and self.form.id)

    @property
    def title(self) -> str:
        return "Edit Job" if self.is_editing else "New Job"

    @property
    def save_button_label(self) -> str:
        if self.saving:
            return "Saving..."
        return "Update Job" if self.is_editing else "Create Job"

    @property
    def is_save_disabled(self) -> bool:
        return self.saving or not (self.form and self.form.title)

    def new(self) -> Job:
        self.form = Job()
        return self.form

    def edit(self, job_id: str, items: list[JobDashboardItem]) -> Job | None:
        item = next((i for i in items if i.job.id == job_id), None)
        if item is None:
            return None
        self.form = item.job.model_copy()
        return self.form

    def update_field(self, field: str, value: Any) -> None:
        if self.form is None:
            return
        self.form = Job.model_validate({**self.form.model_dump(), field: value})

    def close(self) -> None:
        self.form = None

    async def save(self) -> bool:
        if self.form is None:
            return False
        if not self.form.title:
            self._notifier.notify("Missing Information", "Job title is required.", WARNING)
            return False

        job = self.form
        editing = self.is_editing
        self.saving = True
        try:
            await self._gateway.save_job(job)
        except GatewayError as e:
            self._notifier.notify("Error", error_message(e, "Failed to save job."), ERROR)
            return False
        finally:
            self.saving = False

        verb = "updated" if editing else "created"
        self._notifier.notify(
            "Job Updated" if editing else "Job Created",
            f"{job.title} has been {verb} successfully.",
            SUCCESS,
        )
        self.form = None
        await self._on_saved()
        return True

    async def close_job(self, job_id: str, title: str = "") -> bool:
        """Terminal action: the job leaves the open-jobs list."""
        try:
            await self._gateway.close_job(job_id)
        except GatewayError as e:
            self._notifier.notify("Error", error_message(e, "Failed to close job."), ERROR)
            return False
        logger.info("Closed job %s", job_id)
        self._notifier.notify("Job Closed", f"{title or 'The job'} has been closed.", SUCCESS)
        await self._on_saved()
        return True
