"""New-candidate intake: CV upload, remote parse, review, create."""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from atshub.core.documents import CvDocument, format_file_size, is_pdf
from atshub.core.schemas import Job, ParsedCvData
from atshub.gateway.base import Gateway, GatewayError, error_message
from atshub.ui.channels import ERROR, SUCCESS, WARNING, Navigator, Notifier
from atshub.views.presenters import Option, job_options

logger = logging.getLogger(__name__)

Refresh = Callable[[], Awaitable[None]]


async def _nothing() -> None:
    return None


class NewCandidateIntake:
    """State of the "New Candidate" tab.

    Parsed data lives only here until ``create`` persists it or ``reset``
    discards it.
    """

    def __init__(
        self,
        gateway: Gateway,
        notifier: Notifier,
        navigator: Navigator,
        *,
        on_created: Refresh = _nothing,
        default_source: str = "LinkedIn",
    ) -> None:
        self._gateway = gateway
        self._notifier = notifier
        self._navigator = navigator
        self._on_created = on_created
        self._default_source = default_source
        self.document: CvDocument | None = None
        self.parsed: ParsedCvData | None = None
        self.selected_job_id = ""
        self.selected_source = default_source
        self.parsing = False
        self.creating = False
        self.parse_success = False
        self.parse_error = False
        self.error_message = ""
        self.create_success = False
        self.created_contact_id: str | None = None

    # --- Derived state ---

    @property
    def file_ready(self) -> bool:
        return self.document is not None

    @property
    def show_parsed_data(self) -> bool:
        return self.parsed is not None

    @property
    def is_parse_disabled(self) -> bool:
        return not self.file_ready or self.parsing

    @property
    def is_create_disabled(self) -> bool:
        return not self.show_parsed_data or self.creating

    @property
    def parse_button_label(self) -> str:
        return "Parsing..." if self.parsing else "Parse CV"

    @property
    def create_button_label(self) -> str:
        return "Creating..." if self.creating else "Create Candidate"

    @property
    def file_size_label(self) -> str:
        return format_file_size(self.document.size_bytes) if self.document else ""

    def job_options(self, open_jobs: list[Job]) -> list[Option]:
        return job_options(open_jobs, "-- No job (talent pool) --")

    # --- Handlers ---

    def _clear_results(self) -> None:
        self.parsed = None
        self.parse_success = False
        self.parse_error = False
        self.create_success = False

    def accept_document(self, document: CvDocument) -> bool:
        """Take a chosen or dropped file. Non-PDF files are refused."""
        if not is_pdf(document.file_name, document.content_type):
            self._notifier.notify("Error", "Please upload a PDF file.", ERROR)
            return False
        self._clear_results()
        self.document = document
        logger.debug("Accepted %s (%d bytes)", document.file_name, document.size_bytes)
        return True

    async def parse(self) -> bool:
        if self.document is None:
            return False
        self.parsing = True
        self.parse_success = False
        self.parse_error = False
        self.error_message = ""
        try:
            self.parsed = await self._gateway.parse_cv(self.document.base64_data)
            self.parse_success = True
            return True
        except GatewayError as e:
            logger.warning("CV parse failed for %s", self.document.file_name)
            self.parse_error = True
            self.error_message = error_message(e, "An unexpected error occurred.")
            return False
        finally:
            self.parsing = False

    def update_field(self, field: str, value: Any) -> None:
        if self.parsed is not None:
            self.parsed = self.parsed.with_field(field, value)

    async def create(self) -> str | None:
        if self.parsed is None:
            return None
        if not self.parsed.first_name or not self.parsed.last_name:
            self._notifier.notify(
                "Missing Information", "First name and last name are required.", WARNING,
            )
            return None

        self.creating = True
        try:
            contact_id = await self._gateway.create_candidate_with_application(
                self.parsed,
                self.selected_job_id or None,
                self.selected_source,
                self.document.base64_data if self.document else None,
                self.document.file_name if self.document else "",
            )
        except GatewayError as e:
            self._notifier.notify("Error", error_message(e, "Failed to create candidate."), ERROR)
            return None
        finally:
            self.creating = False

        self.create_success = True
        self.created_contact_id = contact_id
        self._notifier.notify(
            "Candidate Created",
            f"{self.parsed.first_name} {self.parsed.last_name} has been added successfully.",
            SUCCESS,
        )
        await self._on_created()
        return contact_id

    def reset(self) -> None:
        self._clear_results()
        self.document = None
        self.created_contact_id = None
        self.selected_job_id = ""
        self.selected_source = self._default_source

    def view_contact(self) -> None:
        if self.created_contact_id:
            self._navigator.open_record(self.created_contact_id, "Contact")
