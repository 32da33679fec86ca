"""Candidate directory (debounced, stale-safe search) and candidate detail panel."""

import logging
from collections.abc import Awaitable, Callable

from atshub.core.config import ViewConfig
from atshub.core.schemas import CandidateApplication, InterviewRecord
from atshub.core.sequencing import Debouncer, RequestGuard
from atshub.gateway.base import Gateway, GatewayError, error_message
from atshub.ui.channels import ERROR, SUCCESS, Navigator, Notifier
from atshub.views.presenters import (
    CandidateRow,
    InterviewRow,
    Option,
    application_options,
    candidate_row,
    interview_row,
)

logger = logging.getLogger(__name__)

Refresh = Callable[[], Awaitable[None]]


async def _nothing() -> None:
    return None


class CandidateDirectory:
    """Searchable candidate list.

    Keystrokes go through ``set_search_term``; the fetch runs once typing has
    paused. Each fetch is tagged, and only the most recently dispatched one may
    touch the list, whatever order responses arrive in.
    """

    def __init__(self, gateway: Gateway, notifier: Notifier, config: ViewConfig | None = None) -> None:
        self._gateway = gateway
        self._notifier = notifier
        self._config = config or ViewConfig()
        self._guard = RequestGuard()
        self._debouncer = Debouncer(self._config.search_debounce_s, self.load)
        self.search_term = ""
        self.rows: list[CandidateRow] = []
        self.loading = False
        self.loaded = False

    @property
    def has_candidates(self) -> bool:
        return bool(self.rows)

    @property
    def count_label(self) -> str:
        count = len(self.rows)
        return f"{count} candidate{'' if count == 1 else 's'}"

    @property
    def empty_message(self) -> str:
        if self.search_term:
            return "No candidates match your search. Try a different term."
        return "No candidates have been added yet. Upload a CV to get started."

    def find(self, contact_id: str) -> CandidateRow | None:
        return next((r for r in self.rows if r.candidate.contact_id == contact_id), None)

    def set_search_term(self, term: str) -> None:
        self.search_term = term
        self._debouncer.trigger()

    async def settle(self) -> None:
        """Wait for a debounced search that is still pending."""
        await self._debouncer.wait()

    async def load(self) -> None:
        token = self._guard.issue()
        self.loading = True
        try:
            result = await self._gateway.get_candidates(self.search_term)
            if not self._guard.is_current(token):
                logger.debug("Discarding stale candidate search #%d", token)
                return
            self.rows = [candidate_row(c, self._config.max_skill_tags) for c in result]
            self.loaded = True
        except GatewayError as e:
            if not self._guard.is_current(token):
                return
            logger.error("Failed to load candidates", exc_info=True)
            self._notifier.notify("Error", error_message(e, "Failed to load candidates."), ERROR)
        finally:
            if self._guard.is_current(token):
                self.loading = False


class CandidatePanel:
    """Detail overlay for one candidate: applications, interviews, job assignment."""

    def __init__(
        self,
        gateway: Gateway,
        notifier: Notifier,
        navigator: Navigator,
        directory: CandidateDirectory,
        *,
        job_title: Callable[[str], str | None] = lambda job_id: None,
        on_assigned: Refresh = _nothing,
        default_source: str = "LinkedIn",
    ) -> None:
        self._gateway = gateway
        self._notifier = notifier
        self._navigator = navigator
        self._directory = directory
        self._job_title = job_title
        self._on_assigned = on_assigned
        self._default_source = default_source
        self.is_open = False
        self.selected: CandidateRow | None = None
        self.applications: list[CandidateApplication] = []
        self.interview_rows: list[InterviewRow] = []
        self.interviews_loading = False
        self.assign_job_id = ""
        self.assign_source = default_source
        self.assigning = False

    @property
    def contact_id(self) -> str:
        return self.selected.candidate.contact_id if self.selected else ""

    @property
    def interviews(self) -> list[InterviewRecord]:
        return [row.interview for row in self.interview_rows]

    @property
    def interview_count(self) -> int:
        return len(self.interview_rows)

    @property
    def can_add_interview(self) -> bool:
        return bool(self.applications)

    @property
    def application_options(self) -> list[Option]:
        return application_options(self.applications)

    @property
    def is_assign_disabled(self) -> bool:
        return not self.assign_job_id or self.assigning

    @property
    def assign_button_label(self) -> str:
        return "Assigning..." if self.assigning else "Assign"

    async def open(self, contact_id: str) -> bool:
        row = self._directory.find(contact_id)
        if row is None:
            return False
        self.selected = row
        self.assign_job_id = ""
        self.assign_source = row.candidate.candidate_source or self._default_source
        self.is_open = True
        await self.reload()
        return True

    def close(self) -> None:
        self.is_open = False
        self.selected = None
        self.applications = []
        self.interview_rows = []

    async def reload(self) -> None:
        """Fetch the candidate's applications and interviews; failures are logged only."""
        if not self.contact_id:
            return
        self.interviews_loading = True
        try:
            data = await self._gateway.get_interviews_by_candidate(self.contact_id)
            self.applications = data.applications
            self.interview_rows = [interview_row(iv) for iv in data.interviews]
        except GatewayError:
            logger.error("Failed to load candidate interviews for %s", self.contact_id,
                         exc_info=True)
        finally:
            self.interviews_loading = False

    async def assign(self) -> bool:
        if not self.assign_job_id or not self.contact_id:
            return False
        contact_id = self.contact_id
        job_id = self.assign_job_id
        self.assigning = True
        try:
            await self._gateway.assign_candidate_to_job(contact_id, job_id, self.assign_source)
        except GatewayError as e:
            self._notifier.notify("Error", error_message(e, "Failed to assign candidate."), ERROR)
            return False
        else:
            label = self._job_title(job_id) or "job"
            name = self.selected.candidate.name if self.selected else ""
            self._notifier.notify("Assigned", f"{name} assigned to {label}", SUCCESS)
            self.assign_job_id = ""

            await self._directory.load()
            updated = self._directory.find(contact_id)
            if updated is not None:
                self.selected = updated
            await self.reload()
            await self._on_assigned()
            return True
        finally:
            self.assigning = False

    def view_record(self) -> None:
        if self.contact_id:
            self._navigator.open_record(self.contact_id, "Contact")
