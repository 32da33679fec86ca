"""ATS hub: wires every view controller to one gateway and one set of side channels."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from enum import Enum

from atshub.core.config import ViewConfig
from atshub.gateway.base import Gateway
from atshub.ui.channels import LoggingNavigator, LoggingNotifier, Navigator, Notifier
from atshub.views.board import ApplicationDetailPanel, PipelineBoard
from atshub.views.candidates import CandidateDirectory, CandidatePanel
from atshub.views.dashboard import DashboardView
from atshub.views.intake import NewCandidateIntake
from atshub.views.interviews import InterviewForm, InterviewWorkflow
from atshub.views.jobs import JobEditor

logger = logging.getLogger(__name__)


class Tab(str, Enum):
    DASHBOARD = "dashboard"
    NEW_CANDIDATE = "newCandidate"
    CANDIDATES = "candidates"
    PIPELINE = "pipeline"


class AtsHub:
    """Single-page hub with four tabs.

    Controllers never call each other directly for refreshes; every
    cross-view refresh is a callback wired here.
    """

    def __init__(
        self,
        gateway: Gateway,
        notifier: Notifier | None = None,
        navigator: Navigator | None = None,
        config: ViewConfig | None = None,
    ) -> None:
        self.gateway = gateway
        self.notifier = notifier or LoggingNotifier()
        self.navigator = navigator or LoggingNavigator()
        self.config = config or ViewConfig()

        self.active_tab = Tab.DASHBOARD
        self.global_loading = False
        self.global_loading_message = ""

        self.dashboard = DashboardView(gateway, self.config)
        self.board = PipelineBoard(
            gateway, self.notifier, on_stage_changed=self.dashboard.load_dashboard,
        )
        self.detail = ApplicationDetailPanel(
            gateway, self.notifier, self.navigator, on_rating_changed=self.board.reload,
        )
        self.directory = CandidateDirectory(gateway, self.notifier, self.config)
        self.candidate = CandidatePanel(
            gateway,
            self.notifier,
            self.navigator,
            self.directory,
            job_title=self.dashboard.job_title,
            on_assigned=self.dashboard.load_dashboard,
            default_source=self.config.default_source,
        )
        self.interviews = InterviewWorkflow(
            gateway,
            self.notifier,
            pipeline=self.detail,
            candidate=self.candidate,
            on_upcoming_changed=self.dashboard.load_upcoming,
        )
        self.intake = NewCandidateIntake(
            gateway,
            self.notifier,
            self.navigator,
            on_created=self.dashboard.refresh_jobs,
            default_source=self.config.default_source,
        )
        self.jobs = JobEditor(gateway, self.notifier, on_saved=self.dashboard.refresh_jobs)

    @asynccontextmanager
    async def page_wait(self, message: str = "") -> AsyncIterator[None]:
        """Show the page-wide loading overlay for the duration of the block."""
        self.global_loading = True
        self.global_loading_message = message
        try:
            yield
        finally:
            self.global_loading = False
            self.global_loading_message = ""

    async def start(self) -> None:
        async with self.page_wait("Loading ATS Hub..."):
            await self.dashboard.load_all()
        logger.info(
            "Hub ready: %d open jobs, %d upcoming interviews",
            self.dashboard.total_open_jobs, len(self.dashboard.upcoming),
        )

    # --- Tabs ---

    async def select_tab(self, tab: Tab | str) -> None:
        self.active_tab = Tab(tab)
        if self.active_tab is Tab.CANDIDATES and not self.directory.loaded:
            await self.directory.load()

    async def refresh_all(self) -> None:
        """Refresh every aggregate; the candidate list only once it has been loaded."""
        loads = [self.dashboard.refresh()]
        if self.directory.loaded:
            loads.append(self.directory.load())
        await asyncio.gather(*loads)

    # --- Cross-tab navigation ---

    async def open_job_pipeline(self, job_id: str) -> None:
        """A dashboard job card was clicked."""
        self.active_tab = Tab.PIPELINE
        await self.board.select_job(job_id)

    async def click_card(self, application_id: str) -> bool:
        """A pipeline card was clicked; a click that ends a drag is ignored."""
        if not self.board.consume_click():
            return False
        self.interviews.cancel()
        await self.detail.open(application_id)
        return self.detail.is_open

    def click_upcoming(self, interview_id: str) -> InterviewForm | None:
        row = self.dashboard.find_upcoming(interview_id)
        if row is None:
            return None
        return self.interviews.open_upcoming(row.interview)

    async def view_in_candidates(self) -> None:
        """After a create: jump to the candidate list with fresh data."""
        self.active_tab = Tab.CANDIDATES
        self.directory.loaded = False
        await self.directory.load()

    def go_to_new_candidate(self) -> None:
        self.active_tab = Tab.NEW_CANDIDATE
        self.intake.reset()
