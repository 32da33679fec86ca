"""Dashboard state: job cards, open jobs, upcoming interviews, active users."""

import asyncio
import logging

from atshub.core.config import ViewConfig
from atshub.core.schemas import ActiveUser, Job, JobDashboardItem
from atshub.gateway.base import Gateway, GatewayError
from atshub.views.presenters import (
    DashboardCard,
    Option,
    UpcomingRow,
    dashboard_card,
    job_options,
    upcoming_row,
    user_options,
)

logger = logging.getLogger(__name__)


class DashboardView:
    """Read-mostly aggregates shared by several tabs.

    Each loader logs its own failure and leaves the previous data in place,
    so a partial refresh never rolls back the parts that succeeded.
    """

    def __init__(self, gateway: Gateway, config: ViewConfig | None = None) -> None:
        self._gateway = gateway
        self._config = config or ViewConfig()
        self.cards: list[DashboardCard] = []
        self.open_jobs: list[Job] = []
        self.upcoming: list[UpcomingRow] = []
        self.active_users: list[ActiveUser] = []
        self.loading = False

    # --- Totals ---

    @property
    def items(self) -> list[JobDashboardItem]:
        return [c.item for c in self.cards]

    @property
    def has_data(self) -> bool:
        return bool(self.cards)

    @property
    def total_open_jobs(self) -> int:
        return len(self.cards)

    @property
    def total_active_candidates(self) -> int:
        return sum(c.item.stats.total_active for c in self.cards)

    @property
    def total_interviews_this_week(self) -> int:
        return sum(c.item.interviews_this_week for c in self.cards)

    @property
    def total_hired(self) -> int:
        return sum(c.item.stats.total_hired for c in self.cards)

    @property
    def has_upcoming(self) -> bool:
        return bool(self.upcoming)

    # --- Lookups & options ---

    def job_title(self, job_id: str) -> str | None:
        job = next((j for j in self.open_jobs if j.id == job_id), None)
        return job.title if job else None

    def find_upcoming(self, interview_id: str) -> UpcomingRow | None:
        return next((r for r in self.upcoming if r.interview.id == interview_id), None)

    def pipeline_job_options(self) -> list[Option]:
        return job_options(self.open_jobs, "-- Select a job --", with_location=False)

    def user_options(self) -> list[Option]:
        return user_options(self.active_users)

    # --- Loaders ---

    async def load_dashboard(self) -> None:
        try:
            items = await self._gateway.get_job_dashboard()
        except GatewayError:
            logger.error("Failed to load job dashboard", exc_info=True)
            return
        self.cards = [dashboard_card(i, self._config.min_bar_percent) for i in items]

    async def load_open_jobs(self) -> None:
        try:
            self.open_jobs = await self._gateway.get_open_jobs()
        except GatewayError:
            logger.error("Failed to load open jobs", exc_info=True)

    async def load_upcoming(self) -> None:
        try:
            interviews = await self._gateway.get_upcoming_interviews()
        except GatewayError:
            logger.error("Failed to load upcoming interviews", exc_info=True)
            return
        self.upcoming = [upcoming_row(iv) for iv in interviews]

    async def load_users(self) -> None:
        try:
            self.active_users = await self._gateway.get_active_users()
        except GatewayError:
            logger.error("Failed to load active users", exc_info=True)

    async def load_all(self) -> None:
        await asyncio.gather(
            self.load_dashboard(),
            self.load_open_jobs(),
            self.load_upcoming(),
            self.load_users(),
        )

    async def refresh_jobs(self) -> None:
        """Dashboard cards and the open-job list, after a job or candidate write."""
        await asyncio.gather(self.load_dashboard(), self.load_open_jobs())

    async def refresh(self) -> None:
        self.loading = True
        try:
            await asyncio.gather(
                self.load_dashboard(), self.load_open_jobs(), self.load_upcoming(),
            )
        finally:
            self.loading = False
