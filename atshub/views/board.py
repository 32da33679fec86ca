"""Pipeline board: kanban grouping, drag lifecycle, optimistic stage moves.

Stage moves are a two-phase commit over client view-state:

  1. Local, synchronous: the card moves to the target column and its
     days-in-stage resets to 0.
  2. Remote, asynchronous: ``update_application_stage``.

A failed phase 2 is never undone in place. The board is reloaded from the
gateway, because derived fields (days in stage, stats) cannot be rebuilt
locally.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum

from atshub.core.schemas import Application, InterviewRecord, PipelineStats
from atshub.gateway.base import Gateway, GatewayError, error_message
from atshub.ui.channels import ERROR, SUCCESS, Navigator, Notifier
from atshub.views.presenters import DetailView, StageColumn, detail_view, group_by_stage

logger = logging.getLogger(__name__)

Refresh = Callable[[], Awaitable[None]]


class DragState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    COMMITTING = "committing"
    REVERTING = "reverting"


class DropOutcome(str, Enum):
    IGNORED = "ignored"      # nothing was being dragged, or the card is gone
    NO_OP = "no_op"          # dropped on its own stage
    COMMITTED = "committed"
    REVERTED = "reverted"


async def _nothing() -> None:
    return None


class PipelineBoard:
    """Applications of one job grouped into the six stage columns.

    Only one drag is tracked at a time; a second ``drag_start`` before a drop
    replaces the first.
    """

    def __init__(
        self,
        gateway: Gateway,
        notifier: Notifier,
        *,
        on_stage_changed: Refresh = _nothing,
    ) -> None:
        self._gateway = gateway
        self._notifier = notifier
        self._on_stage_changed = on_stage_changed
        self.job_id = ""
        self.applications: list[Application] = []
        self.stats: PipelineStats | None = None
        self.loading = False
        self.state = DragState.IDLE
        self.dragged_application_id: str | None = None
        self._just_dragged = False

    @property
    def has_job(self) -> bool:
        return bool(self.job_id)

    @property
    def updating(self) -> bool:
        return self.state in (DragState.COMMITTING, DragState.REVERTING)

    @property
    def columns(self) -> list[StageColumn]:
        return group_by_stage(self.applications)

    def find(self, application_id: str) -> Application | None:
        return next((a for a in self.applications if a.id == application_id), None)

    async def select_job(self, job_id: str | None) -> None:
        self.job_id = job_id or ""
        if self.job_id:
            await self.load(self.job_id)
        else:
            self.applications = []
            self.stats = None

    async def load(self, job_id: str) -> None:
        """Fetch applications and stats together. Failures are logged only."""
        self.loading = True
        try:
            apps, stats = await asyncio.gather(
                self._gateway.get_applications_by_job(job_id),
                self._gateway.get_pipeline_stats(job_id),
            )
            self.applications = apps
            self.stats = stats
        except GatewayError:
            logger.error("Pipeline load failed for job %s", job_id, exc_info=True)
        finally:
            self.loading = False

    async def reload(self) -> None:
        if self.job_id:
            await self.load(self.job_id)

    # --- Drag lifecycle ---

    def drag_start(self, application_id: str) -> None:
        if self.dragged_application_id and self.dragged_application_id != application_id:
            logger.debug("Drag of %s replaced by %s", self.dragged_application_id, application_id)
        self._just_dragged = True
        self.dragged_application_id = application_id
        self.state = DragState.DRAGGING

    async def drop(self, target_stage: str) -> DropOutcome:
        """Drop the dragged card on ``target_stage``'s column."""
        dragged_id = self.dragged_application_id
        if not dragged_id or not target_stage:
            return DropOutcome.IGNORED

        self.dragged_application_id = None
        current = self.find(dragged_id)
        if current is None:
            self.state = DragState.IDLE
            return DropOutcome.IGNORED
        if current.stage == target_stage:
            self.state = DragState.IDLE
            return DropOutcome.NO_OP

        # Phase 1: local
        self.state = DragState.COMMITTING
        self.applications = [
            a.model_copy(update={"stage": target_stage, "days_in_stage": 0})
            if a.id == dragged_id else a
            for a in self.applications
        ]

        # Phase 2: remote
        try:
            await self._gateway.update_application_stage(dragged_id, target_stage)
        except GatewayError as e:
            logger.warning("Stage update for %s rejected, reloading board", dragged_id)
            self.state = DragState.REVERTING
            await self.reload()
            self._notifier.notify("Error", error_message(e, "Failed to update stage."), ERROR)
            self.state = DragState.IDLE
            return DropOutcome.REVERTED

        self.state = DragState.IDLE
        self._notifier.notify("Updated", f"Candidate moved to {target_stage}", SUCCESS)
        await self._on_stage_changed()
        return DropOutcome.COMMITTED

    def consume_click(self) -> bool:
        """True when a card click should open the detail view.

        A click that ends a drag is swallowed and clears the just-dragged flag.
        """
        if self._just_dragged:
            self._just_dragged = False
            return False
        return True


class ApplicationDetailPanel:
    """The application detail overlay opened from a pipeline card."""

    def __init__(
        self,
        gateway: Gateway,
        notifier: Notifier,
        navigator: Navigator,
        *,
        on_rating_changed: Refresh = _nothing,
    ) -> None:
        self._gateway = gateway
        self._notifier = notifier
        self._navigator = navigator
        self._on_rating_changed = on_rating_changed
        self.is_open = False
        self.loading = False
        self.view: DetailView | None = None

    @property
    def application_id(self) -> str:
        return self.view.application_id if self.view else ""

    @property
    def interviews(self) -> list[InterviewRecord]:
        return [row.interview for row in self.view.interviews] if self.view else []

    async def open(self, application_id: str) -> None:
        self.is_open = True
        self.loading = True
        try:
            self.view = detail_view(await self._gateway.get_application_detail(application_id))
        except GatewayError:
            logger.error("Failed to load application detail %s", application_id, exc_info=True)
            self._notifier.notify("Error", "Failed to load application details.", ERROR)
            self.is_open = False
        finally:
            self.loading = False

    async def reload(self) -> None:
        """Refetch the open detail; failures are logged only."""
        if not self.application_id:
            return
        try:
            self.view = detail_view(await self._gateway.get_application_detail(self.application_id))
        except GatewayError:
            logger.error("Failed to reload application detail %s", self.application_id,
                         exc_info=True)

    def close(self) -> None:
        self.is_open = False
        self.view = None

    async def rate(self, rating: int) -> None:
        if self.view is None:
            return
        try:
            await self._gateway.update_application_rating(self.application_id, rating)
        except GatewayError:
            logger.warning("Rating update failed for %s", self.application_id, exc_info=True)
            self._notifier.notify("Error", "Failed to update rating.", ERROR)
            return
        detail = self.view.detail.model_copy(update={"overall_rating": rating})
        self.view = self.view.model_copy(update={"detail": detail})
        await self._on_rating_changed()

    def view_candidate_record(self) -> None:
        if self.view and self.view.detail.candidate_id:
            self._navigator.open_record(self.view.detail.candidate_id, "Contact")
