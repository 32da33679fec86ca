"""Tests for the dashboard presenter state."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from atshub.core.schemas import (
    ActiveUser,
    Job,
    JobDashboardItem,
    PipelineStats,
    UpcomingInterview,
)
from atshub.gateway.base import Gateway, GatewayError
from atshub.views.dashboard import DashboardView


@pytest.fixture()
def gateway() -> AsyncMock:
    gw = AsyncMock(spec=Gateway)
    gw.get_job_dashboard.return_value = [
        JobDashboardItem(
            job=Job(id="a01", title="Backend"),
            stats=PipelineStats(total_new=2, total_hired=1, total_active=4),
            interviews_this_week=3,
        ),
        JobDashboardItem(
            job=Job(id="a02", title="Designer"),
            stats=PipelineStats(total_active=1, total_hired=2),
            interviews_this_week=1,
        ),
    ]
    gw.get_open_jobs.return_value = [
        Job(id="a01", title="Backend", department="Eng", location="Remote"),
        Job(id="a02", title="Designer"),
    ]
    gw.get_upcoming_interviews.return_value = [
        UpcomingInterview(
            id="iv1", candidate_name="Grace Hopper",
            scheduled_date=datetime(2026, 10, 21, 14, 0, tzinfo=timezone.utc),
        ),
    ]
    gw.get_active_users.return_value = [ActiveUser(user_id="005A", user_name="Maria")]
    return gw


class TestDashboardView:
    async def test_load_all(self, gateway: AsyncMock) -> None:
        view = DashboardView(gateway)
        await view.load_all()
        assert view.has_data
        assert view.total_open_jobs == 2
        assert view.total_active_candidates == 5
        assert view.total_interviews_this_week == 4
        assert view.total_hired == 3
        assert view.has_upcoming
        assert view.upcoming[0].interview.candidate_name == "Grace Hopper"
        assert view.user_options() == [("-- No interviewer --", ""), ("Maria", "005A")]

    async def test_pipeline_job_options_omit_location(self, gateway: AsyncMock) -> None:
        view = DashboardView(gateway)
        await view.load_open_jobs()
        assert view.pipeline_job_options() == [
            ("-- Select a job --", ""),
            ("Backend - Eng", "a01"),
            ("Designer", "a02"),
        ]

    async def test_job_title_lookup(self, gateway: AsyncMock) -> None:
        view = DashboardView(gateway)
        await view.load_open_jobs()
        assert view.job_title("a02") == "Designer"
        assert view.job_title("zzz") is None

    async def test_find_upcoming(self, gateway: AsyncMock) -> None:
        view = DashboardView(gateway)
        await view.load_upcoming()
        assert view.find_upcoming("iv1") is not None
        assert view.find_upcoming("nope") is None

    async def test_partial_failure_keeps_other_results(
        self, gateway: AsyncMock, caplog: pytest.LogCaptureFixture,
    ) -> None:
        view = DashboardView(gateway)
        await view.load_all()
        gateway.get_upcoming_interviews.side_effect = GatewayError("down")
        gateway.get_open_jobs.return_value = [Job(id="a03", title="New Role")]

        await view.refresh()

        assert [j.id for j in view.open_jobs] == ["a03"]
        assert len(view.upcoming) == 1
        assert not view.loading
        assert "Failed to load upcoming interviews" in caplog.text

    async def test_refresh_jobs_only_touches_jobs(self, gateway: AsyncMock) -> None:
        view = DashboardView(gateway)
        await view.refresh_jobs()
        gateway.get_job_dashboard.assert_awaited_once()
        gateway.get_open_jobs.assert_awaited_once()
        gateway.get_upcoming_interviews.assert_not_awaited()

    def test_empty_totals(self, gateway: AsyncMock) -> None:
        view = DashboardView(gateway)
        assert not view.has_data
        assert view.total_open_jobs == 0
        assert view.total_hired == 0
