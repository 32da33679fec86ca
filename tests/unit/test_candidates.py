"""Tests for the candidate directory and the candidate detail panel."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from atshub.core.config import ViewConfig
from atshub.core.schemas import (
    Candidate,
    CandidateApplication,
    CandidateInterviews,
    InterviewRecord,
)
from atshub.gateway.base import Gateway, GatewayError
from atshub.ui.channels import ERROR, SUCCESS, Navigator, Notifier
from atshub.views.candidates import CandidateDirectory, CandidatePanel

FAST = ViewConfig(search_debounce_ms=10)


def _candidate(contact_id: str, name: str, **kwargs: object) -> Candidate:
    return Candidate(contact_id=contact_id, name=name, **kwargs)  # type: ignore[arg-type]


@pytest.fixture()
def gateway() -> AsyncMock:
    gw = AsyncMock(spec=Gateway)
    gw.get_candidates.return_value = [
        _candidate("003A", "Ada Lovelace", candidate_source="Referral", skills="Python; SQL"),
        _candidate("003B", "Grace Hopper"),
    ]
    gw.get_interviews_by_candidate.return_value = CandidateInterviews(
        applications=[CandidateApplication(application_id="a02", job_title="Backend")],
        interviews=[InterviewRecord(id="iv1", application_id="a02")],
    )
    return gw


@pytest.fixture()
def notifier() -> MagicMock:
    return MagicMock(spec=Notifier)


@pytest.fixture()
def navigator() -> MagicMock:
    return MagicMock(spec=Navigator)


@pytest.fixture()
def directory(gateway: AsyncMock, notifier: MagicMock) -> CandidateDirectory:
    return CandidateDirectory(gateway, notifier, FAST)


# ---------------------------------------------------------------------------
# Directory
# ---------------------------------------------------------------------------
class TestDirectory:
    async def test_load(self, directory: CandidateDirectory, gateway: AsyncMock) -> None:
        await directory.load()
        gateway.get_candidates.assert_awaited_once_with("")
        assert directory.loaded
        assert not directory.loading
        assert directory.count_label == "2 candidates"
        assert directory.rows[0].skill_tags == ["Python", "SQL"]

    async def test_singular_count_label(
        self, directory: CandidateDirectory, gateway: AsyncMock,
    ) -> None:
        gateway.get_candidates.return_value = [_candidate("003A", "Ada")]
        await directory.load()
        assert directory.count_label == "1 candidate"

    def test_empty_messages(self, directory: CandidateDirectory) -> None:
        assert directory.empty_message.startswith("No candidates have been added yet.")
        directory.search_term = "zzz"
        assert directory.empty_message.startswith("No candidates match your search.")

    async def test_typing_is_debounced(
        self, directory: CandidateDirectory, gateway: AsyncMock,
    ) -> None:
        for term in ("a", "ad", "ada"):
            directory.set_search_term(term)
        await directory.settle()
        gateway.get_candidates.assert_awaited_once_with("ada")

    async def test_stale_response_discarded(
        self, directory: CandidateDirectory, gateway: AsyncMock,
    ) -> None:
        release_first = asyncio.Event()

        async def _search(term: str) -> list[Candidate]:
            if term == "a":
                await release_first.wait()
                return [_candidate("003X", "Stale Result")]
            return [_candidate("003A", "Ada Lovelace")]

        gateway.get_candidates.side_effect = _search

        directory.search_term = "a"
        first = asyncio.create_task(directory.load())
        await asyncio.sleep(0)
        directory.search_term = "ada"
        await directory.load()
        release_first.set()
        await first

        assert [r.candidate.name for r in directory.rows] == ["Ada Lovelace"]
        assert not directory.loading

    async def test_keystroke_during_search_keeps_it_running(
        self, directory: CandidateDirectory, gateway: AsyncMock,
    ) -> None:
        first_started = asyncio.Event()
        release_first = asyncio.Event()
        outcomes: list[str] = []

        async def _search(term: str) -> list[Candidate]:
            if term == "a":
                first_started.set()
                try:
                    await release_first.wait()
                except asyncio.CancelledError:
                    outcomes.append("cancelled")
                    raise
                outcomes.append("a")
                return [_candidate("003X", "Stale Result")]
            outcomes.append(term)
            return [_candidate("003A", "Ada Lovelace")]

        gateway.get_candidates.side_effect = _search

        directory.set_search_term("a")
        await first_started.wait()
        directory.set_search_term("ab")
        await asyncio.sleep(0.03)
        release_first.set()
        await directory.settle()

        assert outcomes == ["ab", "a"]
        assert [r.candidate.name for r in directory.rows] == ["Ada Lovelace"]
        assert not directory.loading

    async def test_load_failure_toasts(
        self, directory: CandidateDirectory, gateway: AsyncMock, notifier: MagicMock,
    ) -> None:
        gateway.get_candidates.side_effect = GatewayError()
        await directory.load()
        notifier.notify.assert_called_once_with("Error", "Failed to load candidates.", ERROR)
        assert not directory.loaded
        assert not directory.loading


# ---------------------------------------------------------------------------
# Panel
# ---------------------------------------------------------------------------
@pytest.fixture()
async def panel(
    gateway: AsyncMock, notifier: MagicMock, navigator: MagicMock,
    directory: CandidateDirectory,
) -> CandidatePanel:
    await directory.load()
    return CandidatePanel(
        gateway, notifier, navigator, directory,
        job_title=lambda job_id: {"a01": "Backend Engineer"}.get(job_id),
    )


class TestPanel:
    async def test_open_loads_interviews(self, panel: CandidatePanel, gateway: AsyncMock) -> None:
        assert await panel.open("003A") is True
        gateway.get_interviews_by_candidate.assert_awaited_once_with("003A")
        assert panel.is_open
        assert panel.interview_count == 1
        assert panel.can_add_interview
        assert panel.application_options == [("Backend (New)", "a02")]
        assert panel.assign_source == "Referral"

    async def test_source_defaults_when_candidate_has_none(self, panel: CandidatePanel) -> None:
        await panel.open("003B")
        assert panel.assign_source == "LinkedIn"

    async def test_open_unknown_candidate(self, panel: CandidatePanel) -> None:
        assert await panel.open("nope") is False
        assert not panel.is_open

    async def test_interview_load_failure_logged_only(
        self, panel: CandidatePanel, gateway: AsyncMock, notifier: MagicMock,
    ) -> None:
        gateway.get_interviews_by_candidate.side_effect = GatewayError()
        await panel.open("003A")
        assert panel.is_open
        assert panel.interviews == []
        assert not panel.interviews_loading
        notifier.notify.assert_not_called()

    async def test_assign_disabled_without_job(self, panel: CandidatePanel) -> None:
        await panel.open("003A")
        assert panel.is_assign_disabled
        assert await panel.assign() is False
        panel.assign_job_id = "a01"
        assert not panel.is_assign_disabled

    async def test_assign_success_refreshes_everything(
        self, gateway: AsyncMock, notifier: MagicMock, navigator: MagicMock,
        directory: CandidateDirectory,
    ) -> None:
        on_assigned = AsyncMock()
        await directory.load()
        p = CandidatePanel(
            gateway, notifier, navigator, directory,
            job_title=lambda job_id: "Backend Engineer", on_assigned=on_assigned,
        )
        await p.open("003A")
        gateway.get_candidates.reset_mock()
        gateway.get_interviews_by_candidate.reset_mock()
        gateway.get_candidates.return_value = [
            _candidate("003A", "Ada Lovelace", application_count=2),
        ]
        p.assign_job_id = "a01"

        assert await p.assign() is True

        gateway.assign_candidate_to_job.assert_awaited_once_with("003A", "a01", "Referral")
        notifier.notify.assert_called_once_with(
            "Assigned", "Ada Lovelace assigned to Backend Engineer", SUCCESS,
        )
        gateway.get_candidates.assert_awaited_once()
        gateway.get_interviews_by_candidate.assert_awaited_once_with("003A")
        assert p.selected is not None
        assert p.selected.candidate.application_count == 2
        on_assigned.assert_awaited_once()
        assert p.assign_job_id == ""
        assert not p.assigning

    async def test_assign_unknown_job_title(
        self, panel: CandidatePanel, notifier: MagicMock,
    ) -> None:
        await panel.open("003B")
        panel.assign_job_id = "zzz"
        await panel.assign()
        notifier.notify.assert_called_once_with("Assigned", "Grace Hopper assigned to job", SUCCESS)

    async def test_assign_failure(
        self, panel: CandidatePanel, gateway: AsyncMock, notifier: MagicMock,
    ) -> None:
        gateway.assign_candidate_to_job.side_effect = GatewayError(
            "Candidate already has an application for this job.",
        )
        await panel.open("003A")
        panel.assign_job_id = "a01"
        assert await panel.assign() is False
        notifier.notify.assert_called_once_with(
            "Error", "Candidate already has an application for this job.", ERROR,
        )
        assert panel.assign_job_id == "a01"
        assert not panel.assigning

    async def test_view_record_and_close(
        self, panel: CandidatePanel, navigator: MagicMock,
    ) -> None:
        await panel.open("003A")
        panel.view_record()
        navigator.open_record.assert_called_once_with("003A", "Contact")
        panel.close()
        assert not panel.is_open
        assert panel.contact_id == ""
        assert panel.applications == []
