"""Tests for the contact CV viewer."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from atshub.core.schemas import CvFileInfo, ParsedCvData
from atshub.gateway.base import Gateway, GatewayError
from atshub.ui.channels import ERROR, SUCCESS, Navigator, Notifier
from atshub.views.cv_viewer import CvViewer


@pytest.fixture()
def gateway() -> AsyncMock:
    gw = AsyncMock(spec=Gateway)
    gw.get_latest_cv_file.return_value = CvFileInfo(
        content_version_id="068A", title="ada_cv", file_extension="pdf",
    )
    gw.parse_cv_for_contact.return_value = ParsedCvData(first_name="Ada", last_name="Lovelace")
    return gw


@pytest.fixture()
def notifier() -> MagicMock:
    return MagicMock(spec=Notifier)


@pytest.fixture()
def navigator() -> MagicMock:
    return MagicMock(spec=Navigator)


@pytest.fixture()
def viewer(gateway: AsyncMock, notifier: MagicMock, navigator: MagicMock) -> CvViewer:
    return CvViewer(gateway, notifier, navigator, "003A")


class TestCvViewer:
    async def test_load_file(self, viewer: CvViewer, gateway: AsyncMock) -> None:
        assert viewer.is_parse_disabled
        await viewer.load()
        gateway.get_latest_cv_file.assert_awaited_once_with("003A")
        assert viewer.file_name == "ada_cv.pdf"
        assert viewer.pdf_url == "/sfc/servlet.shepherd/version/download/068A"
        assert not viewer.is_parse_disabled

    async def test_no_file(self, viewer: CvViewer, gateway: AsyncMock) -> None:
        gateway.get_latest_cv_file.return_value = None
        await viewer.load()
        assert viewer.pdf_url is None
        assert viewer.file_name == ""

    async def test_load_failure_logged(
        self, viewer: CvViewer, gateway: AsyncMock, caplog: pytest.LogCaptureFixture,
    ) -> None:
        gateway.get_latest_cv_file.side_effect = GatewayError()
        await viewer.load()
        assert viewer.file is None
        assert "Error loading CV file" in caplog.text

    async def test_parse_and_edit(self, viewer: CvViewer) -> None:
        await viewer.load()
        assert await viewer.parse() is True
        assert viewer.has_data
        viewer.update_field("email", "ada@example.com")
        assert viewer.parsed is not None
        assert viewer.parsed.email == "ada@example.com"
        assert not viewer.is_save_disabled

    async def test_parse_failure(self, viewer: CvViewer, gateway: AsyncMock) -> None:
        gateway.parse_cv_for_contact.side_effect = GatewayError("No CV file found for this contact.")
        assert await viewer.parse() is False
        assert viewer.parse_error
        assert viewer.error_message == "No CV file found for this contact."

    async def test_save_refreshes_view(
        self, viewer: CvViewer, gateway: AsyncMock, notifier: MagicMock, navigator: MagicMock,
    ) -> None:
        await viewer.parse()
        assert await viewer.save() is True
        gateway.save_parsed_data_to_contact.assert_awaited_once_with("003A", viewer.parsed)
        notifier.notify.assert_called_once_with(
            "Success", "CV data saved to contact record.", SUCCESS,
        )
        navigator.refresh_view.assert_called_once()

    async def test_save_failure(
        self, viewer: CvViewer, gateway: AsyncMock, notifier: MagicMock, navigator: MagicMock,
    ) -> None:
        gateway.save_parsed_data_to_contact.side_effect = GatewayError()
        await viewer.parse()
        assert await viewer.save() is False
        notifier.notify.assert_called_once_with("Error", "Failed to save data.", ERROR)
        navigator.refresh_view.assert_not_called()

    async def test_save_without_data(self, viewer: CvViewer, gateway: AsyncMock) -> None:
        assert await viewer.save() is False
        gateway.save_parsed_data_to_contact.assert_not_awaited()
