"""Tests for the admin setup view."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from atshub.core.config import ViewConfig
from atshub.core.schemas import KEEP_API_KEY, ActiveUser, AvailableUser, SetupStatus
from atshub.gateway.base import Gateway, GatewayError
from atshub.ui.channels import ERROR, SUCCESS, Navigator, Notifier
from atshub.views.setup import SetupView

NO_DELAY = ViewConfig(setup_reload_delay_s=0)


def _status(*, configured: bool = True, users: int = 1) -> SetupStatus:
    return SetupStatus(
        api_key_configured=configured,
        masked_api_key="****abcd" if configured else "Not configured",
        api_endpoint="https://example.test/models",
        ai_model="gemini-2.5-pro",
        users_with_perm_set=users,
        assigned_users=[ActiveUser(user_id=f"005{i}", user_name=f"U{i}") for i in range(users)],
    )


@pytest.fixture()
def gateway() -> AsyncMock:
    gw = AsyncMock(spec=Gateway)
    gw.get_setup_status.return_value = _status()
    gw.test_api_connection.return_value = "SUCCESS"
    gw.get_available_users.return_value = [
        AvailableUser(user_id="005X", user_name="Xavier", profile_name="Standard User"),
        AvailableUser(user_id="005Y", user_name="Yara"),
    ]
    return gw


@pytest.fixture()
def notifier() -> MagicMock:
    return MagicMock(spec=Notifier)


@pytest.fixture()
def navigator() -> MagicMock:
    return MagicMock(spec=Navigator)


@pytest.fixture()
def view(gateway: AsyncMock, notifier: MagicMock, navigator: MagicMock) -> SetupView:
    return SetupView(gateway, notifier, navigator, NO_DELAY)


class TestStatus:
    async def test_ready(self, view: SetupView) -> None:
        await view.load_status()
        assert view.overall_ready
        assert view.overall_message == "ATS is ready to use!"
        assert view.api_status_label == "Configured"
        assert view.perm_status_label == "1 user assigned"
        assert view.api_endpoint == "https://example.test/models"
        assert view.ai_model == "gemini-2.5-pro"

    async def test_missing_everything(self, view: SetupView, gateway: AsyncMock) -> None:
        gateway.get_setup_status.return_value = _status(configured=False, users=0)
        await view.load_status()
        assert not view.overall_ready
        assert view.overall_message == (
            "To complete setup: Configure the Gemini API key for CV parsing and "
            "Assign the ATS permission set to at least one user"
        )
        assert view.perm_status_label == "No users assigned"

    async def test_plural_users(self, view: SetupView, gateway: AsyncMock) -> None:
        gateway.get_setup_status.return_value = _status(users=3)
        await view.load_status()
        assert view.perm_status_label == "3 users assigned"

    async def test_load_failure(self, view: SetupView, gateway: AsyncMock) -> None:
        gateway.get_setup_status.side_effect = GatewayError("Insufficient privileges")
        await view.load_status()
        assert view.error == "Insufficient privileges"
        assert not view.loading


class TestApiSettings:
    async def test_key_required_when_none_stored(
        self, view: SetupView, gateway: AsyncMock, notifier: MagicMock,
    ) -> None:
        gateway.get_setup_status.return_value = _status(configured=False)
        await view.load_status()
        assert await view.save_api() is False
        notifier.notify.assert_called_once_with("Error", "Please enter an API key", ERROR)
        gateway.save_api_settings.assert_not_awaited()

    async def test_new_key_saved(self, view: SetupView, gateway: AsyncMock) -> None:
        await view.load_status()
        view.api_key = "secret-key"
        assert await view.save_api() is True
        gateway.save_api_settings.assert_awaited_once_with(
            "secret-key", "https://example.test/models", "gemini-2.5-pro",
        )
        assert view.api_key == ""
        assert not view.show_api_form
        await view.wait_for_reload()

    async def test_blank_key_keeps_existing(
        self, view: SetupView, gateway: AsyncMock, notifier: MagicMock,
    ) -> None:
        await view.load_status()
        view.ai_model = "gemini-2.5-flash"
        assert await view.save_api() is True
        gateway.save_api_settings.assert_awaited_once_with(
            KEEP_API_KEY, "https://example.test/models", "gemini-2.5-flash",
        )
        notifier.notify.assert_called_once_with(
            "Success", "API settings saved. Changes may take a moment to take effect.", SUCCESS,
        )
        await view.wait_for_reload()

    async def test_status_reloaded_after_delay(
        self, view: SetupView, gateway: AsyncMock,
    ) -> None:
        await view.load_status()
        view.api_key = "secret-key"
        await view.save_api()
        await view.wait_for_reload()
        assert gateway.get_setup_status.await_count == 2
        assert not view.reload_pending

    async def test_save_failure(
        self, view: SetupView, gateway: AsyncMock, notifier: MagicMock,
    ) -> None:
        gateway.save_api_settings.side_effect = GatewayError()
        await view.load_status()
        view.edit_api()
        view.api_key = "secret-key"
        assert await view.save_api() is False
        notifier.notify.assert_called_once_with("Error", "Failed to save settings", ERROR)
        assert view.show_api_form
        assert not view.saving_api


class TestConnection:
    async def test_success(self, view: SetupView) -> None:
        assert await view.test_connection() is True
        assert view.test_result == "Connection successful! The Gemini API is reachable."
        assert view.test_result_class == "test-result test-success"

    async def test_diagnostic_returned(self, view: SetupView, gateway: AsyncMock) -> None:
        gateway.test_api_connection.return_value = "HTTP 403: API key not valid"
        assert await view.test_connection() is False
        assert view.test_result == "HTTP 403: API key not valid"
        assert view.test_result_class == "test-result test-error"

    async def test_error_prefixed(self, view: SetupView, gateway: AsyncMock) -> None:
        gateway.test_api_connection.side_effect = GatewayError("Callout failed")
        assert await view.test_connection() is False
        assert view.test_result == "ERROR: Callout failed"
        assert not view.testing


class TestPermissionSet:
    async def test_show_users(self, view: SetupView) -> None:
        await view.show_users()
        assert view.show_add_users
        assert view.user_options == [
            ("Xavier (Standard User)", "005X"),
            ("Yara", "005Y"),
        ]

    async def test_show_users_failure(
        self, view: SetupView, gateway: AsyncMock, notifier: MagicMock,
    ) -> None:
        gateway.get_available_users.side_effect = GatewayError()
        await view.show_users()
        notifier.notify.assert_called_once_with("Error", "Failed to load users", ERROR)
        assert not view.loading_users

    async def test_assign_users(
        self, view: SetupView, gateway: AsyncMock, notifier: MagicMock,
    ) -> None:
        await view.show_users()
        view.selected_user_ids = ["005X", "005Y"]
        assert await view.assign_users() is True
        gateway.assign_permission_set.assert_awaited_once_with(["005X", "005Y"])
        notifier.notify.assert_called_once_with("Success", "2 user(s) assigned to ATS", SUCCESS)
        assert not view.show_add_users
        assert view.selected_user_ids == []
        gateway.get_setup_status.assert_awaited_once()

    async def test_assign_nothing_selected(self, view: SetupView, gateway: AsyncMock) -> None:
        assert await view.assign_users() is False
        gateway.assign_permission_set.assert_not_awaited()

    async def test_remove_user(
        self, view: SetupView, gateway: AsyncMock, notifier: MagicMock,
    ) -> None:
        assert await view.remove_user("0050", "U0") is True
        gateway.remove_permission_set.assert_awaited_once_with("0050")
        notifier.notify.assert_called_once_with("Success", "Permission removed from U0", SUCCESS)

    async def test_remove_user_failure(
        self, view: SetupView, gateway: AsyncMock, notifier: MagicMock,
    ) -> None:
        gateway.remove_permission_set.side_effect = GatewayError()
        assert await view.remove_user("0050", "U0") is False
        notifier.notify.assert_called_once_with("Error", "Failed to remove permission", ERROR)

    def test_open_hub(self, view: SetupView, navigator: MagicMock) -> None:
        view.open_hub()
        navigator.open_page.assert_called_once_with("ATS_Hub")
