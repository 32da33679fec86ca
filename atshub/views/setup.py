"""Admin setup page: parser API settings and ATS permission-set users."""

import asyncio
import logging

from atshub.core.config import ViewConfig
from atshub.core.schemas import KEEP_API_KEY, AvailableUser, SetupStatus
from atshub.gateway.base import Gateway, GatewayError, error_message
from atshub.ui.channels import ERROR, SUCCESS, Navigator, Notifier
from atshub.views.presenters import Option

logger = logging.getLogger(__name__)

DEFAULT_API_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models"
DEFAULT_AI_MODEL = "gemini-2.5-flash"
CONNECTION_OK = "SUCCESS"
HUB_PAGE = "ATS_Hub"

MODEL_OPTIONS: list[Option] = [
    ("Gemini 2.5 Flash", "gemini-2.5-flash"),
    ("Gemini 2.5 Pro", "gemini-2.5-pro"),
    ("Gemini 2.0 Flash", "gemini-2.0-flash"),
    ("Gemini 1.5 Pro", "gemini-1.5-pro"),
    ("Gemini 1.5 Flash", "gemini-1.5-flash"),
]


class SetupView:
    def __init__(
        self,
        gateway: Gateway,
        notifier: Notifier,
        navigator: Navigator,
        config: ViewConfig | None = None,
    ) -> None:
        self._gateway = gateway
        self._notifier = notifier
        self._navigator = navigator
        self._config = config or ViewConfig()
        self.status: SetupStatus | None = None
        self.loading = False
        self.error: str | None = None

        self.show_api_form = False
        self.api_key = ""
        self.api_endpoint = DEFAULT_API_ENDPOINT
        self.ai_model = DEFAULT_AI_MODEL
        self.saving_api = False
        self.testing = False
        self.test_result: str | None = None
        self.test_success = False

        self.show_add_users = False
        self.available_users: list[AvailableUser] = []
        self.selected_user_ids: list[str] = []
        self.loading_users = False
        self.assigning = False
        self._reload_task: asyncio.Task[None] | None = None

    # --- Derived state ---

    @property
    def api_key_configured(self) -> bool:
        return bool(self.status and self.status.api_key_configured)

    @property
    def users_with_perm_set(self) -> int:
        return self.status.users_with_perm_set if self.status else 0

    @property
    def api_status_label(self) -> str:
        return "Configured" if self.api_key_configured else "Not Configured"

    @property
    def perm_status_label(self) -> str:
        count = self.users_with_perm_set
        if count <= 0:
            return "No users assigned"
        return f"{count} user{'' if count == 1 else 's'} assigned"

    @property
    def overall_ready(self) -> bool:
        return self.api_key_configured and self.users_with_perm_set > 0

    @property
    def overall_message(self) -> str:
        if self.overall_ready:
            return "ATS is ready to use!"
        missing = []
        if not self.api_key_configured:
            missing.append("Configure the Gemini API key for CV parsing")
        if not self.users_with_perm_set:
            missing.append("Assign the ATS permission set to at least one user")
        return "To complete setup: " + " and ".join(missing)

    @property
    def user_options(self) -> list[Option]:
        return [
            (u.user_name + (f" ({u.profile_name})" if u.profile_name else ""), u.user_id)
            for u in self.available_users
        ]

    @property
    def test_result_class(self) -> str:
        return "test-result " + ("test-success" if self.test_success else "test-error")

    @property
    def reload_pending(self) -> bool:
        return self._reload_task is not None and not self._reload_task.done()

    # --- Status ---

    async def load_status(self) -> None:
        self.loading = True
        try:
            self.status = await self._gateway.get_setup_status()
            self.error = None
            if self.status.api_endpoint:
                self.api_endpoint = self.status.api_endpoint
            if self.status.ai_model:
                self.ai_model = self.status.ai_model
        except GatewayError as e:
            logger.error("Failed to load setup status", exc_info=True)
            self.error = error_message(e, "Failed to load setup status")
        finally:
            self.loading = False

    async def _delayed_reload(self) -> None:
        await asyncio.sleep(self._config.setup_reload_delay_s)
        await self.load_status()

    async def wait_for_reload(self) -> None:
        if self._reload_task is not None:
            await self._reload_task

    # --- API settings ---

    def edit_api(self) -> None:
        self.show_api_form = True
        self.test_result = None

    def cancel_api(self) -> None:
        self.show_api_form = False
        self.test_result = None

    async def save_api(self) -> bool:
        if not self.api_key and not self.api_key_configured:
            self._notifier.notify("Error", "Please enter an API key", ERROR)
            return False

        if self.api_key:
            key = self.api_key
        elif self.status is None or self.status.masked_api_key == "Not configured":
            key = ""
        else:
            key = KEEP_API_KEY

        self.saving_api = True
        try:
            await self._gateway.save_api_settings(key, self.api_endpoint, self.ai_model)
        except GatewayError as e:
            self._notifier.notify("Error", error_message(e, "Failed to save settings"), ERROR)
            return False
        finally:
            self.saving_api = False

        self._notifier.notify(
            "Success", "API settings saved. Changes may take a moment to take effect.", SUCCESS,
        )
        self.show_api_form = False
        self.api_key = ""
        # Settings are deployed asynchronously on the platform side.
        self._reload_task = asyncio.create_task(self._delayed_reload())
        return True

    async def test_connection(self) -> bool:
        self.testing = True
        self.test_result = None
        try:
            result = await self._gateway.test_api_connection()
        except GatewayError as e:
            self.test_result = f"ERROR: {e.message or e}"
            self.test_success = False
        else:
            self.test_success = result == CONNECTION_OK
            self.test_result = (
                "Connection successful! The Gemini API is reachable."
                if self.test_success else result
            )
        finally:
            self.testing = False
        return self.test_success

    # --- Permission set ---

    async def show_users(self) -> None:
        self.show_add_users = True
        self.selected_user_ids = []
        self.loading_users = True
        try:
            self.available_users = await self._gateway.get_available_users()
        except GatewayError:
            logger.warning("Failed to load available users", exc_info=True)
            self._notifier.notify("Error", "Failed to load users", ERROR)
        finally:
            self.loading_users = False

    def cancel_add_users(self) -> None:
        self.show_add_users = False
        self.selected_user_ids = []

    async def assign_users(self) -> bool:
        if not self.selected_user_ids:
            return False
        count = len(self.selected_user_ids)
        self.assigning = True
        try:
            await self._gateway.assign_permission_set(list(self.selected_user_ids))
        except GatewayError as e:
            self._notifier.notify(
                "Error", error_message(e, "Failed to assign permission set"), ERROR,
            )
            return False
        finally:
            self.assigning = False

        self._notifier.notify("Success", f"{count} user(s) assigned to ATS", SUCCESS)
        self.show_add_users = False
        self.selected_user_ids = []
        await self.load_status()
        return True

    async def remove_user(self, user_id: str, user_name: str) -> bool:
        try:
            await self._gateway.remove_permission_set(user_id)
        except GatewayError as e:
            self._notifier.notify("Error", error_message(e, "Failed to remove permission"), ERROR)
            return False
        self._notifier.notify("Success", f"Permission removed from {user_name}", SUCCESS)
        await self.load_status()
        return True

    def open_hub(self) -> None:
        self._navigator.open_page(HUB_PAGE)
