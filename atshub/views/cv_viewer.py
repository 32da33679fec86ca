"""CV panel on a contact record: the stored file, a parse, and a save back."""

import logging
from typing import Any

from atshub.core.schemas import CvFileInfo, ParsedCvData
from atshub.gateway.base import Gateway, GatewayError, error_message
from atshub.ui.channels import ERROR, SUCCESS, Navigator, Notifier

logger = logging.getLogger(__name__)

DOWNLOAD_PATH = "/sfc/servlet.shepherd/version/download/"


class CvViewer:
    def __init__(
        self, gateway: Gateway, notifier: Notifier, navigator: Navigator, contact_id: str,
    ) -> None:
        self._gateway = gateway
        self._notifier = notifier
        self._navigator = navigator
        self.contact_id = contact_id
        self.file: CvFileInfo | None = None
        self.parsed: ParsedCvData | None = None
        self.parsing = False
        self.parse_success = False
        self.parse_error = False
        self.error_message = ""
        self.saving = False

    @property
    def pdf_url(self) -> str | None:
        return f"{DOWNLOAD_PATH}{self.file.content_version_id}" if self.file else None

    @property
    def file_name(self) -> str:
        return self.file.file_name if self.file else ""

    @property
    def has_data(self) -> bool:
        return self.parsed is not None

    @property
    def is_parse_disabled(self) -> bool:
        return self.file is None or self.parsing

    @property
    def is_save_disabled(self) -> bool:
        return self.parsed is None or self.saving

    async def load(self) -> None:
        try:
            self.file = await self._gateway.get_latest_cv_file(self.contact_id)
        except GatewayError:
            logger.error("Error loading CV file for %s", self.contact_id, exc_info=True)

    async def parse(self) -> bool:
        self.parsing = True
        self.parse_success = False
        self.parse_error = False
        self.error_message = ""
        try:
            self.parsed = await self._gateway.parse_cv_for_contact(self.contact_id)
            self.parse_success = True
        except GatewayError as e:
            self.parse_error = True
            self.error_message = error_message(e, "An unexpected error occurred.")
        finally:
            self.parsing = False
        return self.parse_success

    def update_field(self, field: str, value: Any) -> None:
        if self.parsed is not None:
            self.parsed = self.parsed.with_field(field, value)

    async def save(self) -> bool:
        if self.parsed is None:
            return False
        self.saving = True
        try:
            await self._gateway.save_parsed_data_to_contact(self.contact_id, self.parsed)
        except GatewayError as e:
            self._notifier.notify("Error", error_message(e, "Failed to save data."), ERROR)
            return False
        finally:
            self.saving = False
        self._notifier.notify("Success", "CV data saved to contact record.", SUCCESS)
        self._navigator.refresh_view()
        return True
