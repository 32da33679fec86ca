"""Notification and navigation side channels injected into every controller."""

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)

SUCCESS = "success"
ERROR = "error"
WARNING = "warning"
INFO = "info"

_LOG_LEVELS = {
    SUCCESS: logging.INFO,
    INFO: logging.INFO,
    WARNING: logging.WARNING,
    ERROR: logging.ERROR,
}


class Notifier(ABC):
    """Shows a transient toast to the user."""

    @abstractmethod
    def notify(self, title: str, message: str, variant: str = INFO) -> None:
        """Show a toast. ``variant`` is one of success, error, warning, info."""


class Navigator(ABC):
    """Moves the user to another page of the host platform."""

    @abstractmethod
    def open_record(self, record_id: str, object_api_name: str = "Contact") -> None: ...

    @abstractmethod
    def open_page(self, api_name: str) -> None: ...

    @abstractmethod
    def refresh_view(self) -> None:
        """Ask the host page to re-render with fresh record data."""


class LoggingNotifier(Notifier):
    """Writes toasts to the log instead of a screen."""

    def notify(self, title: str, message: str, variant: str = INFO) -> None:
        logger.log(_LOG_LEVELS.get(variant, logging.INFO), "%s: %s", title, message)


class LoggingNavigator(Navigator):
    def open_record(self, record_id: str, object_api_name: str = "Contact") -> None:
        logger.info("Open %s record %s", object_api_name, record_id)

    def open_page(self, api_name: str) -> None:
        logger.info("Open page %s", api_name)

    def refresh_view(self) -> None:
        logger.info("Refresh view")
