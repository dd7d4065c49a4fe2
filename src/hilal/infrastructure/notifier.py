"""Desktop notifications via plyer."""

import logging
import threading
from pathlib import Path

from plyer import notification

from hilal.services.ports import NotifierPort

logger = logging.getLogger(__name__)

APP_NAME = "Hilal"


class PlyerNotifier(NotifierPort):
    """Shows notifications on a daemon thread so the caller never waits."""

    def __init__(self, app_icon: Path | None = None, timeout: int = 30) -> None:
        self._app_icon = app_icon
        self._timeout = timeout

    def notify(self, title: str, body: str) -> None:
        thread = threading.Thread(
            target=self._send,
            args=(title, body),
            name="hilal-notify",
            daemon=True,
        )
        thread.start()

    def _send(self, title: str, body: str) -> None:
        kwargs = {
            "app_name": APP_NAME,
            "title": title,
            "message": body,
            "timeout": self._timeout,
        }
        if self._app_icon is not None and self._app_icon.exists():
            kwargs["app_icon"] = str(self._app_icon)
        try:
            notification.notify(**kwargs)
            logger.debug(f"Notification shown: {title}")
        except Exception as e:
            # plyer raises NotImplementedError on headless systems
            logger.warning(f"Notification could not be shown: {e}")
