"""Notification services backed by the logging module."""

import logging
from typing import List

from datagrid.services.notification.base import (
    Notification,
    NotificationKind,
    NotificationService,
)

logger = logging.getLogger(__name__)

_LEVELS = {
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "success": logging.INFO,
    "info": logging.INFO,
}


class LoggingNotificationService(NotificationService):
    """Writes notifications to the log and answers confirmations automatically."""

    def __init__(self, auto_confirm: bool = True):
        self.auto_confirm = auto_confirm

    async def confirm(self, title: str, message: str) -> bool:
        logger.info(f"Confirmation requested: {title} - {message} -> {self.auto_confirm}")
        return self.auto_confirm

    def notify(self, kind: NotificationKind, title: str, message: str) -> None:
        logger.log(_LEVELS.get(kind, logging.INFO), f"[{kind}] {title}: {message}")


class CollectingNotificationService(LoggingNotificationService):
    """Logs notifications and keeps them until they are drained."""

    def __init__(self, auto_confirm: bool = True):
        super().__init__(auto_confirm=auto_confirm)
        self._pending: List[Notification] = []

    def notify(self, kind: NotificationKind, title: str, message: str) -> None:
        super().notify(kind, title, message)
        self._pending.append(Notification(kind=kind, title=title, message=message))

    def drain(self) -> List[Notification]:
        """Return the queued notifications and forget them."""
        pending, self._pending = self._pending, []
        return pending
