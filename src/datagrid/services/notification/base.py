"""Abstract base class for confirmation and notification services."""

from abc import ABC, abstractmethod
from typing import Literal

from pydantic import BaseModel

NotificationKind = Literal["success", "warning", "error", "info"]


class Notification(BaseModel):
    """A message shown to the user."""

    kind: NotificationKind
    title: str
    message: str


class NotificationService(ABC):
    """Asks the user yes/no questions and shows messages."""

    @abstractmethod
    async def confirm(self, title: str, message: str) -> bool:
        """Ask the user to confirm an action."""
        pass

    @abstractmethod
    def notify(self, kind: NotificationKind, title: str, message: str) -> None:
        """Show a message without waiting for the user."""
        pass
