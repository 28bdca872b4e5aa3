"""
User notifications for the project assistant.

Notifications are fire-and-forget: a failing notifier never changes the
outcome of the action that triggered it.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import List

from .models import Notification


logger = logging.getLogger(__name__)


class Notifier(ABC):
    @abstractmethod
    def notify(self, notification: Notification) -> None:
        ...


class LoggingNotifier(Notifier):
    """Writes notifications to the `nest_assistant.notifications` logger."""

    def notify(self, notification: Notification) -> None:
        level = logging.ERROR if notification.variant == "destructive" else logging.INFO
        logger.log(level, f"{notification.title}: {notification.description}")


class CollectingNotifier(Notifier):
    """Keeps notifications in memory, e.g. for a UI to drain after each turn."""

    def __init__(self):
        self.notifications: List[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)

    def drain(self) -> List[Notification]:
        drained, self.notifications = self.notifications, []
        return drained


def send_notification(notifier: Notifier, title: str, description: str, destructive: bool = False) -> None:
    """Best-effort delivery; errors are logged and dropped."""
    notification = Notification(
        title=title,
        description=description,
        variant="destructive" if destructive else "default",
    )
    try:
        notifier.notify(notification)
    except Exception as e:
        logger.warning(f"Notifier failed for {title!r}: {e}")
