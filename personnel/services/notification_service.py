from __future__ import annotations

import logging

from personnel.models.notification import DEFAULT_DURATION_MS, Notification, NotificationTone

logger = logging.getLogger(__name__)


class NotificationCenter:
    """Fire-and-forget toasts; the renderer drains them."""

    def __init__(self) -> None:
        self.notifications: list[Notification] = []
        self._next_id = 0

    def notify(
        self,
        tone: NotificationTone,
        title: str,
        message: str | None = None,
        duration_ms: int = DEFAULT_DURATION_MS,
    ) -> Notification:
        self._next_id += 1
        notification = Notification(
            id=self._next_id,
            tone=tone,
            title=title,
            message=message,
            duration_ms=duration_ms,
        )
        self.notifications.append(notification)

        if tone == "error":
            logger.warning("Notification [%s] %s: %s", tone, title, message or "")
        else:
            logger.info("Notification [%s] %s", tone, title)
        return notification

    def dismiss(self, notification_id: int) -> None:
        self.notifications = [n for n in self.notifications if n.id != notification_id]

    def drain(self) -> list[Notification]:
        pending = self.notifications
        self.notifications = []
        return pending


notification_center = NotificationCenter()
