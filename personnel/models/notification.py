from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

NotificationTone = Literal["success", "error", "info"]

DEFAULT_DURATION_MS = 4500


class Notification(BaseModel):
    id: int
    tone: NotificationTone
    title: str
    message: str | None = None
    duration_ms: int = DEFAULT_DURATION_MS
