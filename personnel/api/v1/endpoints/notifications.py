from __future__ import annotations

from fastapi import APIRouter, Depends

from personnel.core.dependencies import get_notifications, require_auth
from personnel.models.auth import AuthState
from personnel.models.notification import Notification
from personnel.services.notification_service import NotificationCenter

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=list[Notification])
async def drain_notifications(
    auth: AuthState = Depends(require_auth),  # noqa: B008
    notifications: NotificationCenter = Depends(get_notifications),  # noqa: B008
):
    return notifications.drain()
