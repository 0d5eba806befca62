from __future__ import annotations

import logging
from typing import NoReturn

from fastapi import Depends, Header, HTTPException, Request, status

from personnel.core.auth import NOT_AUTHENTICATED_MESSAGE, build_auth_state
from personnel.core.result import Err
from personnel.models.auth import AuthState
from personnel.services.notification_service import NotificationCenter, notification_center
from personnel.services.overview_engine import EmployeeOverview
from personnel.services.personnel_repository import PersonnelRepository, personnel_repository
from personnel.services.qualification_catalog import QualificationCatalog
from personnel.services.session_registry import SessionRegistry

logger = logging.getLogger(__name__)


async def get_auth_state(authorization: str | None = Header(None)) -> AuthState:
    return build_auth_state(authorization)


async def require_auth(auth: AuthState = Depends(get_auth_state)) -> AuthState:
    if not auth.is_authenticated:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=NOT_AUTHENTICATED_MESSAGE,
            headers={"WWW-Authenticate": "Bearer"},
        )
    return auth


def get_repository() -> PersonnelRepository:
    return personnel_repository


def get_notifications() -> NotificationCenter:
    return notification_center


def get_sessions(request: Request) -> SessionRegistry:
    sessions = getattr(request.app.state, "sessions", None)
    if sessions is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Sessions not initialized",
        )
    return sessions


def get_overview(
    auth: AuthState = Depends(require_auth),  # noqa: B008
    sessions: SessionRegistry = Depends(get_sessions),  # noqa: B008
) -> EmployeeOverview:
    return sessions.overview_for(auth)


def get_catalog(
    auth: AuthState = Depends(require_auth),  # noqa: B008
    sessions: SessionRegistry = Depends(get_sessions),  # noqa: B008
    repository: PersonnelRepository = Depends(get_repository),  # noqa: B008
) -> QualificationCatalog:
    return sessions.catalog_for(auth, repository)


def raise_for_error(error: Err, context: str) -> NoReturn:
    logger.error("%s failed: %s", context, error.error)
    raise HTTPException(
        status_code=error.status or status.HTTP_502_BAD_GATEWAY,
        detail=error.error,
    )
