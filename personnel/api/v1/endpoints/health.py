from __future__ import annotations

from fastapi import APIRouter, Depends

from personnel.core.auth import describe_user
from personnel.core.config import settings
from personnel.core.dependencies import require_auth
from personnel.models.auth import AuthState
from personnel.services.personnel_repository import personnel_repository

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health_check():
    services: dict[str, str] = {}

    try:
        if personnel_repository.initialized:
            ok = await personnel_repository.check_connection()
            services["personnel_api"] = "ok" if ok else "error"
        else:
            services["personnel_api"] = "not_configured"
    except Exception:
        services["personnel_api"] = "error"

    all_ok = all(v in ("ok", "not_configured") for v in services.values())

    return {
        "status": "healthy" if all_ok else "degraded",
        "version": settings.APP_VERSION,
        "services": services,
    }


@router.get("/protected")
async def health_protected(auth: AuthState = Depends(require_auth)):
    return {"status": "ok", "user": describe_user(auth).model_dump()}


@router.get("/ready")
async def readiness_probe():
    return {"ready": True}
