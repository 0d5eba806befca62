from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from personnel.core.dependencies import get_catalog, get_notifications, raise_for_error, require_auth
from personnel.core.result import Err
from personnel.models.auth import AuthState
from personnel.models.employee import Qualification, QualificationLabelRequest
from personnel.services.notification_service import NotificationCenter
from personnel.services.qualification_catalog import (
    DeletionReport,
    EnsuredQualification,
    QualificationCatalog,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/qualifications", tags=["qualifications"])


@router.get("", response_model=list[Qualification])
async def list_qualifications(
    search: str | None = Query(None),
    auth: AuthState = Depends(require_auth),  # noqa: B008
    catalog: QualificationCatalog = Depends(get_catalog),  # noqa: B008
):
    await catalog.load(auth)
    if catalog.error:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=catalog.error)
    if search:
        return catalog.search(search)
    return catalog.qualifications


@router.post("", response_model=Qualification, status_code=status.HTTP_201_CREATED)
async def create_qualification(
    request: QualificationLabelRequest,
    auth: AuthState = Depends(require_auth),  # noqa: B008
    catalog: QualificationCatalog = Depends(get_catalog),  # noqa: B008
    notifications: NotificationCenter = Depends(get_notifications),  # noqa: B008
):
    result = await catalog.create(request.label, auth)
    if isinstance(result, Err):
        notifications.notify("error", "Qualifikation konnte nicht erstellt werden", result.error)
        raise_for_error(result, "Creating qualification")

    notifications.notify("success", "Qualifikation erstellt", result.value.skill)
    return result.value


@router.post("/ensure", response_model=EnsuredQualification)
async def ensure_qualification(
    request: QualificationLabelRequest,
    auth: AuthState = Depends(require_auth),  # noqa: B008
    catalog: QualificationCatalog = Depends(get_catalog),  # noqa: B008
):
    if not catalog.qualifications:
        await catalog.load(auth)

    result = await catalog.ensure(request.label, auth)
    if isinstance(result, Err):
        raise_for_error(result, "Ensuring qualification")
    return result.value


@router.put("/{qualification_id}", response_model=Qualification)
async def rename_qualification(
    qualification_id: int,
    request: QualificationLabelRequest,
    auth: AuthState = Depends(require_auth),  # noqa: B008
    catalog: QualificationCatalog = Depends(get_catalog),  # noqa: B008
    notifications: NotificationCenter = Depends(get_notifications),  # noqa: B008
):
    result = await catalog.rename(qualification_id, request.label, auth)
    if isinstance(result, Err):
        notifications.notify("error", "Qualifikation konnte nicht gespeichert werden", result.error)
        raise_for_error(result, f"Renaming qualification {qualification_id}")

    notifications.notify("success", "Qualifikation gespeichert", result.value.skill)
    return result.value


@router.delete("/{qualification_id}", response_model=DeletionReport)
async def delete_qualification(
    qualification_id: int,
    auth: AuthState = Depends(require_auth),  # noqa: B008
    catalog: QualificationCatalog = Depends(get_catalog),  # noqa: B008
    notifications: NotificationCenter = Depends(get_notifications),  # noqa: B008
):
    qualification = next((q for q in catalog.qualifications if q.id == qualification_id), None)
    if qualification is None:
        await catalog.load(auth)
        qualification = next((q for q in catalog.qualifications if q.id == qualification_id), None)
    if qualification is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Die gewünschte Qualifikation wurde nicht gefunden.",
        )

    result = await catalog.delete(qualification, auth)
    if isinstance(result, Err):
        notifications.notify("error", "Löschen fehlgeschlagen", result.error)
        raise_for_error(result, f"Deleting qualification {qualification_id}")

    report = result.value
    for employee_id, message in report.failed_detaches.items():
        notifications.notify(
            "error",
            "Qualifikation konnte nicht von einem Mitarbeiter entfernt werden",
            f"Mitarbeiter {employee_id}: {message}",
        )
    notifications.notify("success", "Qualifikation gelöscht", qualification.skill)
    logger.info(
        "Qualification %d deleted (%d detached, %d failed)",
        qualification_id,
        len(report.detached_employee_ids),
        len(report.failed_detaches),
    )
    return report
