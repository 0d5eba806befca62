from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status

from personnel.core.dependencies import (
    get_notifications,
    get_overview,
    get_repository,
    raise_for_error,
    require_auth,
)
from personnel.core.result import Err
from personnel.models.auth import AuthState
from personnel.models.employee import Employee, EmployeeFormData
from personnel.models.overview import (
    FilterKey,
    FilterUpdateRequest,
    LayoutUpdateRequest,
    OverviewView,
    PageRequest,
    SortKey,
    SortSelectRequest,
)
from personnel.services.employee_form import SUMMARY_MESSAGE, validate_employee_form
from personnel.services.employee_record import EmployeeRecord
from personnel.services.notification_service import NotificationCenter
from personnel.services.overview_engine import EmployeeOverview
from personnel.services.personnel_repository import PersonnelRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/employees", tags=["employees"])


@router.get("/overview", response_model=OverviewView)
async def get_overview_view(
    auth: AuthState = Depends(require_auth),  # noqa: B008
    overview: EmployeeOverview = Depends(get_overview),  # noqa: B008
):
    return overview.view()


@router.post("/overview/refresh", response_model=OverviewView)
async def refresh_overview(
    auth: AuthState = Depends(require_auth),  # noqa: B008
    overview: EmployeeOverview = Depends(get_overview),  # noqa: B008
    repository: PersonnelRepository = Depends(get_repository),  # noqa: B008
):
    await overview.refresh(repository, auth)
    return overview.view()


@router.put("/overview/filters", response_model=OverviewView)
async def update_filter(
    request: FilterUpdateRequest,
    auth: AuthState = Depends(require_auth),  # noqa: B008
    overview: EmployeeOverview = Depends(get_overview),  # noqa: B008
):
    overview.set_filter(request.key, request.value)
    return overview.view()


@router.delete("/overview/filters/{key}", response_model=OverviewView)
async def clear_filter(
    key: FilterKey,
    auth: AuthState = Depends(require_auth),  # noqa: B008
    overview: EmployeeOverview = Depends(get_overview),  # noqa: B008
):
    overview.clear_filter(key)
    return overview.view()


@router.delete("/overview/filters", response_model=OverviewView)
async def reset_filters(
    auth: AuthState = Depends(require_auth),  # noqa: B008
    overview: EmployeeOverview = Depends(get_overview),  # noqa: B008
):
    overview.reset_filters()
    return overview.view()


@router.post("/overview/sort/{key}", response_model=OverviewView)
async def toggle_sort(
    key: SortKey,
    auth: AuthState = Depends(require_auth),  # noqa: B008
    overview: EmployeeOverview = Depends(get_overview),  # noqa: B008
):
    overview.handle_sort(key)
    return overview.view()


@router.put("/overview/sort", response_model=OverviewView)
async def select_sort(
    request: SortSelectRequest,
    auth: AuthState = Depends(require_auth),  # noqa: B008
    overview: EmployeeOverview = Depends(get_overview),  # noqa: B008
):
    overview.select_sort(request.key)
    return overview.view()


@router.put("/overview/page", response_model=OverviewView)
async def go_to_page(
    request: PageRequest,
    auth: AuthState = Depends(require_auth),  # noqa: B008
    overview: EmployeeOverview = Depends(get_overview),  # noqa: B008
):
    overview.go_to_page(request.page)
    return overview.view()


@router.put("/overview/layout", response_model=OverviewView)
async def update_layout(
    request: LayoutUpdateRequest,
    auth: AuthState = Depends(require_auth),  # noqa: B008
    overview: EmployeeOverview = Depends(get_overview),  # noqa: B008
):
    overview.apply_layout(request, is_mobile=request.is_mobile_layout)
    return overview.view()


@router.get("/{employee_id}", response_model=Employee)
async def get_employee(
    employee_id: str,
    auth: AuthState = Depends(require_auth),  # noqa: B008
    repository: PersonnelRepository = Depends(get_repository),  # noqa: B008
):
    record = EmployeeRecord(repository)
    employee = await record.load(employee_id, auth)
    if record.failure is not None:
        raise_for_error(record.failure, f"Loading employee {employee_id}")
    return employee


def _ensure_valid(data: EmployeeFormData) -> None:
    errors = validate_employee_form(data)
    if errors:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": SUMMARY_MESSAGE, "errors": errors},
        )


@router.post("", response_model=Employee, status_code=status.HTTP_201_CREATED)
async def create_employee(
    data: EmployeeFormData,
    auth: AuthState = Depends(require_auth),  # noqa: B008
    repository: PersonnelRepository = Depends(get_repository),  # noqa: B008
    overview: EmployeeOverview = Depends(get_overview),  # noqa: B008
    notifications: NotificationCenter = Depends(get_notifications),  # noqa: B008
):
    _ensure_valid(data)

    result = await repository.create_employee(data, auth)
    if isinstance(result, Err):
        notifications.notify("error", "Fehler beim Hinzufügen", result.error)
        raise_for_error(result, "Creating employee")

    notifications.notify("success", "Mitarbeiter wurde erfolgreich hinzugefügt")
    logger.info("Employee %s created", result.value.id)
    await overview.refresh(repository, auth)
    return result.value


@router.put("/{employee_id}", response_model=Employee)
async def update_employee(
    employee_id: str,
    data: EmployeeFormData,
    auth: AuthState = Depends(require_auth),  # noqa: B008
    repository: PersonnelRepository = Depends(get_repository),  # noqa: B008
    overview: EmployeeOverview = Depends(get_overview),  # noqa: B008
    notifications: NotificationCenter = Depends(get_notifications),  # noqa: B008
):
    _ensure_valid(data)

    result = await repository.update_employee(employee_id, data, auth)
    if isinstance(result, Err):
        notifications.notify("error", "Fehler beim Speichern", result.error)
        raise_for_error(result, f"Updating employee {employee_id}")

    notifications.notify("success", "Änderungen wurden erfolgreich gespeichert")
    await overview.refresh(repository, auth)
    return result.value


@router.delete("/{employee_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_employee(
    employee_id: str,
    auth: AuthState = Depends(require_auth),  # noqa: B008
    repository: PersonnelRepository = Depends(get_repository),  # noqa: B008
    overview: EmployeeOverview = Depends(get_overview),  # noqa: B008
    notifications: NotificationCenter = Depends(get_notifications),  # noqa: B008
):
    result = await overview.delete_employee(employee_id, repository, auth, notifications)
    if isinstance(result, Err):
        raise_for_error(result, f"Deleting employee {employee_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
