"""Single-employee loader for detail and edit screens."""

from __future__ import annotations

import logging

from personnel.core.result import Err
from personnel.models.auth import AuthState
from personnel.models.employee import Employee
from personnel.services.personnel_repository import PersonnelRepository

logger = logging.getLogger(__name__)


class EmployeeRecord:
    """Loads one employee; answers arriving after ``dispose`` are ignored."""

    def __init__(self, repository: PersonnelRepository) -> None:
        self.repository = repository
        self.employee: Employee | None = None
        self.error: str | None = None
        self.status: int | None = None
        self.loading = False
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    @property
    def failure(self) -> Err | None:
        if self.error is None:
            return None
        return Err(self.error, status=self.status)

    def dispose(self) -> None:
        self._active = False

    async def load(self, employee_id: str | None, auth: AuthState) -> Employee | None:
        if not employee_id:
            if self._active:
                self.employee = None
            return None

        self.loading = True
        try:
            result = await self.repository.get_employee(employee_id, auth)
        finally:
            self.loading = False

        if not self._active:
            logger.debug("Record for %s disposed — dropping response", employee_id)
            return None

        if isinstance(result, Err):
            self.error = result.error
            self.status = result.status
            self.employee = None
        else:
            self.error = None
            self.status = None
            self.employee = result.value
        return self.employee
