"""Qualification catalog: find-or-create by label and cascade deletion.

Qualifications are referenced from employees by label, not by id, so every
lookup here is a case-insensitive label comparison. ``ensure`` is a plain
read-then-create sequence without locking; two concurrent callers may both
create the same label if the backend does not reject duplicates.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence

from pydantic import BaseModel

from personnel.core.result import GENERIC_ERROR_MESSAGE, Err, Ok, Result
from personnel.models.auth import AuthState
from personnel.models.employee import Employee, Qualification
from personnel.services.personnel_repository import PersonnelRepository, personnel_repository

logger = logging.getLogger(__name__)

EMPTY_LABEL_MESSAGE = "Bitte geben Sie eine Qualifikation ein."


class EnsuredQualification(BaseModel):
    qualification: Qualification
    created: bool


class DeletionReport(BaseModel):
    qualification: Qualification
    detached_employee_ids: list[str] = []
    failed_detaches: dict[str, str] = {}

    @property
    def has_failures(self) -> bool:
        return bool(self.failed_detaches)


def labels_equal(left: str, right: str) -> bool:
    return left.lower() == right.lower()


def has_label(labels: Sequence[str], label: str) -> bool:
    return any(labels_equal(existing, label) for existing in labels)


def add_unique_label(labels: Sequence[str], label: str) -> list[str]:
    """Append ``label`` unless a case-insensitive duplicate is already assigned."""
    if has_label(labels, label):
        return list(labels)
    return [*labels, label]


def find_qualification(qualifications: Sequence[Qualification], label: str) -> Qualification | None:
    return next((q for q in qualifications if labels_equal(q.skill, label)), None)


class QualificationCatalog:
    def __init__(self, repository: PersonnelRepository | None = None) -> None:
        self.repository = repository or personnel_repository
        self.qualifications: list[Qualification] = []
        self.loading = False
        self.error: str | None = None
        self._closed = False

    @property
    def labels(self) -> list[str]:
        return [qualification.skill for qualification in self.qualifications]

    def close(self) -> None:
        self._closed = True

    def find(self, label: str) -> Qualification | None:
        return find_qualification(self.qualifications, label.strip())

    def search(self, text: str) -> list[Qualification]:
        needle = text.lower()
        return [q for q in self.qualifications if needle in q.skill.lower()]

    async def load(self, auth: AuthState) -> list[Qualification]:
        """Fetch the catalog; on failure the cached copy stays and ``[]`` is returned."""
        self.loading = True
        self.error = None
        try:
            result = await self.repository.list_qualifications(auth)
        finally:
            self.loading = False

        if isinstance(result, Err):
            self.error = result.error
            return []

        if self._closed:
            logger.debug("Catalog closed — dropping late qualification response")
            return result.value

        self.qualifications = result.value
        return result.value

    async def ensure(self, label: str, auth: AuthState) -> Result[EnsuredQualification]:
        normalized = label.strip()
        if not normalized:
            return Err(EMPTY_LABEL_MESSAGE, status=400)

        existing = find_qualification(self.qualifications, normalized)
        if existing is not None:
            return Ok(EnsuredQualification(qualification=existing, created=False))

        created = await self.repository.create_qualification(normalized, auth)
        if isinstance(created, Err):
            return created

        refreshed = await self.load(auth)
        located = find_qualification(refreshed, normalized)
        if located is not None:
            return Ok(EnsuredQualification(qualification=located, created=True))

        # Refresh did not see the new entry yet; keep the created record locally.
        fallback = created.value
        logger.info("Qualification %r missing after refresh — merging id=%d locally", normalized, fallback.id)
        if not any(q.id == fallback.id for q in self.qualifications):
            self.qualifications = [*self.qualifications, fallback]
        return Ok(EnsuredQualification(qualification=fallback, created=True))

    async def create(self, label: str, auth: AuthState) -> Result[Qualification]:
        normalized = label.strip()
        if not normalized:
            return Err(EMPTY_LABEL_MESSAGE, status=400)

        result = await self.repository.create_qualification(normalized, auth)
        if isinstance(result, Ok):
            await self.load(auth)
        return result

    async def rename(self, qualification_id: int, label: str, auth: AuthState) -> Result[Qualification]:
        normalized = label.strip()
        if not normalized:
            return Err(EMPTY_LABEL_MESSAGE, status=400)

        result = await self.repository.update_qualification(qualification_id, normalized, auth)
        if isinstance(result, Ok):
            await self.load(auth)
        return result

    async def delete(
        self,
        qualification: Qualification,
        auth: AuthState,
        employees: Sequence[Employee] | None = None,
    ) -> Result[DeletionReport]:
        """Detach ``qualification`` from every employee holding it, then delete it.

        Detach failures are collected in the report and do not stop the
        deletion. If ``employees`` is not given the current list is fetched;
        when that fails nothing is deleted.
        """
        if employees is None:
            listed = await self.repository.list_employees(auth)
            if isinstance(listed, Err):
                return listed
            employees = listed.value

        referencing = [e for e in employees if has_label(e.qualifikationen, qualification.skill)]
        outcomes = await asyncio.gather(
            *(self.repository.detach_qualification(e.id, qualification.id, auth) for e in referencing),
            return_exceptions=True,
        )

        report = DeletionReport(qualification=qualification)
        for employee, outcome in zip(referencing, outcomes):
            if isinstance(outcome, BaseException) and not isinstance(outcome, Exception):
                raise outcome
            if isinstance(outcome, Exception):
                logger.error(
                    "Detaching qualification %d from employee %s raised",
                    qualification.id,
                    employee.id,
                    exc_info=outcome,
                )
                report.failed_detaches[employee.id] = GENERIC_ERROR_MESSAGE
            elif isinstance(outcome, Err):
                logger.warning(
                    "Detaching qualification %d from employee %s failed: %s",
                    qualification.id,
                    employee.id,
                    outcome.error,
                )
                report.failed_detaches[employee.id] = outcome.error
            else:
                report.detached_employee_ids.append(employee.id)

        deleted = await self.repository.delete_qualification(qualification.id, auth)
        if isinstance(deleted, Err):
            return deleted

        self.qualifications = [q for q in self.qualifications if q.id != qualification.id]
        await self.load(auth)
        return Ok(report)
