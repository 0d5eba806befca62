"""REST client for the personnel API (employees and qualifications).

Every call returns a ``Result``: transport failures, non-2xx statuses and
missing authentication come back as ``Err`` with a user-facing message;
nothing is raised across this boundary.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiohttp
from pydantic import TypeAdapter, ValidationError

from personnel.core.auth import MISSING_CREDENTIAL_MESSAGE, NOT_AUTHENTICATED_MESSAGE
from personnel.core.config import Settings
from personnel.core.result import GENERIC_ERROR_MESSAGE, Err, Ok, Result
from personnel.models.auth import AuthState
from personnel.models.employee import (
    Employee,
    EmployeeApiResponse,
    EmployeeFormData,
    Qualification,
    QualificationApiPayload,
    from_employee_api_response,
    to_employee_api_payload,
)

logger = logging.getLogger(__name__)

_EMPLOYEE_LIST = TypeAdapter(list[EmployeeApiResponse])
_QUALIFICATION_LIST = TypeAdapter(list[Qualification])

SESSION_MESSAGE = "Ihre Sitzung ist abgelaufen oder Sie haben keine Berechtigung."
SERVER_UNAVAILABLE_MESSAGE = "Der Server ist aktuell nicht erreichbar. Bitte später erneut versuchen."

EMPLOYEE_MESSAGES = {
    404: "Der angeforderte Datensatz wurde nicht gefunden.",
    409: "Der Datensatz steht in Konflikt mit bestehenden Daten.",
}
QUALIFICATION_MESSAGES = {
    404: "Die gewünschte Qualifikation wurde nicht gefunden.",
    409: "Diese Qualifikation existiert bereits.",
}


def get_status_message(status: int, action_label: str, messages: dict[int, str] | None = None) -> str:
    messages = messages or EMPLOYEE_MESSAGES
    if status == 400:
        return f"{action_label} fehlgeschlagen. Bitte prüfen Sie die Eingaben."
    if status in (401, 403):
        return SESSION_MESSAGE
    if status in messages:
        return messages[status]
    if status >= 500:
        return SERVER_UNAVAILABLE_MESSAGE
    return f"{action_label} fehlgeschlagen."


def get_auth_headers(auth: AuthState) -> Result[dict[str, str]]:
    if not auth.is_authenticated:
        return Err(NOT_AUTHENTICATED_MESSAGE, status=401)
    if not auth.credential:
        return Err(MISSING_CREDENTIAL_MESSAGE, status=401)
    return Ok(
        {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {auth.credential}",
        }
    )


class PersonnelRepository:
    def __init__(self) -> None:
        self.initialized = False
        self.base_url = ""
        self.timeout_seconds = 30.0

    async def initialize(self, settings: Settings) -> None:
        if self.initialized:
            return

        if not settings.PERSONNEL_API_URL:
            logger.warning("PERSONNEL_API_URL missing — PersonnelRepository not initialized")
            return

        self.base_url = settings.PERSONNEL_API_URL.rstrip("/")
        self.timeout_seconds = settings.REQUEST_TIMEOUT_SECONDS
        self.initialized = True
        logger.info("PersonnelRepository initialized (base_url=%s)", self.base_url)

    async def close(self) -> None:
        self.initialized = False
        self.base_url = ""

    @property
    def employees_url(self) -> str:
        return f"{self.base_url}/employees"

    @property
    def qualifications_url(self) -> str:
        return f"{self.base_url}/qualifications"

    async def _request(
        self,
        method: str,
        url: str,
        auth: AuthState,
        action_label: str,
        *,
        payload: dict[str, Any] | None = None,
        messages: dict[int, str] | None = None,
        expect_body: bool = True,
    ) -> Result[Any]:
        headers = get_auth_headers(auth)
        if isinstance(headers, Err):
            return headers

        if not self.initialized:
            return Err(SERVER_UNAVAILABLE_MESSAGE, status=503)

        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.request(method, url, headers=headers.value, json=payload) as response:
                    if response.status >= 400:
                        message = get_status_message(response.status, action_label, messages)
                        logger.warning("%s %s failed: %d", method, url, response.status)
                        return Err(message, status=response.status)

                    if not expect_body:
                        return Ok(None)
                    return Ok(await response.json())
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("%s %s failed: %s", method, url, e)
            return Err(str(e) or GENERIC_ERROR_MESSAGE, status=503)
        except ValueError:
            logger.exception("%s %s returned a malformed body", method, url)
            return Err(GENERIC_ERROR_MESSAGE, status=502)

    async def _qualification_lookup(self, auth: AuthState) -> Result[dict[str, int]]:
        result = await self.list_qualifications(auth)
        if isinstance(result, Err):
            return result
        return Ok({qualification.skill: qualification.id for qualification in result.value})

    def _parse_employee(self, data: Any) -> Result[Employee]:
        try:
            return Ok(from_employee_api_response(EmployeeApiResponse.model_validate(data)))
        except ValidationError:
            logger.exception("Unexpected employee payload")
            return Err(GENERIC_ERROR_MESSAGE, status=502)

    async def list_employees(self, auth: AuthState) -> Result[list[Employee]]:
        result = await self._request("GET", self.employees_url, auth, "Laden der Mitarbeiter")
        if isinstance(result, Err):
            return result
        try:
            items = _EMPLOYEE_LIST.validate_python(result.value)
        except ValidationError:
            logger.exception("Unexpected employee list payload")
            return Err(GENERIC_ERROR_MESSAGE, status=502)
        return Ok([from_employee_api_response(item) for item in items])

    async def get_employee(self, employee_id: str, auth: AuthState) -> Result[Employee]:
        result = await self._request(
            "GET",
            f"{self.employees_url}/{employee_id}",
            auth,
            "Laden des Mitarbeiters",
        )
        if isinstance(result, Err):
            return result
        return self._parse_employee(result.value)

    async def _save_employee(
        self,
        method: str,
        url: str,
        data: EmployeeFormData,
        auth: AuthState,
        action_label: str,
    ) -> Result[Employee]:
        headers = get_auth_headers(auth)
        if isinstance(headers, Err):
            return headers

        lookup: dict[str, int] = {}
        if data.qualifikationen:
            lookup_result = await self._qualification_lookup(auth)
            if isinstance(lookup_result, Err):
                return lookup_result
            lookup = lookup_result.value

        payload = to_employee_api_payload(data, lookup).model_dump(by_alias=True, exclude_none=True)
        result = await self._request(method, url, auth, action_label, payload=payload)
        if isinstance(result, Err):
            return result
        return self._parse_employee(result.value)

    async def create_employee(self, data: EmployeeFormData, auth: AuthState) -> Result[Employee]:
        return await self._save_employee(
            "POST",
            self.employees_url,
            data,
            auth,
            "Hinzufügen des Mitarbeiters",
        )

    async def update_employee(self, employee_id: str, data: EmployeeFormData, auth: AuthState) -> Result[Employee]:
        return await self._save_employee(
            "PUT",
            f"{self.employees_url}/{employee_id}",
            data,
            auth,
            "Speichern der Änderungen",
        )

    async def delete_employee(self, employee_id: str, auth: AuthState) -> Result[None]:
        return await self._request(
            "DELETE",
            f"{self.employees_url}/{employee_id}",
            auth,
            "Löschen des Mitarbeiters",
            expect_body=False,
        )

    async def detach_qualification(self, employee_id: str, qualification_id: int, auth: AuthState) -> Result[None]:
        return await self._request(
            "DELETE",
            f"{self.employees_url}/{employee_id}/qualifications/{qualification_id}",
            auth,
            "Löschen der Qualifikation eines Mitarbeiters",
            expect_body=False,
        )

    async def list_qualifications(self, auth: AuthState) -> Result[list[Qualification]]:
        result = await self._request(
            "GET",
            self.qualifications_url,
            auth,
            "Laden der Qualifikationen",
            messages=QUALIFICATION_MESSAGES,
        )
        if isinstance(result, Err):
            return result
        try:
            return Ok(_QUALIFICATION_LIST.validate_python(result.value))
        except ValidationError:
            logger.exception("Unexpected qualification list payload")
            return Err(GENERIC_ERROR_MESSAGE, status=502)

    async def _save_qualification(
        self,
        method: str,
        url: str,
        label: str,
        auth: AuthState,
        action_label: str,
    ) -> Result[Qualification]:
        result = await self._request(
            method,
            url,
            auth,
            action_label,
            payload=QualificationApiPayload(skill=label).model_dump(),
            messages=QUALIFICATION_MESSAGES,
        )
        if isinstance(result, Err):
            return result
        try:
            return Ok(Qualification.model_validate(result.value))
        except ValidationError:
            logger.exception("Unexpected qualification payload")
            return Err(GENERIC_ERROR_MESSAGE, status=502)

    async def create_qualification(self, label: str, auth: AuthState) -> Result[Qualification]:
        return await self._save_qualification(
            "POST",
            self.qualifications_url,
            label,
            auth,
            "Anlegen der Qualifikation",
        )

    async def update_qualification(self, qualification_id: int, label: str, auth: AuthState) -> Result[Qualification]:
        return await self._save_qualification(
            "PUT",
            f"{self.qualifications_url}/{qualification_id}",
            label,
            auth,
            "Bearbeiten der Qualifikation",
        )

    async def delete_qualification(self, qualification_id: int, auth: AuthState) -> Result[None]:
        return await self._request(
            "DELETE",
            f"{self.qualifications_url}/{qualification_id}",
            auth,
            "Löschen der Qualifikation",
            messages=QUALIFICATION_MESSAGES,
            expect_body=False,
        )

    async def check_connection(self) -> bool:
        """True if the API answers at all (any status below 500)."""
        if not self.initialized:
            return False
        try:
            timeout = aiohttp.ClientTimeout(total=10)
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.request("GET", self.qualifications_url) as response:
                    return response.status < 500
        except Exception:
            logger.exception("Personnel API connection check failed")
            return False


personnel_repository = PersonnelRepository()
