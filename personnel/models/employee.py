"""Employee and qualification models, plus the remote REST API wire shapes."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class EmployeeFormData(BaseModel):
    """Employee without identity, used for create and edit."""

    vorname: str = ""
    nachname: str = ""
    telefonnummer: str = ""
    standort: str = ""
    street: str = ""
    postcode: str = ""
    qualifikationen: list[str] = Field(default_factory=list)


class Employee(EmployeeFormData):
    """Employee record as held by the client."""

    id: str


class Qualification(BaseModel):
    id: int
    skill: str


class QualificationApiItem(Qualification):
    """Qualification entry as embedded in employee responses."""


class QualificationApiPayload(BaseModel):
    skill: str


class QualificationLabelRequest(BaseModel):
    label: str = Field(min_length=1)


class EmployeeApiResponse(BaseModel):
    """Employee as returned by the remote API."""

    model_config = ConfigDict(populate_by_name=True)

    id: int | str
    first_name: str | None = Field(default=None, alias="firstName")
    last_name: str | None = Field(default=None, alias="lastName")
    phone: str | None = None
    city: str | None = None
    street: str | None = None
    postcode: str | None = None
    skill_set: list[QualificationApiItem] | None = Field(default=None, alias="skillSet")


class EmployeeApiPayload(BaseModel):
    """Request body for create/update; unset fields are omitted."""

    model_config = ConfigDict(populate_by_name=True)

    first_name: str | None = Field(default=None, alias="firstName")
    last_name: str | None = Field(default=None, alias="lastName")
    phone: str | None = None
    city: str | None = None
    street: str | None = None
    postcode: str | None = None
    skill_set: list[int] | None = Field(default=None, alias="skillSet")


def from_employee_api_response(api_employee: EmployeeApiResponse) -> Employee:
    return Employee(
        id=str(api_employee.id),
        vorname=api_employee.first_name or "",
        nachname=api_employee.last_name or "",
        telefonnummer=api_employee.phone or "",
        standort=api_employee.city or "",
        street=api_employee.street or "",
        postcode=api_employee.postcode or "",
        qualifikationen=[item.skill for item in api_employee.skill_set or []],
    )


def to_employee_api_payload(
    data: EmployeeFormData,
    qualification_by_skill: dict[str, int],
) -> EmployeeApiPayload:
    # Labels without a known catalog id are dropped, not sent as names.
    skill_ids = [
        qualification_by_skill[skill]
        for skill in data.qualifikationen
        if skill in qualification_by_skill
    ]
    return EmployeeApiPayload(
        first_name=data.vorname,
        last_name=data.nachname,
        phone=data.telefonnummer,
        city=data.standort,
        street=data.street,
        postcode=data.postcode,
        skill_set=skill_ids,
    )
