"""Create/edit form state for employees: validation, dirty tracking, qualification picking."""

from __future__ import annotations

import inspect
import logging
import re
from typing import Awaitable, Callable, Literal, Union

from personnel.core.result import Err
from personnel.models.auth import AuthState
from personnel.models.employee import Employee, EmployeeFormData
from personnel.services.notification_service import NotificationCenter
from personnel.services.qualification_catalog import QualificationCatalog, add_unique_label, has_label

logger = logging.getLogger(__name__)

EmployeeFieldName = Literal["vorname", "nachname", "telefonnummer", "standort", "street", "postcode"]

BASIC_FORM_FIELDS: tuple[EmployeeFieldName, ...] = (
    "vorname",
    "nachname",
    "telefonnummer",
    "standort",
    "street",
    "postcode",
)

POSTCODE_PATTERN = re.compile(r"^[0-9]{5}$")
PHONE_PATTERN = re.compile(r"^[0-9+()\-/\s]{6,20}$")

CREATE_QUALIFICATION_OPTION = "__create_new__"
OVERVIEW_ROUTE = "/employees"

SUMMARY_MESSAGE = "Bitte korrigieren Sie die markierten Felder."
DUPLICATE_QUALIFICATION_MESSAGE = "Diese Qualifikation ist dem Mitarbeiter bereits zugewiesen."
EMPTY_QUALIFICATION_MESSAGE = "Bitte geben Sie eine Qualifikation ein."

SubmitHandler = Callable[[EmployeeFormData], Union[Awaitable[object], object]]


def create_employee_form_data(initial: EmployeeFormData | None = None) -> EmployeeFormData:
    """Always a fully populated form model, blank where ``initial`` is missing."""
    if initial is None:
        return EmployeeFormData()
    return EmployeeFormData(
        vorname=initial.vorname,
        nachname=initial.nachname,
        telefonnummer=initial.telefonnummer,
        standort=initial.standort,
        street=initial.street,
        postcode=initial.postcode,
        qualifikationen=list(initial.qualifikationen),
    )


def to_employee_form_data(employee: Employee) -> EmployeeFormData:
    return create_employee_form_data(EmployeeFormData.model_validate(employee.model_dump(exclude={"id"})))


def validate_employee_form(data: EmployeeFormData) -> dict[EmployeeFieldName, str]:
    errors: dict[EmployeeFieldName, str] = {}

    if not data.vorname.strip():
        errors["vorname"] = "Bitte geben Sie einen Vornamen ein."
    if not data.nachname.strip():
        errors["nachname"] = "Bitte geben Sie einen Nachnamen ein."
    if not data.standort.strip():
        errors["standort"] = "Bitte geben Sie einen Ort ein."
    if not data.street.strip():
        errors["street"] = "Bitte geben Sie eine Straße ein."
    if not POSTCODE_PATTERN.match(data.postcode.strip()):
        errors["postcode"] = "Bitte geben Sie eine 5-stellige PLZ ein."
    if not PHONE_PATTERN.match(data.telefonnummer.strip()):
        errors["telefonnummer"] = "Bitte geben Sie eine gültige Telefonnummer ein."

    return errors


def are_employee_form_data_equal(left: EmployeeFormData, right: EmployeeFormData) -> bool:
    if any(getattr(left, field) != getattr(right, field) for field in BASIC_FORM_FIELDS):
        return False
    # Order of qualifications counts: a reordered list is a change.
    return left.qualifikationen == right.qualifikationen


class EmployeeForm:
    """One create or edit form.

    Field errors are computed on every change but only shown once the
    field was touched or a submit was attempted.
    """

    def __init__(
        self,
        catalog: QualificationCatalog,
        notifications: NotificationCenter,
        initial: EmployeeFormData | None = None,
        *,
        navigate: Callable[[str], None] | None = None,
        cancel_route: str = OVERVIEW_ROUTE,
    ) -> None:
        self.catalog = catalog
        self.notifications = notifications
        self.navigate = navigate
        self.cancel_route = cancel_route
        self.reset(initial)

    def reset(self, initial: EmployeeFormData | None = None) -> None:
        self.baseline = create_employee_form_data(initial)
        self.data = create_employee_form_data(initial)
        self.touched: set[EmployeeFieldName] = set()
        self.submit_attempted = False
        self.is_submitting = False
        self.selected_qualification = ""
        self.new_qualification_name = ""
        self.new_qualification_error: str | None = None
        self.is_creating_qualification = False
        self.show_cancel_confirm = False

    @property
    def errors(self) -> dict[EmployeeFieldName, str]:
        return validate_employee_form(self.data)

    @property
    def has_validation_errors(self) -> bool:
        return bool(self.errors)

    @property
    def is_dirty(self) -> bool:
        return not are_employee_form_data_equal(self.data, self.baseline)

    @property
    def is_busy(self) -> bool:
        return self.is_submitting or self.is_creating_qualification

    @property
    def summary_message(self) -> str | None:
        if self.submit_attempted and self.has_validation_errors:
            return SUMMARY_MESSAGE
        return None

    def show_field_error(self, field: EmployeeFieldName) -> bool:
        return field in self.errors and (field in self.touched or self.submit_attempted)

    def visible_errors(self) -> dict[EmployeeFieldName, str]:
        return {field: message for field, message in self.errors.items() if self.show_field_error(field)}

    def set_field(self, field: EmployeeFieldName, value: str) -> None:
        self.data = self.data.model_copy(update={field: value})

    def mark_touched(self, field: EmployeeFieldName) -> None:
        self.touched.add(field)

    # -- qualifications ----------------------------------------------------

    @property
    def selectable_qualifications(self) -> list[str]:
        assigned = set(self.data.qualifikationen)
        return [label for label in self.catalog.labels if label not in assigned]

    @property
    def is_create_qualification_selected(self) -> bool:
        return self.selected_qualification == CREATE_QUALIFICATION_OPTION

    @property
    def can_add_qualification(self) -> bool:
        if self.is_busy or not self.selected_qualification:
            return False
        return not self.is_create_qualification_selected or bool(self.new_qualification_name.strip())

    def select_qualification(self, value: str) -> None:
        self.selected_qualification = value
        self.new_qualification_error = None

    def remove_qualification(self, label: str) -> None:
        self.data = self.data.model_copy(
            update={"qualifikationen": [entry for entry in self.data.qualifikationen if entry != label]}
        )

    def _fold_qualification(self, label: str) -> None:
        self.data = self.data.model_copy(
            update={"qualifikationen": add_unique_label(self.data.qualifikationen, label)}
        )
        self.selected_qualification = ""
        self.new_qualification_name = ""
        self.new_qualification_error = None

    async def add_qualification(self, auth: AuthState) -> bool:
        if self.is_busy:
            return False

        if self.selected_qualification and not self.is_create_qualification_selected:
            self._fold_qualification(self.selected_qualification)
            return True

        normalized = self.new_qualification_name.strip()
        if not normalized:
            self.new_qualification_error = EMPTY_QUALIFICATION_MESSAGE
            return False

        if has_label(self.data.qualifikationen, normalized):
            self.new_qualification_error = DUPLICATE_QUALIFICATION_MESSAGE
            return False

        self.is_creating_qualification = True
        self.new_qualification_error = None
        try:
            result = await self.catalog.ensure(normalized, auth)
        finally:
            self.is_creating_qualification = False

        if isinstance(result, Err):
            self.new_qualification_error = result.error
            self.notifications.notify("error", "Qualifikation konnte nicht erstellt werden", result.error)
            return False

        ensured = result.value
        self._fold_qualification(ensured.qualification.skill)
        self.notifications.notify(
            "success",
            "Qualifikation erstellt und hinzugefügt" if ensured.created else "Vorhandene Qualifikation hinzugefügt",
            ensured.qualification.skill,
        )
        return True

    # -- submit / cancel ---------------------------------------------------

    async def submit(self, on_submit: SubmitHandler) -> bool:
        """Hand the data to ``on_submit`` unless validation fails or the form is busy.

        The handler owns the remote call and its success or error outcome.
        """
        if self.is_busy:
            logger.debug("Submit ignored while the form is busy")
            return False
        self.submit_attempted = True
        if self.has_validation_errors:
            logger.debug("Submit blocked by %d validation errors", len(self.errors))
            return False

        self.is_submitting = True
        try:
            outcome = on_submit(create_employee_form_data(self.data))
            if inspect.isawaitable(outcome):
                await outcome
        finally:
            self.is_submitting = False
        return True

    def request_cancel(self) -> bool:
        """Leave right away when clean; otherwise ask for confirmation first."""
        if self.is_busy:
            return False
        if not self.is_dirty:
            self._leave()
            return True
        self.show_cancel_confirm = True
        return False

    def confirm_cancel(self) -> None:
        self.show_cancel_confirm = False
        self._leave()

    def dismiss_cancel(self) -> None:
        self.show_cancel_confirm = False

    def _leave(self) -> None:
        if self.navigate is not None:
            self.navigate(self.cancel_route)
