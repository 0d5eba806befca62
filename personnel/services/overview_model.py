"""Pure filter, sort and paging rules of the employee overview.

Nothing in here holds state; ``EmployeeOverview`` composes these functions
into the filter -> sort -> paginate pipeline and persists the UI state
through ``load_persisted_overview_state`` / ``serialize_overview_state``.
"""

from __future__ import annotations

import logging
import math
import unicodedata
from functools import cmp_to_key
from typing import Sequence

from pydantic import ValidationError

from personnel.models.employee import Employee
from personnel.models.overview import (
    EmployeeFilters,
    FilterChip,
    FilterKey,
    PersistedOverviewState,
    SortDirection,
    SortKey,
)
from personnel.services.state_store import KeyValueStore

logger = logging.getLogger(__name__)

OVERVIEW_STATE_KEY = "employeeOverview.uiState.v1"

DEFAULT_FILTERS = EmployeeFilters(vorname="", nachname="", standort="", qualifikation="")

FILTER_KEYS: tuple[FilterKey, ...] = ("vorname", "nachname", "standort", "qualifikation")
DEBOUNCED_FILTER_KEYS: tuple[FilterKey, ...] = ("vorname", "nachname", "standort")
SORT_KEYS: tuple[SortKey, ...] = ("vorname", "nachname", "standort")

FILTER_LABELS: dict[FilterKey, str] = {
    "vorname": "Vorname",
    "nachname": "Nachname",
    "standort": "Ort",
    "qualifikation": "Qualifikation",
}

SORT_OPTIONS: list[tuple[SortKey, str]] = [
    ("vorname", "Vorname"),
    ("nachname", "Nachname"),
    ("standort", "Ort"),
]

DEFAULT_ITEMS_PER_PAGE = 8
MIN_ITEMS_PER_PAGE = 1
DESKTOP_ROW_FALLBACK_HEIGHT = 52
MOBILE_ITEMS_PER_PAGE = 7
MAX_VISIBLE_PAGE_BUTTONS = 5
MOBILE_VISIBLE_PAGE_BUTTONS = 3
FILTER_DEBOUNCE_MS = 300

EMPTY_MESSAGE_FILTERED = "Keine Mitarbeiter mit den aktuellen Filtern gefunden."
EMPTY_MESSAGE_UNFILTERED = "Keine Mitarbeiter gefunden."


def normalize_filter_value(value: str) -> str:
    return value.strip().lower()


def is_sort_key(value: object) -> bool:
    return value in SORT_KEYS


def matches(employee: Employee, filters: EmployeeFilters) -> bool:
    """True if the employee satisfies every active filter.

    Name and city filters are case-insensitive substring checks; the
    qualification filter requires one assigned label to equal it exactly
    (case-insensitive).
    """
    vorname = normalize_filter_value(filters.vorname)
    nachname = normalize_filter_value(filters.nachname)
    standort = normalize_filter_value(filters.standort)
    qualifikation = normalize_filter_value(filters.qualifikation)

    if vorname and vorname not in employee.vorname.lower():
        return False
    if nachname and nachname not in employee.nachname.lower():
        return False
    if standort and standort not in employee.standort.lower():
        return False
    if qualifikation and not any(
        label.lower() == qualifikation for label in employee.qualifikationen
    ):
        return False
    return True


def filter_employees(employees: Sequence[Employee], filters: EmployeeFilters) -> list[Employee]:
    return [employee for employee in employees if matches(employee, filters)]


def collation_key(value: str) -> str:
    # Base strength: accents and case are ignored, "ß" folds to "ss".
    decomposed = unicodedata.normalize("NFKD", value)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold()


def locale_compare(left: str, right: str) -> int:
    left_key = collation_key(left)
    right_key = collation_key(right)
    if left_key < right_key:
        return -1
    if left_key > right_key:
        return 1
    return 0


def compare(left: Employee, right: Employee, sort_key: SortKey, direction: SortDirection = "asc") -> int:
    multiplier = 1 if direction == "asc" else -1
    return locale_compare(getattr(left, sort_key), getattr(right, sort_key)) * multiplier


def sort_employees(
    employees: Sequence[Employee],
    sort_key: SortKey | None,
    direction: SortDirection = "asc",
) -> list[Employee]:
    """Stable sort by one field; ``None`` keeps the incoming order."""
    if sort_key is None:
        return list(employees)
    return sorted(
        employees,
        key=cmp_to_key(lambda left, right: compare(left, right, sort_key, direction)),
    )


def total_pages(total_items: int, items_per_page: int) -> int:
    return max(1, math.ceil(total_items / max(items_per_page, 1)))


def paginate(items: Sequence[Employee], page: int, items_per_page: int) -> list[Employee]:
    start = (page - 1) * items_per_page
    return list(items[start : start + items_per_page])


def visible_page_numbers(total: int, current_page: int, window_size: int) -> list[int]:
    """Contiguous window of page numbers around ``current_page``.

    The window slides to stay inside ``[1, total]`` instead of centering
    exactly near either edge.
    """
    if total <= window_size:
        return list(range(1, total + 1))

    half_window = window_size // 2
    start = max(1, current_page - half_window)
    end = start + window_size - 1

    if end > total:
        end = total
        start = end - window_size + 1

    return list(range(start, end + 1))


def has_active_filters(filters: EmployeeFilters) -> bool:
    return any(getattr(filters, key).strip() for key in FILTER_KEYS)


def active_filter_chips(filters: EmployeeFilters) -> list[FilterChip]:
    chips: list[FilterChip] = []
    for key in FILTER_KEYS:
        value = getattr(filters, key).strip()
        if value:
            chips.append(FilterChip(key=key, label=FILTER_LABELS[key], value=value))
    return chips


def qualification_options(employees: Sequence[Employee]) -> list[str]:
    labels = {
        label.strip()
        for employee in employees
        for label in employee.qualifikationen
        if label.strip()
    }
    return sorted(labels, key=lambda label: (collation_key(label), label))


def empty_state_message(has_filters: bool) -> str:
    return EMPTY_MESSAGE_FILTERED if has_filters else EMPTY_MESSAGE_UNFILTERED


def parse_persisted_overview_state(raw: str | bytes | None) -> PersistedOverviewState | None:
    """Validate a stored blob; anything not exactly well-formed yields ``None``."""
    if not raw:
        return None
    try:
        return PersistedOverviewState.model_validate_json(raw, strict=True)
    except ValidationError as e:
        logger.debug("Discarding persisted overview state: %s", e.error_count())
        return None


def load_persisted_overview_state(
    store: KeyValueStore, key: str = OVERVIEW_STATE_KEY
) -> PersistedOverviewState | None:
    try:
        raw = store.get(key)
    except Exception:
        logger.warning("Overview state could not be read from store", exc_info=True)
        return None
    return parse_persisted_overview_state(raw)


def serialize_overview_state(state: PersistedOverviewState) -> str:
    return state.model_dump_json(by_alias=True)
