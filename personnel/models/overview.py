"""Models for the employee overview: filters, sorting, persisted UI state and views."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from personnel.models.employee import Employee

FilterKey = Literal["vorname", "nachname", "standort", "qualifikation"]
SortKey = Literal["vorname", "nachname", "standort"]
SortDirection = Literal["asc", "desc"]


class EmployeeFilters(BaseModel):
    """Raw filter inputs; an empty value means the filter is inactive."""

    model_config = ConfigDict(frozen=True)

    vorname: str
    nachname: str
    standort: str
    qualifikation: str


class PersistedOverviewState(BaseModel):
    """Snapshot written to the key-value store after every transition."""

    model_config = ConfigDict(populate_by_name=True)

    filters: EmployeeFilters
    sort_key: SortKey | None = Field(alias="sortKey")
    sort_direction: SortDirection = Field(alias="sortDirection")
    current_page: int = Field(alias="currentPage", gt=0)


class LayoutMetrics(BaseModel):
    """Rendered heights (px) of the results area, table head and first row."""

    results_height: float = 0.0
    header_height: float = 0.0
    first_row_height: float | None = None


class FilterChip(BaseModel):
    key: FilterKey
    label: str
    value: str


class OverviewView(BaseModel):
    """Everything a renderer needs for one overview frame."""

    filters: EmployeeFilters
    applied_filters: EmployeeFilters
    sort_key: SortKey | None
    sort_direction: SortDirection
    current_page: int
    items_per_page: int
    total_employees: int
    total_pages: int
    visible_page_numbers: list[int]
    employees: list[Employee]
    active_filter_chips: list[FilterChip]
    qualification_options: list[str]
    has_filters: bool
    empty_state_message: str | None = None
    is_mobile_layout: bool = False
    loading: bool = False
    error: str | None = None


class FilterUpdateRequest(BaseModel):
    key: FilterKey
    value: str


class SortSelectRequest(BaseModel):
    key: str | None = None


class PageRequest(BaseModel):
    page: int = Field(..., ge=1)


class LayoutUpdateRequest(LayoutMetrics):
    is_mobile_layout: bool = False
