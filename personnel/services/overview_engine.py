"""State machine behind the employee overview screen.

One ``EmployeeOverview`` per screen instance. The observable state is
``filters``, ``sort_key``, ``sort_direction``, ``current_page`` and
``items_per_page``; everything shown on screen is derived from it through
filter -> sort -> paginate. Each transition ends in ``_commit``, which
clamps the page, writes the persisted snapshot and informs listeners.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Sequence

from personnel.core.result import Err, Result
from personnel.models.auth import AuthState
from personnel.models.employee import Employee
from personnel.models.overview import (
    EmployeeFilters,
    FilterChip,
    FilterKey,
    LayoutMetrics,
    OverviewView,
    PersistedOverviewState,
    SortDirection,
    SortKey,
)
from personnel.services import overview_model as model
from personnel.services.debounce import Debouncer
from personnel.services.notification_service import NotificationCenter
from personnel.services.personnel_repository import PersonnelRepository
from personnel.services.state_store import KeyValueStore

logger = logging.getLogger(__name__)

Listener = Callable[["EmployeeOverview"], None]
LayoutProbe = Callable[[], LayoutMetrics | None]


class EmployeeOverview:
    def __init__(
        self,
        store: KeyValueStore,
        *,
        debounce_ms: int = model.FILTER_DEBOUNCE_MS,
        layout_probe: LayoutProbe | None = None,
        state_key: str = model.OVERVIEW_STATE_KEY,
    ) -> None:
        self.store = store
        self.state_key = state_key
        self.layout_probe = layout_probe

        persisted = model.load_persisted_overview_state(store, state_key)
        self.filters: EmployeeFilters = persisted.filters if persisted else model.DEFAULT_FILTERS
        self.sort_key: SortKey | None = persisted.sort_key if persisted else None
        self.sort_direction: SortDirection = persisted.sort_direction if persisted else "asc"
        self.current_page: int = persisted.current_page if persisted else 1
        self.items_per_page: int = model.DEFAULT_ITEMS_PER_PAGE
        self.is_mobile_layout = False

        # Filters the derived lists actually use (text inputs lag behind by the debounce delay).
        self.applied_filters: EmployeeFilters = self.filters

        self.employees: list[Employee] = []
        self.loaded = False
        self.loading = False
        self.error: str | None = None

        self._listeners: list[Listener] = []
        self._closed = False
        self._debouncers: dict[FilterKey, Debouncer[str]] = {
            key: Debouncer(
                getattr(self.filters, key),
                debounce_ms / 1000,
                on_settle=lambda value, key=key: self._apply_filter(key, value),
            )
            for key in model.DEBOUNCED_FILTER_KEYS
        }

    async def __aenter__(self) -> EmployeeOverview:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        for debouncer in self._debouncers.values():
            debouncer.close()
        self._listeners.clear()
        self._closed = True

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def dispose() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return dispose

    # -- derived views -----------------------------------------------------

    @property
    def filtered_employees(self) -> list[Employee]:
        return model.filter_employees(self.employees, self.applied_filters)

    @property
    def sorted_employees(self) -> list[Employee]:
        return model.sort_employees(self.filtered_employees, self.sort_key, self.sort_direction)

    @property
    def total_employees(self) -> int:
        return len(self.filtered_employees)

    @property
    def total_pages(self) -> int:
        return model.total_pages(self.total_employees, self.items_per_page)

    @property
    def paginated_employees(self) -> list[Employee]:
        return model.paginate(self.sorted_employees, self.current_page, self.items_per_page)

    @property
    def max_visible_page_buttons(self) -> int:
        if self.is_mobile_layout:
            return model.MOBILE_VISIBLE_PAGE_BUTTONS
        return model.MAX_VISIBLE_PAGE_BUTTONS

    @property
    def visible_page_numbers(self) -> list[int]:
        return model.visible_page_numbers(self.total_pages, self.current_page, self.max_visible_page_buttons)

    @property
    def has_filters(self) -> bool:
        return model.has_active_filters(self.filters)

    @property
    def active_filter_chips(self) -> list[FilterChip]:
        return model.active_filter_chips(self.filters)

    @property
    def qualification_options(self) -> list[str]:
        return model.qualification_options(self.employees)

    @property
    def empty_state_message(self) -> str | None:
        if self.total_employees > 0:
            return None
        return model.empty_state_message(self.has_filters)

    def sort_indicator(self, key: SortKey) -> str:
        if self.sort_key != key:
            return ""
        return " ▲" if self.sort_direction == "asc" else " ▼"

    def snapshot(self) -> PersistedOverviewState:
        return PersistedOverviewState(
            filters=self.filters,
            sort_key=self.sort_key,
            sort_direction=self.sort_direction,
            current_page=self.current_page,
        )

    def view(self) -> OverviewView:
        sorted_employees = self.sorted_employees
        return OverviewView(
            filters=self.filters,
            applied_filters=self.applied_filters,
            sort_key=self.sort_key,
            sort_direction=self.sort_direction,
            current_page=self.current_page,
            items_per_page=self.items_per_page,
            total_employees=len(sorted_employees),
            total_pages=self.total_pages,
            visible_page_numbers=self.visible_page_numbers,
            employees=model.paginate(sorted_employees, self.current_page, self.items_per_page),
            active_filter_chips=self.active_filter_chips,
            qualification_options=self.qualification_options,
            has_filters=self.has_filters,
            empty_state_message=self.empty_state_message,
            is_mobile_layout=self.is_mobile_layout,
            loading=self.loading,
            error=self.error,
        )

    # -- transitions -------------------------------------------------------

    def set_filter(self, key: FilterKey, value: str) -> None:
        if self._closed:
            return
        chip_count = len(self.active_filter_chips)
        self.filters = self.filters.model_copy(update={key: value})

        if key in self._debouncers:
            self._debouncers[key].schedule(value)
        else:
            self._apply_filter(key, value)

        if len(self.active_filter_chips) != chip_count:
            self._relayout()
        self._commit()

    def clear_filter(self, key: FilterKey) -> None:
        self.set_filter(key, "")
        self.current_page = 1
        self._commit()

    def reset_filters(self) -> None:
        for key in model.FILTER_KEYS:
            if getattr(self.filters, key) != "":
                self.set_filter(key, "")
        self.current_page = 1
        self._commit()

    def handle_sort(self, key: SortKey) -> None:
        if self.sort_key == key:
            self.sort_direction = "desc" if self.sort_direction == "asc" else "asc"
        else:
            self.sort_key = key
            self.sort_direction = "asc"
        self._relayout()
        self._commit()

    def select_sort(self, value: str | None) -> None:
        if not value:
            self.sort_key = None
        elif model.is_sort_key(value):
            self.sort_key = value  # type: ignore[assignment]
            self.sort_direction = "asc"
        else:
            return
        self._relayout()
        self._commit()

    def go_to_page(self, page: int) -> None:
        self.current_page = min(max(1, page), self.total_pages)
        self._commit()

    def next_page(self) -> None:
        self.go_to_page(self.current_page + 1)

    def previous_page(self) -> None:
        self.go_to_page(self.current_page - 1)

    def set_employees(self, employees: Sequence[Employee]) -> None:
        count_changed = len(employees) != len(self.employees)
        self.employees = list(employees)
        self.loaded = True
        if count_changed:
            self._relayout()
        self._commit()

    def set_mobile_layout(self, is_mobile: bool) -> None:
        if self.is_mobile_layout == is_mobile:
            return
        self.is_mobile_layout = is_mobile
        self._relayout()
        self._commit()

    def handle_resize(self) -> None:
        self._relayout()
        self._commit()

    def recalculate_items_per_page(self, metrics: LayoutMetrics | None = None) -> int:
        self._relayout(metrics)
        self._commit()
        return self.items_per_page

    def apply_layout(self, metrics: LayoutMetrics, is_mobile: bool | None = None) -> None:
        if is_mobile is not None:
            self.is_mobile_layout = is_mobile
        self.recalculate_items_per_page(metrics)

    def flush_filters(self) -> None:
        """Apply pending text filter input without waiting for the debounce delay."""
        for debouncer in self._debouncers.values():
            debouncer.flush()

    # -- remote ------------------------------------------------------------

    async def refresh(self, repository: PersonnelRepository, auth: AuthState) -> None:
        self.loading = True
        self.error = None
        try:
            result = await repository.list_employees(auth)
        finally:
            self.loading = False

        if self._closed:
            logger.debug("Overview closed — dropping late employee list")
            return

        if isinstance(result, Err):
            self.error = result.error
            self._notify()
            return

        self.set_employees(result.value)

    async def delete_employee(
        self,
        employee_id: str,
        repository: PersonnelRepository,
        auth: AuthState,
        notifications: NotificationCenter,
    ) -> Result[None]:
        result = await repository.delete_employee(employee_id, auth)
        if isinstance(result, Err):
            notifications.notify("error", "Löschen fehlgeschlagen", result.error)
            return result

        notifications.notify("success", "Mitarbeiter gelöscht")
        await self.refresh(repository, auth)
        return result

    # -- internals ---------------------------------------------------------

    def _apply_filter(self, key: FilterKey, value: str) -> None:
        if getattr(self.applied_filters, key) == value:
            return
        self.applied_filters = self.applied_filters.model_copy(update={key: value})
        self.current_page = 1
        self._relayout()
        self._commit()

    def _relayout(self, metrics: LayoutMetrics | None = None) -> None:
        """Best-effort fit of rows into the measured results area.

        Mobile layouts use a fixed card count. Without usable measurements
        the current value is kept.
        """
        if self.is_mobile_layout:
            self.items_per_page = model.MOBILE_ITEMS_PER_PAGE
            return

        if metrics is None and self.layout_probe is not None:
            metrics = self.layout_probe()
        if metrics is None or metrics.results_height <= 0:
            return

        row_height = metrics.first_row_height or model.DESKTOP_ROW_FALLBACK_HEIGHT
        available_height = max(metrics.results_height - metrics.header_height, row_height)
        self.items_per_page = max(
            model.MIN_ITEMS_PER_PAGE,
            math.floor(available_height / max(row_height, 1)),
        )

    def _clamp_page(self) -> None:
        # The seeded page is kept until the first list arrives.
        if self.loaded and self.current_page > self.total_pages:
            self.current_page = self.total_pages

    def _persist(self) -> None:
        try:
            self.store.set(self.state_key, model.serialize_overview_state(self.snapshot()))
        except Exception:
            logger.warning("Could not persist overview state", exc_info=True)

    def _commit(self) -> None:
        if self._closed:
            return
        self._clamp_page()
        self._persist()
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)
