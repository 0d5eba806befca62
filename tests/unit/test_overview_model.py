from __future__ import annotations

import json

from personnel.models.overview import EmployeeFilters, PersistedOverviewState
from personnel.services import overview_model as model
from personnel.services.state_store import MemoryStore
from tests.conftest import make_employee


def _filters(**values: str) -> EmployeeFilters:
    return model.DEFAULT_FILTERS.model_copy(update=values)


def test_filter_name_is_case_insensitive_substring(sample_employees):
    result = model.filter_employees(sample_employees, _filters(vorname="  AN "))
    assert [e.id for e in result] == ["1"]


def test_filter_city_and_name_combine(sample_employees):
    result = model.filter_employees(sample_employees, _filters(standort="berlin", nachname="schm"))
    assert [e.id for e in result] == ["1"]


def test_filter_qualification_requires_exact_label(sample_employees):
    result = model.filter_employees(sample_employees, _filters(qualifikation="JAVA"))
    assert [e.id for e in result] == ["1", "3"]

    assert model.filter_employees(sample_employees, _filters(qualifikation="Jav")) == []


def test_empty_filters_keep_everything(sample_employees):
    assert model.filter_employees(sample_employees, model.DEFAULT_FILTERS) == sample_employees


def test_sort_by_last_name_ignores_accents(sample_employees):
    result = model.sort_employees(sample_employees, "nachname", "asc")
    assert [e.nachname for e in result] == ["Ahrens", "Müller", "Özdemir", "Schmidt"]


def test_sort_descending_reverses_order(sample_employees):
    result = model.sort_employees(sample_employees, "vorname", "desc")
    assert [e.vorname for e in result] == ["Dieter", "Clara", "Bernd", "Anna"]


def test_sort_is_stable_for_equal_keys():
    employees = [
        make_employee("1", "Zoe", "A", "Berlin"),
        make_employee("2", "Yan", "B", "berlin"),
        make_employee("3", "Xia", "C", "Aachen"),
    ]
    result = model.sort_employees(employees, "standort", "asc")
    assert [e.id for e in result] == ["3", "1", "2"]

    result = model.sort_employees(employees, "standort", "desc")
    assert [e.id for e in result] == ["1", "2", "3"]


def test_sort_without_key_keeps_input_order(sample_employees):
    assert model.sort_employees(sample_employees, None) == sample_employees


def test_locale_compare_treats_case_and_accents_as_equal():
    assert model.locale_compare("Éva", "eva") == 0
    assert model.locale_compare("a", "B") < 0
    assert model.locale_compare("Zeta", "alpha") > 0


def test_total_pages_is_at_least_one():
    assert model.total_pages(0, 8) == 1
    assert model.total_pages(8, 8) == 1
    assert model.total_pages(9, 8) == 2
    assert model.total_pages(12, 5) == 3


def test_paginate_returns_requested_slice():
    employees = [make_employee(str(i), f"V{i}", f"N{i}") for i in range(1, 13)]
    page = model.paginate(employees, 3, 5)
    assert [e.id for e in page] == ["11", "12"]
    assert model.paginate(employees, 4, 5) == []


def test_visible_page_numbers_windows():
    assert model.visible_page_numbers(3, 1, 5) == [1, 2, 3]
    assert model.visible_page_numbers(10, 1, 5) == [1, 2, 3, 4, 5]
    assert model.visible_page_numbers(10, 5, 5) == [3, 4, 5, 6, 7]
    assert model.visible_page_numbers(10, 10, 5) == [6, 7, 8, 9, 10]
    assert model.visible_page_numbers(10, 9, 3) == [8, 9, 10]


def test_active_filter_chips_follow_key_order():
    chips = model.active_filter_chips(_filters(qualifikation="Java", vorname=" Anna "))
    assert [(c.key, c.label, c.value) for c in chips] == [
        ("vorname", "Vorname", "Anna"),
        ("qualifikation", "Qualifikation", "Java"),
    ]


def test_whitespace_only_filter_is_inactive():
    assert not model.has_active_filters(_filters(standort="   "))
    assert model.has_active_filters(_filters(standort="x"))


def test_qualification_options_are_unique_and_sorted(sample_employees):
    assert model.qualification_options(sample_employees) == ["Java", "java", "Python", "SQL"]


def test_empty_state_message_depends_on_filters():
    assert model.empty_state_message(True) == model.EMPTY_MESSAGE_FILTERED
    assert model.empty_state_message(False) == model.EMPTY_MESSAGE_UNFILTERED


def test_parse_persisted_state_accepts_well_formed_blob():
    raw = json.dumps(
        {
            "filters": {"vorname": "", "nachname": "", "standort": "Berlin", "qualifikation": ""},
            "sortKey": "nachname",
            "sortDirection": "desc",
            "currentPage": 2,
        }
    )
    state = model.parse_persisted_overview_state(raw)

    assert state is not None
    assert state.filters.standort == "Berlin"
    assert state.sort_key == "nachname"
    assert state.sort_direction == "desc"
    assert state.current_page == 2


def test_parse_persisted_state_rejects_malformed_blobs():
    valid = {
        "filters": {"vorname": "", "nachname": "", "standort": "", "qualifikation": ""},
        "sortKey": None,
        "sortDirection": "asc",
        "currentPage": 1,
    }
    broken_variants = [
        "not json",
        json.dumps([1, 2, 3]),
        json.dumps({**valid, "sortKey": "telefonnummer"}),
        json.dumps({**valid, "sortDirection": "up"}),
        json.dumps({**valid, "currentPage": 0}),
        json.dumps({**valid, "currentPage": "2"}),
        json.dumps({**valid, "filters": {"vorname": 1, "nachname": "", "standort": "", "qualifikation": ""}}),
        json.dumps({k: v for k, v in valid.items() if k != "filters"}),
    ]
    for raw in broken_variants:
        assert model.parse_persisted_overview_state(raw) is None, raw


def test_load_persisted_state_survives_failing_store():
    class BrokenStore:
        def get(self, key):
            raise OSError("disk gone")

        def set(self, key, value):
            raise OSError("disk gone")

    assert model.load_persisted_overview_state(BrokenStore()) is None


def test_serialized_state_uses_camel_case_keys():
    state = PersistedOverviewState(
        filters=model.DEFAULT_FILTERS,
        sort_key="vorname",
        sort_direction="asc",
        current_page=3,
    )
    store = MemoryStore()
    store.set(model.OVERVIEW_STATE_KEY, model.serialize_overview_state(state))

    data = json.loads(store.get(model.OVERVIEW_STATE_KEY))
    assert data["sortKey"] == "vorname"
    assert data["currentPage"] == 3
    assert model.load_persisted_overview_state(store) == state


def test_pages_cover_every_employee_exactly_once():
    for total in (0, 1, 7, 8, 9, 23):
        employees = [make_employee(str(i), f"V{i}", f"N{i}") for i in range(total)]
        for per_page in (1, 2, 5, 8, 30):
            pages = model.total_pages(total, per_page)
            joined = [e for page in range(1, pages + 1) for e in model.paginate(employees, page, per_page)]
            assert joined == employees
            assert pages == max(1, -(-total // per_page))


def test_page_window_is_contiguous_and_in_bounds():
    for total in range(1, 15):
        for window in (1, 3, 5):
            for current in range(1, total + 1):
                pages = model.visible_page_numbers(total, current, window)
                assert len(pages) == min(total, window)
                assert pages == list(range(pages[0], pages[0] + len(pages)))
                assert pages[0] >= 1 and pages[-1] <= total
                assert current in pages


def test_filtering_twice_changes_nothing(sample_employees):
    filters = _filters(standort="berlin")
    once = model.filter_employees(sample_employees, filters)
    assert model.filter_employees(once, filters) == once
