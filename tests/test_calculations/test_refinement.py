"""Tests for the search -> filter -> sort -> paginate pipeline."""

import logging

from minibi.calculations.refinement import (
    TableState,
    next_sort_direction,
    paginate,
    refine,
    search_rows,
    sort_rows,
)
from minibi.services.filters import ColumnFilter, SortDirection

ROWS = [
    {"id": 1, "name": "Alice", "city": "Boston", "amount": 5, "active": True},
    {"id": 2, "name": "Bob", "city": "Austin", "amount": 15, "active": False},
    {"id": 3, "name": "Carol", "city": "Boulder", "amount": 25, "active": True},
    {"id": 4, "name": "Dave", "city": None, "amount": 15, "active": True},
]


def ids(rows) -> list[int]:
    return [r["id"] for r in rows]


class TestSearch:
    def test_blank_term_keeps_everything(self):
        assert ids(search_rows(ROWS, "   ", ["name"])) == [1, 2, 3, 4]
        assert ids(search_rows(ROWS, None, ["name"])) == [1, 2, 3, 4]

    def test_matches_any_filterable_column(self):
        assert ids(search_rows(ROWS, "bo", ["name", "city"])) == [1, 2, 3]

    def test_term_is_trimmed_and_lowercased(self):
        assert ids(search_rows(ROWS, "  ALICE ", ["name"])) == [1]

    def test_only_filterable_columns_are_searched(self):
        assert ids(search_rows(ROWS, "boston", ["name"])) == []

    def test_numbers_are_searchable(self):
        assert ids(search_rows(ROWS, "15", ["amount"])) == [2, 4]


class TestSort:
    def test_ascending(self):
        assert ids(sort_rows(ROWS, "name", "asc")) == [1, 2, 3, 4]

    def test_descending(self):
        assert ids(sort_rows(ROWS, "amount", SortDirection.DESC)) == [3, 2, 4, 1]

    def test_stable_for_equal_keys(self):
        assert ids(sort_rows(ROWS, "amount", "asc")) == [1, 2, 4, 3]

    def test_no_direction_keeps_order(self):
        assert ids(sort_rows(ROWS, "amount", None)) == [1, 2, 3, 4]

    def test_none_sorts_first_ascending(self):
        assert ids(sort_rows(ROWS, "city", "asc")) == [4, 2, 1, 3]

    def test_none_sorts_last_descending(self):
        assert ids(sort_rows(ROWS, "city", "desc")) == [3, 1, 2, 4]

    def test_single_none_does_not_break_ordering(self):
        rows = [{"v": 3}, {"v": None}, {"v": 1}, {"v": 2}]
        assert [r["v"] for r in sort_rows(rows, "v", "asc")] == [None, 1, 2, 3]

    def test_case_sensitive_native_ordering(self):
        rows = [{"v": "b"}, {"v": "B"}, {"v": "a"}]
        assert [r["v"] for r in sort_rows(rows, "v", "asc")] == ["B", "a", "b"]


class TestRefine:
    def test_column_filter_between(self):
        f = ColumnFilter(column="amount", type="number", operator="between", value=10, value_to=20)
        result = refine(ROWS, "", ["name"], [f], None, None)
        assert ids(result) == [2, 4]

    def test_column_filters_combine_with_and(self):
        filters = [
            ColumnFilter(column="amount", type="number", operator="greaterThan", value=10),
            ColumnFilter(column="active", type="boolean", operator="isTrue"),
        ]
        assert ids(refine(ROWS, "", [], filters, None, None)) == [3, 4]

    def test_search_then_filter_then_sort(self):
        f = ColumnFilter(column="active", type="boolean", operator="isTrue")
        result = refine(ROWS, "o", ["name", "city"], [f], "amount", "desc")
        assert ids(result) == [3, 1]

    def test_deterministic(self):
        f = ColumnFilter(column="amount", type="number", operator="lessThan", value=20)
        args = (ROWS, "a", ["name", "city"], [f], "name", "desc")
        assert refine(*args) == refine(*args)

    def test_does_not_mutate_input(self):
        rows = list(ROWS)
        refine(rows, "", [], [], "amount", "desc")
        assert rows == ROWS

    def test_unknown_operator_policy(self):
        f = ColumnFilter(column="name", type="string", operator="fuzzy", value="x")
        assert refine(ROWS, "", [], [f], None, None) == []
        assert len(refine(ROWS, "", [], [f], None, None, unknown_operator="include")) == 4

    def test_unknown_operator_warns_once_per_filter(self, caplog):
        f = ColumnFilter(column="name", type="string", operator="fuzzy", value="x")
        with caplog.at_level(logging.WARNING):
            refine(ROWS, "", [], [f], None, None)
        warnings = [r for r in caplog.records if "unknown operator" in r.getMessage()]
        assert len(warnings) == 1


class TestPaginate:
    def test_slices_page(self):
        page = paginate(list(range(1, 8)), page=2, page_size=3)
        assert page.rows == [4, 5, 6]
        assert page.total_count == 7
        assert page.total_pages == 3

    def test_last_partial_page(self):
        assert paginate(list(range(7)), page=3, page_size=3).rows == [6]

    def test_empty_rows_have_one_page(self):
        page = paginate([], page=1, page_size=10)
        assert page.rows == []
        assert page.total_pages == 1

    def test_page_below_one_is_first_page(self):
        assert paginate([1, 2, 3], page=0, page_size=2).page == 1


class TestSortCycle:
    def test_tri_state(self):
        assert next_sort_direction(None) == SortDirection.ASC
        assert next_sort_direction("asc") == SortDirection.DESC
        assert next_sort_direction("desc") is None

    def test_binary(self):
        assert next_sort_direction(None, "binary") == SortDirection.ASC
        assert next_sort_direction("asc", "binary") == SortDirection.DESC
        assert next_sort_direction("desc", "binary") == SortDirection.ASC


class TestTableState:
    def make_state(self, **kwargs) -> TableState:
        state = TableState(page_size=2, **kwargs)
        state.view(ROWS, ["name"])
        state.go_to_page(2)
        return state

    def test_view_returns_requested_page(self):
        state = self.make_state()
        page = state.view(ROWS, ["name"])
        assert ids(page.rows) == [3, 4]
        assert page.total_pages == 2

    def test_search_change_resets_page(self):
        state = self.make_state()
        state.set_search("a")
        assert state.page == 1

    def test_same_search_keeps_page(self):
        state = self.make_state()
        state.set_search("")
        assert state.page == 2

    def test_sort_change_resets_page(self):
        state = self.make_state()
        state.toggle_sort("amount")
        assert state.page == 1
        assert state.sort_direction == SortDirection.ASC

    def test_filter_change_resets_page(self):
        state = self.make_state()
        state.add_column_filter(ColumnFilter(column="active", type="boolean", operator="isTrue"))
        assert state.page == 1

    def test_removing_filter_resets_page(self):
        state = self.make_state()
        state.add_column_filter(ColumnFilter(column="active", type="boolean", operator="isTrue"))
        state.go_to_page(2)
        state.remove_column_filter("active")
        assert state.page == 1
        assert state.column_filters == []

    def test_data_change_resets_page(self):
        state = self.make_state()
        page = state.view(ROWS + [{"id": 5, "name": "Eve"}], ["name"])
        assert page.page == 1

    def test_same_data_keeps_page(self):
        state = self.make_state()
        assert state.view([dict(r) for r in ROWS], ["name"]).page == 2

    def test_tri_state_toggle_cycles_back_to_unsorted(self):
        state = TableState()
        state.toggle_sort("name")
        state.toggle_sort("name")
        assert state.sort_direction == SortDirection.DESC
        state.toggle_sort("name")
        assert state.sort_column is None
        assert state.sort_direction is None

    def test_binary_toggle_never_unsorts(self):
        state = TableState(sort_cycle="binary")
        for _ in range(3):
            state.toggle_sort("name")
        assert state.sort_column == "name"
        assert state.sort_direction == SortDirection.ASC

    def test_new_column_starts_cycle_over(self):
        state = TableState()
        state.toggle_sort("name")
        state.toggle_sort("name")
        state.toggle_sort("amount")
        assert state.sort_column == "amount"
        assert state.sort_direction == SortDirection.ASC
