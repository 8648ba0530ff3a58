"""Client-side row refinement: search, column filters, sort and pagination."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from functools import cmp_to_key
from typing import Any, Literal

from minibi.calculations.predicates import (
    UnknownOperatorPolicy,
    evaluate,
    is_known_operator,
    warn_unknown_operator,
)
from minibi.services.filters import ColumnFilter, PaginationParams, SortDirection
from minibi.utils.values import stringify

Row = Mapping[str, Any]
SortCycle = Literal["tri_state", "binary"]


@dataclass
class Page:
    """One page of refined rows plus the metadata a table footer needs."""

    rows: list[Row]
    page: int
    page_size: int
    total_count: int
    total_pages: int


def search_rows(rows: Sequence[Row], search_term: str | None, columns: Sequence[str]) -> list[Row]:
    """Keep rows where any of columns contains search_term (case-insensitive)."""
    term = (search_term or "").strip().lower()
    if not term:
        return list(rows)
    return [
        row
        for row in rows
        if any(term in stringify(row.get(col)).lower() for col in columns)
    ]


def filter_rows(
    rows: Sequence[Row],
    column_filters: Sequence[ColumnFilter],
    unknown_operator: UnknownOperatorPolicy = "exclude",
) -> list[Row]:
    """Keep rows that satisfy every column filter. Unknown operators warn once."""
    for column_filter in column_filters:
        if not is_known_operator(column_filter):
            warn_unknown_operator(column_filter, unknown_operator)

    return [
        row
        for row in rows
        if all(
            evaluate(row.get(f.column), f, unknown_operator) for f in column_filters
        )
    ]


def _native_compare(a: Any, b: Any) -> int:
    # None sorts before any value; other unorderable pairs compare equal
    if a is None or b is None:
        return (b is None) - (a is None)
    try:
        if a < b:
            return -1
        if a > b:
            return 1
    except TypeError:
        pass
    return 0


def sort_rows(
    rows: Sequence[Row],
    sort_column: str | None,
    sort_direction: SortDirection | str | None,
) -> list[Row]:
    """Stable sort on one column with plain < and > comparison."""
    if not sort_column or not sort_direction:
        return list(rows)

    descending = SortDirection(sort_direction) == SortDirection.DESC

    def compare(left: Row, right: Row) -> int:
        result = _native_compare(left.get(sort_column), right.get(sort_column))
        return -result if descending else result

    return sorted(rows, key=cmp_to_key(compare))


def refine(
    rows: Sequence[Row],
    search_term: str | None,
    filterable_columns: Sequence[str],
    column_filters: Sequence[ColumnFilter],
    sort_column: str | None,
    sort_direction: SortDirection | str | None,
    unknown_operator: UnknownOperatorPolicy = "exclude",
) -> list[Row]:
    """
    Search, then column filters, then sort.

    Returns a new list; the input rows are not modified. Identical arguments
    always give an identical result.
    """
    refined = search_rows(rows, search_term, filterable_columns)
    refined = filter_rows(refined, column_filters, unknown_operator)
    return sort_rows(refined, sort_column, sort_direction)


def paginate(rows: Sequence[Row], page: int, page_size: int) -> Page:
    """Slice one page out of rows. Pages start at 1."""
    page_size = max(page_size, 1)
    pagination = PaginationParams(page=max(page, 1), per_page=page_size)
    total = len(rows)
    total_pages = max((total + page_size - 1) // page_size, 1)

    return Page(
        rows=list(rows[pagination.offset : pagination.offset + page_size]),
        page=pagination.page,
        page_size=page_size,
        total_count=total,
        total_pages=total_pages,
    )


def next_sort_direction(
    current: SortDirection | str | None, cycle: SortCycle = "tri_state"
) -> SortDirection | None:
    """
    Direction after a column header is activated again.

    tri_state goes none -> asc -> desc -> none; binary flips asc and desc.
    """
    current = SortDirection(current) if current else None

    if cycle == "binary":
        return SortDirection.DESC if current == SortDirection.ASC else SortDirection.ASC

    if current is None:
        return SortDirection.ASC
    if current == SortDirection.ASC:
        return SortDirection.DESC
    return None


@dataclass
class TableState:
    """
    Per-session table state.

    Changing the data, the search term, the sort or the column filters sends
    the table back to page 1.
    """

    page_size: int = 25
    sort_cycle: SortCycle = "tri_state"
    search_term: str = ""
    column_filters: list[ColumnFilter] = field(default_factory=list)
    sort_column: str | None = None
    sort_direction: SortDirection | None = None
    page: int = 1
    _data_signature: tuple | None = field(default=None, repr=False, compare=False)

    def set_search(self, term: str) -> None:
        if term != self.search_term:
            self.search_term = term
            self.page = 1

    def set_column_filters(self, column_filters: Sequence[ColumnFilter]) -> None:
        new_filters = list(column_filters)
        if new_filters != self.column_filters:
            self.column_filters = new_filters
            self.page = 1

    def add_column_filter(self, column_filter: ColumnFilter) -> None:
        self.set_column_filters([*self.column_filters, column_filter])

    def remove_column_filter(self, column: str) -> None:
        self.set_column_filters([f for f in self.column_filters if f.column != column])

    def set_sort(self, column: str | None, direction: SortDirection | str | None) -> None:
        direction = SortDirection(direction) if direction else None
        if column is None:
            direction = None
        if (column, direction) != (self.sort_column, self.sort_direction):
            self.sort_column = column
            self.sort_direction = direction
            self.page = 1

    def toggle_sort(self, column: str) -> None:
        """Advance the sort cycle for column; a new column starts the cycle over."""
        current = self.sort_direction if column == self.sort_column else None
        direction = next_sort_direction(current, self.sort_cycle)
        self.set_sort(column if direction else None, direction)

    def go_to_page(self, page: int) -> None:
        self.page = max(page, 1)

    def view(
        self,
        rows: Sequence[Row],
        filterable_columns: Sequence[str],
        unknown_operator: UnknownOperatorPolicy = "exclude",
    ) -> Page:
        """Refine rows with the current state and return the active page."""
        signature = _signature(rows)
        if signature != self._data_signature:
            self._data_signature = signature
            self.page = 1

        refined = refine(
            rows,
            self.search_term,
            filterable_columns,
            self.column_filters,
            self.sort_column,
            self.sort_direction,
            unknown_operator,
        )
        return paginate(refined, self.page, self.page_size)


def _signature(rows: Sequence[Row]) -> tuple:
    return tuple(tuple(sorted((k, repr(v)) for k, v in row.items())) for row in rows)
