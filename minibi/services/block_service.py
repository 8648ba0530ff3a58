"""Turn block configs plus query rows into what the dashboard displays."""

from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any

from minibi.calculations.predicates import UnknownOperatorPolicy
from minibi.calculations.refinement import Page, paginate, refine
from minibi.calculations.template import render_text
from minibi.exceptions import ValidationError
from minibi.schemas.blocks import TableBlockConfig, TextBlockConfig, TextVariable
from minibi.services.filters import ColumnFilter, SortDirection
from minibi.utils.query_params import parse_number


def aggregate_column(rows: Sequence[Mapping[str, Any]], column: str, aggregate: str) -> Any:
    """Reduce one column of rows. Non-numeric cells are ignored by numeric aggregates."""
    values = [row.get(column) for row in rows]

    if aggregate == "count":
        return sum(1 for v in values if v is not None)
    if aggregate == "first":
        return values[0] if values else None

    numbers = [n for n in (parse_number(v) for v in values) if n is not None]
    if not numbers:
        return None
    if aggregate == "sum":
        return sum(numbers)
    if aggregate == "avg":
        return sum(numbers) / len(numbers)
    if aggregate == "min":
        return min(numbers)
    if aggregate == "max":
        return max(numbers)
    raise ValidationError(f"Unknown aggregate: {aggregate}", field="aggregate")


def resolve_text_variables(
    variables: Sequence[TextVariable], rows: Sequence[Mapping[str, Any]]
) -> dict[str, Any]:
    """Values for a text block's own variables."""
    resolved: dict[str, Any] = {}
    for variable in variables:
        if variable.type == "static":
            resolved[variable.name] = variable.value
        elif variable.column:
            resolved[variable.name] = aggregate_column(rows, variable.column, variable.aggregate)
        else:
            resolved[variable.name] = len(rows) if variable.aggregate == "count" else None
    return resolved


def render_text_block(
    config: TextBlockConfig,
    rows: Sequence[Mapping[str, Any]] = (),
    dashboard_variables: Mapping[str, Any] | None = None,
    now: datetime | None = None,
) -> str:
    """Render a text block's content over system, dashboard and block variables."""
    variables = resolve_text_variables(config.variables, rows)
    return render_text(config.content, variables, dashboard_variables, now)


def view_table_block(
    config: TableBlockConfig,
    rows: Sequence[Mapping[str, Any]],
    search_term: str = "",
    column_filters: Sequence[ColumnFilter] = (),
    sort_column: str | None = None,
    sort_direction: SortDirection | str | None = None,
    page: int = 1,
    page_size: int | None = None,
    unknown_operator: UnknownOperatorPolicy = "exclude",
    default_page_size: int = 25,
) -> Page:
    """
    Refine and paginate rows for a table block.

    Search, column filters and sorting only apply when the config enables
    them; sorting falls back to the configured default sort.
    """
    if not config.filtering.enabled:
        search_term = ""
        column_filters = ()
    else:
        filterable = set(config.filterable_columns)
        column_filters = [f for f in column_filters if f.column in filterable]

    if not config.sorting.enabled:
        sort_column, sort_direction = None, None
    elif sort_column is None and config.sorting.default_sort:
        sort_column = config.sorting.default_sort.column
        sort_direction = config.sorting.default_sort.direction
    elif sort_column not in config.sortable_columns:
        sort_column, sort_direction = None, None

    refined = refine(
        rows,
        search_term,
        config.filterable_columns,
        column_filters,
        sort_column,
        sort_direction,
        unknown_operator,
    )

    if not config.pagination.enabled:
        return paginate(refined, 1, max(len(refined), 1))
    page_size = page_size or config.pagination.page_size or default_page_size
    return paginate(refined, page, page_size)


def render_block(
    config: TableBlockConfig | TextBlockConfig,
    rows: Sequence[Mapping[str, Any]],
    dashboard_variables: Mapping[str, Any] | None = None,
    now: datetime | None = None,
    unknown_operator: UnknownOperatorPolicy = "exclude",
    default_page_size: int = 25,
) -> Page | str:
    """Default display for any block: first table page or rendered text."""
    if isinstance(config, TableBlockConfig):
        return view_table_block(
            config,
            rows,
            unknown_operator=unknown_operator,
            default_page_size=default_page_size,
        )
    if isinstance(config, TextBlockConfig):
        return render_text_block(config, rows, dashboard_variables, now)
    raise ValidationError(f"Unsupported block config: {type(config).__name__}", field="type")
