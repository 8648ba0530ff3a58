"""Pure calculation modules for templates, SQL filter binding and row refinement."""

from minibi.calculations.predicates import matches, operators_for
from minibi.calculations.refinement import (
    Page,
    TableState,
    next_sort_direction,
    paginate,
    refine,
)
from minibi.calculations.sql_binding import (
    bind_filters,
    escape_placeholder,
    find_placeholders,
    format_filter_value,
)
from minibi.calculations.template import (
    extract_variables,
    render,
    render_text,
    system_variables,
    validate_template,
)

__all__ = [
    # Templates
    "render",
    "render_text",
    "system_variables",
    "extract_variables",
    "validate_template",
    # SQL binding
    "bind_filters",
    "format_filter_value",
    "escape_placeholder",
    "find_placeholders",
    # Row refinement
    "matches",
    "operators_for",
    "refine",
    "paginate",
    "next_sort_direction",
    "Page",
    "TableState",
]
