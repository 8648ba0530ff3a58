"""Filter dataclasses shared by the SQL binder and the row refinement pipeline."""

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

KEY_PATTERN = re.compile(r"^\w+$")


class FilterType(str, Enum):
    """Dashboard filter kinds."""

    STRING = "string"
    DATE = "date"
    DATE_RANGE = "date_range"
    LIST = "list"
    INTEGER = "integer"
    FLOAT = "float"
    INTEGER_RANGE = "integer_range"
    FLOAT_RANGE = "float_range"
    BOOLEAN = "boolean"

    @property
    def is_range(self) -> bool:
        return self in RANGE_TYPES


RANGE_TYPES = frozenset(
    {FilterType.DATE_RANGE, FilterType.INTEGER_RANGE, FilterType.FLOAT_RANGE}
)


class ColumnType(str, Enum):
    """Column types a table column filter can target."""

    STRING = "string"
    NUMBER = "number"
    DATE = "date"
    BOOLEAN = "boolean"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass
class FilterOption:
    """Label/value pair offered by a list filter."""

    label: str
    value: Any


@dataclass
class Filter:
    """Dashboard-level filter and its runtime state."""

    key: str
    type: FilterType | str
    name: str = ""
    id: int | str | None = None
    active: bool = False
    initial_value: Any = None
    current_value: Any = None
    options: list[FilterOption] | None = None
    # UI bounds for numeric range filters; binding never enforces them
    min: float | None = None
    max: float | None = None
    placeholder: str | None = None
    description: str | None = None

    @property
    def effective_value(self) -> Any:
        return effective_value(self)


@dataclass(frozen=True)
class QueryFilterBinding:
    """SQL fragments a filter renders to inside one dashboard's query."""

    dashboard_id: int | str
    filter_key: str
    active_value: str  # contains {{val}}
    inactive_value: str = ""  # used verbatim


@dataclass
class ColumnFilter:
    """Ephemeral per-column predicate over in-memory rows."""

    column: str
    type: ColumnType | str
    operator: str
    value: Any = None
    value_to: Any = None  # upper bound for "between"


@dataclass
class PaginationParams:
    """Pagination parameters."""

    page: int = 1
    per_page: int = 25

    @property
    def offset(self) -> int:
        return (max(self.page, 1) - 1) * self.per_page


def effective_value(filter_: Filter) -> Any:
    """Current value if one has been set, otherwise the initial value."""
    if filter_.current_value is not None:
        return filter_.current_value
    return filter_.initial_value


def coerce_filter_type(value: FilterType | str) -> FilterType | None:
    """Return the enum member for a type name, or None if it isn't one."""
    if isinstance(value, FilterType):
        return value
    try:
        return FilterType(value)
    except ValueError:
        return None


def validate_filter_value(filter_type: FilterType | str, value: Any) -> list[str]:
    """Check that a value has the shape its filter type implies."""
    ftype = coerce_filter_type(filter_type)
    if ftype is None or value is None:
        return []

    errors = []
    if ftype.is_range:
        if not isinstance(value, (list, tuple)) or len(value) != 2:
            errors.append(f"{ftype.value} value must be a [lower, upper] pair")
    elif ftype == FilterType.LIST:
        if not isinstance(value, (list, tuple)):
            errors.append("list value must be an array")
    return errors


def validate_filter(filter_: Filter) -> list[str]:
    """
    Check a filter against the model invariants.

    Returns a list of error messages; empty means valid. Callers decide
    whether to raise, so this never does.
    """
    errors: list[str] = []

    if not filter_.key or not KEY_PATTERN.match(filter_.key):
        errors.append(f"Filter key must be a non-empty word: {filter_.key!r}")

    if coerce_filter_type(filter_.type) is None:
        errors.append(f"Unknown filter type: {filter_.type}")
        return errors

    errors.extend(
        f"initial {msg}" for msg in validate_filter_value(filter_.type, filter_.initial_value)
    )
    errors.extend(
        f"current {msg}" for msg in validate_filter_value(filter_.type, filter_.current_value)
    )
    return errors


def filters_by_key(filters: Iterable[Filter] | Mapping[str, Filter]) -> dict[str, Filter]:
    """Index filters by key. The first filter wins on duplicate keys."""
    if isinstance(filters, Mapping):
        return dict(filters)
    indexed: dict[str, Filter] = {}
    for f in filters:
        indexed.setdefault(f.key, f)
    return indexed
