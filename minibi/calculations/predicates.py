"""Typed column predicates for filtering in-memory rows."""

import logging
from collections.abc import Callable
from typing import Any, Literal

from minibi.services.filters import ColumnFilter, ColumnType
from minibi.utils.query_params import parse_number, parse_timestamp_ms

logger = logging.getLogger(__name__)

UnknownOperatorPolicy = Literal["exclude", "include"]

Predicate = Callable[[Any, Any, Any], bool]


def _lower(value: Any) -> str:
    return "" if value is None else str(value).lower()


def _compare(coerce: Callable[[Any], float | None], test: Callable[..., bool]) -> Predicate:
    """
    Build a predicate that coerces the row value and operands first.

    Any coercion failure makes the predicate false.
    """

    def predicate(row_value: Any, value: Any, value_to: Any) -> bool:
        left = coerce(row_value)
        right = coerce(value)
        if left is None or right is None:
            return False
        return test(left, right, coerce(value_to))

    return predicate


def _between(left: float, lower: float, upper: float | None) -> bool:
    # Bounds are used as given; a reversed pair matches nothing
    if upper is None:
        return False
    return lower <= left <= upper


def _ordered_operators(coerce: Callable[[Any], float | None]) -> dict[str, Predicate]:
    return {
        "equals": _compare(coerce, lambda a, b, _: a == b),
        "notEquals": _compare(coerce, lambda a, b, _: a != b),
        "between": _compare(coerce, _between),
        "isEmpty": lambda row, _v, _t: coerce(row) is None,
        "isNotEmpty": lambda row, _v, _t: coerce(row) is not None,
    }


STRING_OPERATORS: dict[str, Predicate] = {
    "contains": lambda row, v, _: _lower(v) in _lower(row),
    "notContains": lambda row, v, _: _lower(v) not in _lower(row),
    "equals": lambda row, v, _: _lower(row) == _lower(v),
    "notEquals": lambda row, v, _: _lower(row) != _lower(v),
    "startsWith": lambda row, v, _: _lower(row).startswith(_lower(v)),
    "endsWith": lambda row, v, _: _lower(row).endswith(_lower(v)),
    "isEmpty": lambda row, _v, _t: str(row).strip() == "",
    "isNotEmpty": lambda row, _v, _t: str(row).strip() != "",
}

NUMBER_OPERATORS: dict[str, Predicate] = {
    **_ordered_operators(parse_number),
    "greaterThan": _compare(parse_number, lambda a, b, _: a > b),
    "greaterOrEqual": _compare(parse_number, lambda a, b, _: a >= b),
    "lessThan": _compare(parse_number, lambda a, b, _: a < b),
    "lessOrEqual": _compare(parse_number, lambda a, b, _: a <= b),
}

DATE_OPERATORS: dict[str, Predicate] = {
    **_ordered_operators(parse_timestamp_ms),
    "after": _compare(parse_timestamp_ms, lambda a, b, _: a > b),
    "afterOrOn": _compare(parse_timestamp_ms, lambda a, b, _: a >= b),
    "before": _compare(parse_timestamp_ms, lambda a, b, _: a < b),
    "beforeOrOn": _compare(parse_timestamp_ms, lambda a, b, _: a <= b),
}

BOOLEAN_OPERATORS: dict[str, Predicate] = {
    "isTrue": lambda row, _v, _t: row is True,
    "isFalse": lambda row, _v, _t: row is False,
}

OPERATORS: dict[ColumnType, dict[str, Predicate]] = {
    ColumnType.STRING: STRING_OPERATORS,
    ColumnType.NUMBER: NUMBER_OPERATORS,
    ColumnType.DATE: DATE_OPERATORS,
    ColumnType.BOOLEAN: BOOLEAN_OPERATORS,
}


def operators_for(column_type: ColumnType | str) -> tuple[str, ...]:
    """Operator names valid for a column type (empty for unknown types)."""
    try:
        return tuple(OPERATORS[ColumnType(column_type)])
    except ValueError:
        return ()


def _lookup(column_filter: ColumnFilter) -> Predicate | None:
    try:
        table = OPERATORS[ColumnType(column_filter.type)]
    except ValueError:
        return None
    return table.get(column_filter.operator)


def is_known_operator(column_filter: ColumnFilter) -> bool:
    """True when the filter's operator is defined for its column type."""
    return _lookup(column_filter) is not None


def warn_unknown_operator(
    column_filter: ColumnFilter, unknown_operator: UnknownOperatorPolicy
) -> None:
    logger.warning(
        "Column filter on %r uses unknown operator %r for type %r (%s rows)",
        column_filter.column,
        column_filter.operator,
        column_filter.type,
        unknown_operator,
    )


def evaluate(
    row_value: Any,
    column_filter: ColumnFilter,
    unknown_operator: UnknownOperatorPolicy = "exclude",
) -> bool:
    """Same as matches, without logging unknown operators."""
    if row_value is None:
        return column_filter.operator == "isEmpty"

    predicate = _lookup(column_filter)
    if predicate is None:
        return unknown_operator == "include"

    return predicate(row_value, column_filter.value, column_filter.value_to)


def matches(
    row_value: Any,
    column_filter: ColumnFilter,
    unknown_operator: UnknownOperatorPolicy = "exclude",
) -> bool:
    """
    Evaluate a column filter against one cell.

    A None cell only satisfies isEmpty, whatever the column type. Operators
    the column type doesn't define log a warning and follow
    unknown_operator: "exclude" drops the row, "include" keeps it.
    """
    if not is_known_operator(column_filter):
        warn_unknown_operator(column_filter, unknown_operator)
    return evaluate(row_value, column_filter, unknown_operator)
