"""Bind dashboard filter state into SQL query templates."""

import logging
import re
from collections.abc import Iterable, Mapping, Sequence
from datetime import date, datetime
from typing import Any

from minibi.calculations.template import PLACEHOLDER_PATTERN
from minibi.services.filters import (
    Filter,
    FilterType,
    QueryFilterBinding,
    coerce_filter_type,
    effective_value,
    filters_by_key,
)
from minibi.utils.query_params import parse_bool_param

logger = logging.getLogger(__name__)

VALUE_PLACEHOLDER = "{{val}}"


def placeholder_for(key: str) -> str:
    """Literal placeholder text for a filter key."""
    return "{{" + key + "}}"


def escape_placeholder(key: str) -> str:
    """
    Regex source that matches the placeholder for key literally.

    Keys are user-authored, so every metacharacter in them is escaped.
    """
    return re.escape(placeholder_for(key))


def quote_string(value: Any) -> str:
    """Double embedded single quotes."""
    return str(value).replace("'", "''")


def format_date(value: Any) -> str:
    if value is None:
        return "NULL"
    if isinstance(value, (date, datetime)):
        return value.strftime("%Y-%m-%d")
    return str(value)


def _bounds(value: Any) -> tuple[Any, Any]:
    if isinstance(value, (list, tuple)) and len(value) == 2:
        return value[0], value[1]
    return value, value


def _format_bound(value: Any) -> str:
    return "NULL" if value is None else str(value)


def format_filter_value(value: Any, filter_type: FilterType | str) -> str:
    """
    Render a filter value as a SQL literal fragment.

    Strings and list items have single quotes doubled; the template supplies
    the quotes around scalar strings. A date range renders as
    ``lo' AND 'hi`` so the template quotes the pair once. Numbers are
    inserted as-is. Unknown types fall back to str(value).
    """
    if value is None:
        return "NULL"

    ftype = coerce_filter_type(filter_type)

    if ftype == FilterType.STRING:
        return quote_string(value)

    if ftype in (FilterType.INTEGER, FilterType.FLOAT):
        return str(value)

    if ftype == FilterType.BOOLEAN:
        if isinstance(value, str):
            parsed = parse_bool_param(value)
            flag = bool(parsed) if parsed is not None else bool(value)
        else:
            flag = bool(value)
        return "true" if flag else "false"

    if ftype == FilterType.DATE:
        return format_date(value)

    if ftype == FilterType.DATE_RANGE:
        lower, upper = _bounds(value)
        return f"{format_date(lower)}' AND '{format_date(upper)}"

    if ftype in (FilterType.INTEGER_RANGE, FilterType.FLOAT_RANGE):
        lower, upper = _bounds(value)
        return f"{_format_bound(lower)} AND {_format_bound(upper)}"

    if ftype == FilterType.LIST:
        items = value if isinstance(value, (list, tuple)) else [value]
        return ", ".join(f"'{quote_string(item)}'" for item in items)

    logger.warning("Unknown filter type %r, inserting value unescaped", filter_type)
    return str(value)


def build_fragment(binding: QueryFilterBinding, filter_: Filter | None) -> str:
    """SQL text for one binding given the filter it refers to (if any)."""
    if filter_ is None or filter_.active is not True:
        return binding.inactive_value

    formatted = format_filter_value(effective_value(filter_), filter_.type)
    return binding.active_value.replace(VALUE_PLACEHOLDER, formatted)


def bind_filters(
    sql: str,
    dashboard_id: int | str,
    filters: Iterable[Filter] | Mapping[str, Filter],
    bindings: Sequence[QueryFilterBinding],
) -> str:
    """
    Replace {{filter_key}} placeholders in sql with bound fragments.

    Only bindings for dashboard_id whose placeholder appears in sql take
    part. Active filters contribute their binding's active_value with
    {{val}} filled in; missing or inactive filters contribute inactive_value
    verbatim. All placeholders are replaced in one pass over the original
    text, so inserted fragments are never scanned again. When several
    bindings name the same key the first one wins.
    """
    by_key = filters_by_key(filters)
    fragments: dict[str, str] = {}
    patterns: list[str] = []

    for binding in bindings:
        if binding.dashboard_id != dashboard_id:
            continue

        placeholder = placeholder_for(binding.filter_key)
        if placeholder in fragments:
            continue
        if placeholder not in sql:
            logger.debug("Placeholder %s not in query, skipping", placeholder)
            continue

        fragments[placeholder] = build_fragment(binding, by_key.get(binding.filter_key))
        patterns.append(escape_placeholder(binding.filter_key))

    if not fragments:
        return sql

    # Longest first so no placeholder shadows another in the alternation
    patterns.sort(key=len, reverse=True)
    combined = re.compile("|".join(patterns))
    return combined.sub(lambda m: fragments[m.group(0)], sql)


def find_placeholders(sql: str) -> list[str]:
    """Names of {{name}} placeholders still present in sql."""
    return PLACEHOLDER_PATTERN.findall(sql)
