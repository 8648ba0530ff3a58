"""Utility modules for common operations."""

from minibi.utils.query_params import (
    parse_bool_param,
    parse_number,
    parse_timestamp_ms,
)
from minibi.utils.values import stringify

__all__ = [
    "parse_bool_param",
    "parse_number",
    "parse_timestamp_ms",
    "stringify",
]
