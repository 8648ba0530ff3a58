"""Stringification shared by template rendering and row search."""

from typing import Any


def stringify(value: Any) -> str:
    """
    Turn a value into display text.

    Booleans render lowercase and None renders empty, matching what a
    dashboard user typed into a template or search box.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
