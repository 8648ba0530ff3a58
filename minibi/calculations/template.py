"""{{variable}} substitution for text blocks and SQL fragments."""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from minibi.utils.values import stringify

logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN = re.compile(r"\{\{(\w+)\}\}")
INVALID_PLACEHOLDER_PATTERN = re.compile(r"\{\{[^}]*[^\w}][^}]*\}\}")


@dataclass
class TemplateValidation:
    """Outcome of validate_template. Warnings never block rendering."""

    is_valid: bool
    warnings: list[str] = field(default_factory=list)


def merge_scopes(*scopes: Mapping[str, Any] | None) -> dict[str, Any]:
    """Overlay scopes left to right; a later scope's key wins."""
    merged: dict[str, Any] = {}
    for scope in scopes:
        if scope:
            merged.update(scope)
    return merged


def render(template: str, *scopes: Mapping[str, Any] | None) -> str:
    """
    Replace each {{name}} in template with its value from the merged scopes.

    Names that are missing, or whose value is None, are left as written so a
    partially configured template stays readable.
    """
    variables = merge_scopes(*scopes)

    def substitute(match: re.Match) -> str:
        value = variables.get(match.group(1))
        if value is None:
            return match.group(0)
        return stringify(value)

    return PLACEHOLDER_PATTERN.sub(substitute, template)


def system_variables(now: datetime | None = None) -> dict[str, str]:
    """Date/time values available to every template."""
    if now is None:
        now = datetime.now()

    return {
        "currentDate": now.strftime("%Y-%m-%d"),
        "currentTime": now.strftime("%H:%M:%S"),
        "currentDateTime": now.strftime("%Y-%m-%d %H:%M:%S"),
        "timestamp": str(int(now.timestamp() * 1000)),
        "year": str(now.year),
        "month": f"{now.month:02d}",
        "day": f"{now.day:02d}",
    }


def render_text(
    template: str,
    variables: Mapping[str, Any] | None = None,
    dashboard_variables: Mapping[str, Any] | None = None,
    now: datetime | None = None,
) -> str:
    """Render with system < dashboard < block variable priority."""
    return render(template, system_variables(now), dashboard_variables, variables)


def extract_variables(template: str) -> list[str]:
    """Names of all well-formed placeholders, in order of appearance."""
    return PLACEHOLDER_PATTERN.findall(template)


def validate_template(template: str) -> TemplateValidation:
    """
    Report template problems as warnings.

    Checks that {{ and }} counts balance and that placeholder names only
    contain word characters.
    """
    warnings = []

    open_braces = template.count("{{")
    close_braces = template.count("}}")
    if open_braces != close_braces:
        warnings.append(
            f"Unmatched template braces detected ({open_braces} '{{{{', {close_braces} '}}}}')"
        )

    invalid = INVALID_PLACEHOLDER_PATTERN.findall(template)
    if invalid:
        warnings.append(f"Invalid variable names: {', '.join(invalid)}")

    for warning in warnings:
        logger.warning("Template warning: %s", warning)

    return TemplateValidation(is_valid=not warnings, warnings=warnings)
