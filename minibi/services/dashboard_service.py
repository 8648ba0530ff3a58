"""Dashboard and dashboard filter persistence."""

import logging
from typing import Any

from sqlalchemy.orm import Session

from minibi.exceptions import NotFoundError, ValidationError
from minibi.models import Dashboard, DashboardFilter
from minibi.services.base import CRUDMixin
from minibi.services.filters import (
    Filter,
    FilterOption,
    FilterType,
    validate_filter,
    validate_filter_value,
)

logger = logging.getLogger(__name__)


class DashboardCRUD(CRUDMixin[Dashboard]):
    model = Dashboard


dashboards = DashboardCRUD()


def get_all_dashboards(db: Session) -> list[Dashboard]:
    """Get all dashboards ordered by name."""
    return dashboards.get_all(db, order_by=Dashboard.name)


def get_dashboard(db: Session, dashboard_id: int) -> Dashboard:
    """Get a dashboard or raise NotFoundError."""
    return dashboards.get_or_404(db, dashboard_id)


def create_dashboard(
    db: Session,
    name: str,
    description: str | None = None,
    variables: dict | None = None,
    public: bool = False,
) -> Dashboard:
    """Create a new dashboard."""
    if not name or not name.strip():
        raise ValidationError("Dashboard name is required", field="name")
    return dashboards.create(
        db, name=name.strip(), description=description, variables=variables, public=public
    )


def update_dashboard(db: Session, dashboard_id: int, **changes: Any) -> Dashboard:
    """Update name, description, template variables or visibility."""
    dashboard = get_dashboard(db, dashboard_id)

    if "name" in changes:
        name = changes["name"]
        if not name or not name.strip():
            raise ValidationError("Dashboard name is required", field="name")
        changes["name"] = name.strip()
    if changes.get("variables") is not None:
        changes["variables"] = dict(changes["variables"])

    for field_name in ("name", "description", "variables", "public"):
        if field_name in changes:
            setattr(dashboard, field_name, changes[field_name])

    db.commit()
    db.refresh(dashboard)
    return dashboard


def delete_dashboard(db: Session, dashboard_id: int) -> bool:
    """Delete a dashboard with its filters and bindings."""
    return dashboards.delete(db, dashboard_id)


# --- Filters ---


def to_domain_filter(record: DashboardFilter) -> Filter:
    """Convert a stored filter row into the Filter dataclass."""
    options = None
    if record.options is not None:
        options = [
            FilterOption(label=str(opt.get("label", "")), value=opt.get("value"))
            for opt in record.options
        ]
    return Filter(
        id=record.id,
        key=record.key,
        name=record.name,
        type=record.type,
        active=record.active,
        initial_value=record.initial_value,
        current_value=record.current_value,
        options=options,
        min=record.min,
        max=record.max,
        placeholder=record.placeholder,
        description=record.description,
    )


def get_filter(db: Session, dashboard_id: int, filter_id: int) -> DashboardFilter:
    """Get one filter belonging to a dashboard or raise NotFoundError."""
    record = (
        db.query(DashboardFilter)
        .filter(DashboardFilter.id == filter_id, DashboardFilter.dashboard_id == dashboard_id)
        .first()
    )
    if record is None:
        raise NotFoundError("DashboardFilter", filter_id)
    return record


def get_filter_by_key(db: Session, dashboard_id: int, key: str) -> DashboardFilter | None:
    """Get a dashboard's filter by key."""
    return (
        db.query(DashboardFilter)
        .filter(DashboardFilter.dashboard_id == dashboard_id, DashboardFilter.key == key)
        .first()
    )


def get_domain_filters(db: Session, dashboard_id: int) -> list[Filter]:
    """All filters of a dashboard as Filter dataclasses."""
    records = (
        db.query(DashboardFilter)
        .filter(DashboardFilter.dashboard_id == dashboard_id)
        .order_by(DashboardFilter.id)
        .all()
    )
    return [to_domain_filter(r) for r in records]


def _raise_if_invalid(filter_: Filter) -> None:
    errors = validate_filter(filter_)
    if errors:
        raise ValidationError("; ".join(errors), field=filter_.key)


def create_filter(
    db: Session,
    dashboard_id: int,
    key: str,
    name: str,
    type: FilterType | str,
    initial_value: Any = None,
    active: bool = False,
    options: list[dict] | None = None,
    min: float | None = None,
    max: float | None = None,
    placeholder: str | None = None,
    description: str | None = None,
) -> DashboardFilter:
    """Create a filter on a dashboard. Keys are unique per dashboard."""
    get_dashboard(db, dashboard_id)

    candidate = Filter(key=key, name=name, type=type, initial_value=initial_value)
    _raise_if_invalid(candidate)

    if get_filter_by_key(db, dashboard_id, key):
        raise ValidationError(f"Filter key '{key}' already exists", field="key")

    record = DashboardFilter(
        dashboard_id=dashboard_id,
        key=key,
        name=name,
        type=FilterType(type).value,
        active=active,
        initial_value=initial_value,
        options=options,
        min=min,
        max=max,
        placeholder=placeholder,
        description=description,
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    logger.info("Created %s filter '%s' on dashboard %s", record.type, key, dashboard_id)
    return record


def update_filter(db: Session, dashboard_id: int, filter_id: int, **changes: Any) -> DashboardFilter:
    """
    Update display fields or the initial value of a filter.

    key and type are fixed once created: templates and bindings refer to
    them.
    """
    record = get_filter(db, dashboard_id, filter_id)

    for fixed in ("key", "type"):
        if fixed in changes and changes[fixed] != getattr(record, fixed):
            raise ValidationError(f"Filter {fixed} cannot be changed", field=fixed)

    if "initial_value" in changes:
        errors = validate_filter_value(record.type, changes["initial_value"])
        if errors:
            raise ValidationError("; ".join(errors), field="initial_value")

    for field_name in ("name", "initial_value", "options", "min", "max", "placeholder", "description"):
        if field_name in changes:
            setattr(record, field_name, changes[field_name])

    db.commit()
    db.refresh(record)
    return record


def set_filter_active(db: Session, dashboard_id: int, filter_id: int, active: bool) -> DashboardFilter:
    """Switch a filter between its active and inactive branch."""
    record = get_filter(db, dashboard_id, filter_id)
    record.active = active
    db.commit()
    db.refresh(record)
    return record


def set_filter_value(db: Session, dashboard_id: int, filter_id: int, value: Any) -> DashboardFilter:
    """Override the filter's value for this session of the dashboard."""
    record = get_filter(db, dashboard_id, filter_id)
    errors = validate_filter_value(record.type, value)
    if errors:
        raise ValidationError("; ".join(errors), field="current_value")
    record.current_value = value
    db.commit()
    db.refresh(record)
    return record


def reset_filter_value(db: Session, dashboard_id: int, filter_id: int) -> DashboardFilter:
    """Drop the override so the initial value applies again."""
    record = get_filter(db, dashboard_id, filter_id)
    record.current_value = None
    db.commit()
    db.refresh(record)
    return record


def delete_filter(db: Session, dashboard_id: int, filter_id: int) -> bool:
    """Delete a filter. Returns False if it doesn't exist."""
    record = (
        db.query(DashboardFilter)
        .filter(DashboardFilter.id == filter_id, DashboardFilter.dashboard_id == dashboard_id)
        .first()
    )
    if not record:
        return False
    db.delete(record)
    db.commit()
    return True
