"""Stored queries, their filter bindings, and SQL rendering for a dashboard."""

import logging
from typing import Any

from sqlalchemy.orm import Session

from minibi.calculations.sql_binding import VALUE_PLACEHOLDER, bind_filters, find_placeholders
from minibi.exceptions import ValidationError
from minibi.models import FilterBinding, Query
from minibi.services import dashboard_service
from minibi.services.base import CRUDMixin
from minibi.services.filters import KEY_PATTERN, QueryFilterBinding

logger = logging.getLogger(__name__)


class QueryCRUD(CRUDMixin[Query]):
    model = Query


queries = QueryCRUD()


def get_all_queries(db: Session) -> list[Query]:
    """Get all stored queries ordered by name."""
    return queries.get_all(db, order_by=Query.name)


def get_query(db: Session, query_id: int) -> Query:
    """Get a query or raise NotFoundError."""
    return queries.get_or_404(db, query_id)


def create_query(
    db: Session,
    name: str,
    sql: str,
    description: str | None = None,
    is_active: bool = True,
) -> Query:
    """Store a SQL template."""
    if not sql or not sql.strip():
        raise ValidationError("Query SQL is required", field="sql")
    return queries.create(db, name=name, sql=sql, description=description, is_active=is_active)


def update_query(db: Session, query_id: int, **changes: Any) -> Query:
    """Update a stored query. Bindings are kept as they are."""
    query = get_query(db, query_id)

    if "sql" in changes:
        sql = changes["sql"]
        if not sql or not sql.strip():
            raise ValidationError("Query SQL is required", field="sql")
    if "name" in changes and not (changes["name"] or "").strip():
        raise ValidationError("Query name is required", field="name")

    for field_name in ("name", "sql", "description", "is_active", "public"):
        if field_name in changes:
            setattr(query, field_name, changes[field_name])

    db.commit()
    db.refresh(query)
    return query


def delete_query(db: Session, query_id: int) -> bool:
    """Delete a query and its bindings."""
    return queries.delete(db, query_id)


# --- Bindings ---


def add_binding(
    db: Session,
    query_id: int,
    dashboard_id: int,
    filter_key: str,
    active_value: str,
    inactive_value: str = "",
) -> FilterBinding:
    """Declare how a dashboard filter renders inside a query."""
    get_query(db, query_id)
    dashboard_service.get_dashboard(db, dashboard_id)

    if not KEY_PATTERN.match(filter_key or ""):
        raise ValidationError(f"Invalid filter key: {filter_key!r}", field="filter_key")
    if VALUE_PLACEHOLDER in inactive_value:
        raise ValidationError(
            "inactive_value is used verbatim and must not contain {{val}}",
            field="inactive_value",
        )

    existing = (
        db.query(FilterBinding)
        .filter(
            FilterBinding.query_id == query_id,
            FilterBinding.dashboard_id == dashboard_id,
            FilterBinding.filter_key == filter_key,
        )
        .first()
    )
    if existing:
        raise ValidationError(f"Binding for '{filter_key}' already exists", field="filter_key")

    binding = FilterBinding(
        query_id=query_id,
        dashboard_id=dashboard_id,
        filter_key=filter_key,
        active_value=active_value,
        inactive_value=inactive_value,
    )
    db.add(binding)
    db.commit()
    db.refresh(binding)
    return binding


def delete_binding(db: Session, query_id: int, binding_id: int) -> bool:
    """Delete a binding. Returns False if it doesn't exist."""
    binding = (
        db.query(FilterBinding)
        .filter(FilterBinding.id == binding_id, FilterBinding.query_id == query_id)
        .first()
    )
    if not binding:
        return False
    db.delete(binding)
    db.commit()
    return True


def to_domain_binding(record: FilterBinding) -> QueryFilterBinding:
    return QueryFilterBinding(
        dashboard_id=record.dashboard_id,
        filter_key=record.filter_key,
        active_value=record.active_value,
        inactive_value=record.inactive_value or "",
    )


def get_domain_bindings(db: Session, query_id: int) -> list[QueryFilterBinding]:
    """A query's bindings as QueryFilterBinding dataclasses, in creation order."""
    return [to_domain_binding(b) for b in get_query(db, query_id).bindings]


def render_query_sql(db: Session, query_id: int, dashboard_id: int) -> str:
    """
    SQL for a stored query with the dashboard's filter state bound in.

    Placeholders without a binding are left in place and logged.
    """
    query = get_query(db, query_id)
    dashboard_service.get_dashboard(db, dashboard_id)

    filters = dashboard_service.get_domain_filters(db, dashboard_id)
    bindings = get_domain_bindings(db, query_id)
    sql = bind_filters(query.sql, dashboard_id, filters, bindings)

    leftover = find_placeholders(sql)
    if leftover:
        logger.warning(
            "Query %s on dashboard %s has unbound placeholders: %s",
            query_id,
            dashboard_id,
            ", ".join(leftover),
        )
    return sql
