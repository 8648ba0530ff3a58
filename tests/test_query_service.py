"""Tests for stored queries, bindings and bound SQL rendering."""

import pytest

from minibi.exceptions import NotFoundError, ValidationError
from minibi.services import dashboard_service, query_service


@pytest.fixture
def dashboard(db_session):
    return dashboard_service.create_dashboard(db_session, "Sales")


@pytest.fixture
def region_query(db_session, dashboard):
    query = query_service.create_query(
        db_session, "Orders", "SELECT * FROM orders WHERE {{region}} AND {{period}}"
    )
    query_service.add_binding(
        db_session, query.id, dashboard.id, "region", "region = '{{val}}'", "1=1"
    )
    query_service.add_binding(
        db_session,
        query.id,
        dashboard.id,
        "period",
        "ordered_on BETWEEN '{{val}}'",
        "1=1",
    )
    return query


def test_create_query_requires_sql(db_session):
    with pytest.raises(ValidationError):
        query_service.create_query(db_session, "Empty", "  ")


def test_update_query_keeps_bindings(db_session, dashboard, region_query):
    updated = query_service.update_query(
        db_session, region_query.id, sql="SELECT id FROM orders WHERE {{region}}"
    )
    assert updated.sql == "SELECT id FROM orders WHERE {{region}}"
    assert len(updated.bindings) == 2
    sql = query_service.render_query_sql(db_session, region_query.id, dashboard.id)
    assert sql == "SELECT id FROM orders WHERE 1=1"


def test_update_query_rejects_empty_sql(db_session, region_query):
    with pytest.raises(ValidationError):
        query_service.update_query(db_session, region_query.id, sql=" ")


def test_missing_query(db_session):
    with pytest.raises(NotFoundError):
        query_service.get_query(db_session, 5)


def test_binding_rejects_val_in_inactive_value(db_session, dashboard):
    query = query_service.create_query(db_session, "Q", "SELECT {{x}}")
    with pytest.raises(ValidationError):
        query_service.add_binding(db_session, query.id, dashboard.id, "x", "{{val}}", "{{val}}")


def test_binding_rejects_bad_key(db_session, dashboard):
    query = query_service.create_query(db_session, "Q", "SELECT 1")
    with pytest.raises(ValidationError):
        query_service.add_binding(db_session, query.id, dashboard.id, "a b", "{{val}}")


def test_duplicate_binding(db_session, dashboard, region_query):
    with pytest.raises(ValidationError):
        query_service.add_binding(db_session, region_query.id, dashboard.id, "region", "x")


def test_binding_needs_dashboard(db_session):
    query = query_service.create_query(db_session, "Q", "SELECT {{x}}")
    with pytest.raises(NotFoundError):
        query_service.add_binding(db_session, query.id, 77, "x", "{{val}}")


def test_render_with_missing_filters_uses_inactive_values(db_session, dashboard, region_query):
    sql = query_service.render_query_sql(db_session, region_query.id, dashboard.id)
    assert sql == "SELECT * FROM orders WHERE 1=1 AND 1=1"


def test_render_with_active_filters(db_session, dashboard, region_query):
    region = dashboard_service.create_filter(
        db_session, dashboard.id, "region", "Region", "string", initial_value="US", active=True
    )
    dashboard_service.create_filter(
        db_session,
        dashboard.id,
        "period",
        "Period",
        "date_range",
        initial_value=["2024-01-01", "2024-01-31"],
        active=True,
    )
    dashboard_service.set_filter_value(db_session, dashboard.id, region.id, "O'Neil")

    sql = query_service.render_query_sql(db_session, region_query.id, dashboard.id)
    assert sql == (
        "SELECT * FROM orders WHERE region = 'O''Neil' "
        "AND ordered_on BETWEEN '2024-01-01' AND '2024-01-31'"
    )


def test_render_toggles_with_active_state(db_session, dashboard, region_query):
    region = dashboard_service.create_filter(
        db_session, dashboard.id, "region", "Region", "string", initial_value="US", active=True
    )
    first = query_service.render_query_sql(db_session, region_query.id, dashboard.id)
    dashboard_service.set_filter_active(db_session, dashboard.id, region.id, False)
    second = query_service.render_query_sql(db_session, region_query.id, dashboard.id)

    assert first.startswith("SELECT * FROM orders WHERE region = 'US'")
    assert second.startswith("SELECT * FROM orders WHERE 1=1")


def test_render_only_uses_this_dashboards_bindings(db_session, dashboard, region_query):
    other = dashboard_service.create_dashboard(db_session, "Other")
    sql = query_service.render_query_sql(db_session, region_query.id, other.id)
    assert sql == "SELECT * FROM orders WHERE {{region}} AND {{period}}"


def test_render_logs_unbound_placeholders(db_session, dashboard, caplog):
    query = query_service.create_query(db_session, "Q", "SELECT * FROM t WHERE {{missing}}")
    sql = query_service.render_query_sql(db_session, query.id, dashboard.id)
    assert sql == "SELECT * FROM t WHERE {{missing}}"
    assert "unbound placeholders: missing" in caplog.text


def test_delete_binding(db_session, dashboard, region_query):
    binding_id = region_query.bindings[0].id
    assert query_service.delete_binding(db_session, region_query.id, binding_id) is True
    assert query_service.delete_binding(db_session, region_query.id, binding_id) is False
    assert len(query_service.get_domain_bindings(db_session, region_query.id)) == 1
