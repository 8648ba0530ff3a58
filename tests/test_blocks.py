"""Tests for block config dispatch, table views and text rendering."""

from datetime import datetime

import pytest
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from minibi.calculations.refinement import Page
from minibi.exceptions import ValidationError
from minibi.schemas.blocks import (
    BlockConfig,
    ColumnDefinition,
    DefaultSort,
    SortingConfig,
    TableBlockConfig,
    TextBlockConfig,
    TextVariable,
)
from minibi.services import block_service
from minibi.services.filters import ColumnFilter

ROWS = [
    {"name": "Widget", "amount": 5, "region": "US"},
    {"name": "Gadget", "amount": 15, "region": "EU"},
    {"name": "Doohickey", "amount": 25, "region": "US"},
]


@pytest.fixture
def table_config() -> TableBlockConfig:
    return TableBlockConfig(
        columns=[
            ColumnDefinition(key="name", header="Name"),
            ColumnDefinition(key="amount", header="Amount", type="number"),
            ColumnDefinition(key="region", header="Region", filterable=False, sortable=False),
        ],
        pagination={"page_size": 2},
    )


def test_block_config_union_dispatches_on_type():
    adapter = TypeAdapter(BlockConfig)
    assert isinstance(adapter.validate_python({"type": "table"}), TableBlockConfig)
    assert isinstance(adapter.validate_python({"type": "text", "content": "x"}), TextBlockConfig)
    with pytest.raises(PydanticValidationError):
        adapter.validate_python({"type": "graph"})


class TestTableView:
    def test_first_page(self, table_config):
        page = block_service.view_table_block(table_config, ROWS)
        assert [r["name"] for r in page.rows] == ["Widget", "Gadget"]
        assert page.total_pages == 2

    def test_search_uses_filterable_columns_only(self, table_config):
        page = block_service.view_table_block(table_config, ROWS, search_term="eu")
        assert page.total_count == 0

    def test_column_filter_on_non_filterable_column_is_dropped(self, table_config):
        f = ColumnFilter(column="region", type="string", operator="equals", value="EU")
        page = block_service.view_table_block(table_config, ROWS, column_filters=[f])
        assert page.total_count == 3

    def test_column_filter(self, table_config):
        f = ColumnFilter(column="amount", type="number", operator="between", value=10, value_to=20)
        page = block_service.view_table_block(table_config, ROWS, column_filters=[f])
        assert [r["amount"] for r in page.rows] == [15]

    def test_sort_and_page(self, table_config):
        page = block_service.view_table_block(
            table_config, ROWS, sort_column="amount", sort_direction="desc", page=2
        )
        assert [r["amount"] for r in page.rows] == [5]

    def test_unsortable_column_is_ignored(self, table_config):
        page = block_service.view_table_block(
            table_config, ROWS, sort_column="region", sort_direction="asc"
        )
        assert [r["name"] for r in page.rows] == ["Widget", "Gadget"]

    def test_default_sort(self, table_config):
        table_config.sorting = SortingConfig(
            default_sort=DefaultSort(column="name", direction="asc")
        )
        page = block_service.view_table_block(table_config, ROWS)
        assert [r["name"] for r in page.rows] == ["Doohickey", "Gadget"]

    def test_disabled_pagination_returns_everything(self, table_config):
        table_config.pagination.enabled = False
        page = block_service.view_table_block(table_config, ROWS, page=3)
        assert len(page.rows) == 3
        assert page.total_pages == 1

    def test_disabled_filtering_ignores_search(self, table_config):
        table_config.filtering.enabled = False
        page = block_service.view_table_block(table_config, ROWS, search_term="zzz")
        assert page.total_count == 3


class TestTextBlock:
    def test_static_and_dynamic_variables(self):
        config = TextBlockConfig(
            content="{{label}}: {{total}} over {{rows}} rows, top {{best}}",
            variables=[
                TextVariable(name="label", value="Revenue"),
                TextVariable(name="total", type="dynamic", column="amount", aggregate="sum"),
                TextVariable(name="rows", type="dynamic", aggregate="count"),
                TextVariable(name="best", type="dynamic", column="amount", aggregate="max"),
            ],
        )
        text = block_service.render_text_block(config, ROWS, now=datetime(2024, 1, 1))
        assert text == "Revenue: 45.0 over 3 rows, top 25.0"

    def test_dashboard_variables_and_system_variables(self):
        config = TextBlockConfig(content="{{team}} as of {{currentDate}}")
        text = block_service.render_text_block(
            config, dashboard_variables={"team": "West"}, now=datetime(2024, 2, 3)
        )
        assert text == "West as of 2024-02-03"

    def test_block_variable_beats_dashboard_variable(self):
        config = TextBlockConfig(
            content="{{team}}", variables=[TextVariable(name="team", value="East")]
        )
        assert block_service.render_text_block(config, dashboard_variables={"team": "West"}) == "East"

    def test_aggregate_of_empty_rows_leaves_placeholder(self):
        config = TextBlockConfig(
            content="{{avg}}",
            variables=[TextVariable(name="avg", type="dynamic", column="amount", aggregate="avg")],
        )
        assert block_service.render_text_block(config, []) == "{{avg}}"


def test_aggregate_column():
    assert block_service.aggregate_column(ROWS, "amount", "avg") == 15
    assert block_service.aggregate_column(ROWS, "amount", "min") == 5
    assert block_service.aggregate_column(ROWS, "name", "first") == "Widget"
    assert block_service.aggregate_column(ROWS, "missing", "count") == 0


def test_render_block_dispatch(table_config):
    assert isinstance(block_service.render_block(table_config, ROWS), Page)
    text = block_service.render_block(TextBlockConfig(content="hi"), ROWS)
    assert text == "hi"


def test_render_block_falls_back_to_default_page_size():
    config = TableBlockConfig(columns=[ColumnDefinition(key="name")])
    page = block_service.render_block(config, ROWS, default_page_size=2)
    assert page.page_size == 2
    assert page.total_pages == 2


def test_render_block_rejects_unknown_config():
    with pytest.raises(ValidationError):
        block_service.render_block(object(), [])  # type: ignore[arg-type]
