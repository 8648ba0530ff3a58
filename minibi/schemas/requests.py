"""Request and response bodies for the JSON API."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from minibi.schemas.blocks import BlockConfig, TableBlockConfig
from minibi.services.filters import ColumnType, FilterType, SortDirection


class DashboardCreate(BaseModel):
    name: str
    description: str | None = None
    variables: dict[str, Any] | None = None
    public: bool = False


class DashboardUpdate(BaseModel):
    """Fields left out are untouched."""

    name: str | None = None
    description: str | None = None
    variables: dict[str, Any] | None = None
    public: bool | None = None


class FilterOptionSchema(BaseModel):
    label: str
    value: Any


class FilterCreate(BaseModel):
    key: str
    name: str
    type: FilterType
    initial_value: Any = None
    active: bool = False
    options: list[FilterOptionSchema] | None = None
    min: float | None = None
    max: float | None = None
    placeholder: str | None = None
    description: str | None = None


class FilterUpdate(BaseModel):
    """Display fields and initial value. key and type can't change."""

    name: str | None = None
    initial_value: Any = None
    options: list[FilterOptionSchema] | None = None
    min: float | None = None
    max: float | None = None
    placeholder: str | None = None
    description: str | None = None


class FilterStateUpdate(BaseModel):
    """Runtime changes from a filter widget. Fields left out are untouched."""

    active: bool | None = None
    current_value: Any = None
    reset: bool = False


class FilterRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    key: str
    name: str
    type: FilterType
    active: bool
    initial_value: Any = None
    current_value: Any = None
    options: list[FilterOptionSchema] | None = None
    min: float | None = None
    max: float | None = None
    placeholder: str | None = None
    description: str | None = None


class DashboardRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None = None
    variables: dict[str, Any] | None = None
    public: bool = False
    filters: list[FilterRead] = Field(default_factory=list)


class QueryCreate(BaseModel):
    name: str
    sql: str
    description: str | None = None
    is_active: bool = True


class QueryUpdate(BaseModel):
    name: str | None = None
    sql: str | None = None
    description: str | None = None
    is_active: bool | None = None
    public: bool | None = None


class BindingCreate(BaseModel):
    dashboard_id: int
    filter_key: str
    active_value: str
    inactive_value: str = ""


class BindingRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    dashboard_id: int
    filter_key: str
    active_value: str
    inactive_value: str


class QueryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    sql: str
    description: str | None = None
    is_active: bool
    bindings: list[BindingRead] = Field(default_factory=list)


class BoundSql(BaseModel):
    query_id: int
    dashboard_id: int
    sql: str
    unbound_placeholders: list[str] = Field(default_factory=list)


class ColumnFilterSchema(BaseModel):
    column: str
    type: ColumnType
    operator: str
    value: Any = None
    value_to: Any = None


class TableViewState(BaseModel):
    search_term: str = ""
    column_filters: list[ColumnFilterSchema] = Field(default_factory=list)
    sort_column: str | None = None
    sort_direction: SortDirection | None = None
    page: int = Field(default=1, ge=1)
    page_size: int | None = Field(default=None, ge=1)


class TableViewRequest(BaseModel):
    config: TableBlockConfig
    rows: list[dict[str, Any]] = Field(default_factory=list)
    state: TableViewState = Field(default_factory=TableViewState)


class TableViewResponse(BaseModel):
    rows: list[dict[str, Any]]
    page: int
    page_size: int
    total_count: int
    total_pages: int


class BlockRenderRequest(BaseModel):
    config: BlockConfig
    rows: list[dict[str, Any]] = Field(default_factory=list)
    dashboard_id: int | None = None
    now: datetime | None = None


class TemplateRenderRequest(BaseModel):
    template: str
    variables: dict[str, Any] | None = None
    dashboard_variables: dict[str, Any] | None = None
    now: datetime | None = None


class TemplateValidationResponse(BaseModel):
    is_valid: bool
    warnings: list[str]
    variables: list[str]


class BlockRenderResponse(BaseModel):
    type: str
    text: str | None = None
    table: TableViewResponse | None = None
