"""Block configuration models, one closed variant per block type."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field

from minibi.services.filters import ColumnType, SortDirection


class ColumnDefinition(BaseModel):
    key: str
    header: str = ""
    type: ColumnType = ColumnType.STRING
    sortable: bool = True
    filterable: bool = True
    width: int | None = None


class PaginationConfig(BaseModel):
    enabled: bool = True
    page_size: int | None = Field(default=None, ge=1)
    page_size_options: list[int] | None = None


class DefaultSort(BaseModel):
    column: str
    direction: SortDirection = SortDirection.ASC


class SortingConfig(BaseModel):
    enabled: bool = True
    default_sort: DefaultSort | None = None
    # tri_state: none -> asc -> desc -> none, binary: asc <-> desc
    cycle: Literal["tri_state", "binary"] = "tri_state"


class FilteringConfig(BaseModel):
    enabled: bool = True
    type: Literal["text", "select", "date", "number"] = "text"


class TableBlockConfig(BaseModel):
    """Table fed by query rows and refined client-side."""

    type: Literal["table"] = "table"
    title: str | None = None
    columns: list[ColumnDefinition] = Field(default_factory=list)
    pagination: PaginationConfig = Field(default_factory=PaginationConfig)
    sorting: SortingConfig = Field(default_factory=SortingConfig)
    filtering: FilteringConfig = Field(default_factory=FilteringConfig)

    @property
    def filterable_columns(self) -> list[str]:
        return [c.key for c in self.columns if c.filterable]

    @property
    def sortable_columns(self) -> list[str]:
        return [c.key for c in self.columns if c.sortable]


class TextVariable(BaseModel):
    """
    Variable available to a text block.

    Static variables carry a value. Dynamic variables aggregate one column
    of the block's rows.
    """

    name: str = Field(pattern=r"^\w+$")
    type: Literal["static", "dynamic"] = "static"
    value: str | int | float | bool | None = None
    column: str | None = None
    aggregate: Literal["count", "sum", "avg", "min", "max", "first"] = "first"


class TextBlockConfig(BaseModel):
    """Text with {{variable}} placeholders."""

    type: Literal["text"] = "text"
    title: str | None = None
    content: str = ""
    variables: list[TextVariable] = Field(default_factory=list)


BlockConfig = Annotated[TableBlockConfig | TextBlockConfig, Field(discriminator="type")]
