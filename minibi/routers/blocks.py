from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from minibi.calculations.refinement import Page
from minibi.config import get_settings
from minibi.database import get_db
from minibi.schemas.requests import (
    BlockRenderRequest,
    BlockRenderResponse,
    TableViewRequest,
    TableViewResponse,
)
from minibi.services import block_service, dashboard_service
from minibi.services.filters import ColumnFilter

router = APIRouter()


def _table_response(page: Page) -> TableViewResponse:
    return TableViewResponse(
        rows=[dict(r) for r in page.rows],
        page=page.page,
        page_size=page.page_size,
        total_count=page.total_count,
        total_pages=page.total_pages,
    )


@router.post("/table/view", response_model=TableViewResponse)
def view_table(body: TableViewRequest) -> TableViewResponse:
    """Search, filter, sort and paginate rows for a table block."""
    settings = get_settings()
    state = body.state
    column_filters = [ColumnFilter(**f.model_dump()) for f in state.column_filters]

    page = block_service.view_table_block(
        body.config,
        body.rows,
        search_term=state.search_term,
        column_filters=column_filters,
        sort_column=state.sort_column,
        sort_direction=state.sort_direction,
        page=state.page,
        page_size=state.page_size,
        unknown_operator=settings.unknown_operator,
        default_page_size=settings.default_page_size,
    )
    return _table_response(page)


@router.post("/render", response_model=BlockRenderResponse)
def render_block(body: BlockRenderRequest, db: Session = Depends(get_db)) -> BlockRenderResponse:
    """Default display of any block type."""
    dashboard_variables = None
    if body.dashboard_id is not None:
        dashboard_variables = dashboard_service.get_dashboard(db, body.dashboard_id).variables

    settings = get_settings()
    result = block_service.render_block(
        body.config,
        body.rows,
        dashboard_variables,
        body.now,
        unknown_operator=settings.unknown_operator,
        default_page_size=settings.default_page_size,
    )
    if isinstance(result, Page):
        return BlockRenderResponse(type=body.config.type, table=_table_response(result))
    return BlockRenderResponse(type=body.config.type, text=result)
