from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from minibi.calculations.sql_binding import find_placeholders
from minibi.database import get_db
from minibi.schemas.requests import (
    BindingCreate,
    BindingRead,
    BoundSql,
    QueryCreate,
    QueryRead,
    QueryUpdate,
)
from minibi.services import query_service

router = APIRouter()


@router.get("/", response_model=list[QueryRead])
def list_queries(db: Session = Depends(get_db)):
    return query_service.get_all_queries(db)


@router.post("/", response_model=QueryRead, status_code=201)
def create_query(body: QueryCreate, db: Session = Depends(get_db)):
    """Store a SQL template."""
    return query_service.create_query(
        db, body.name, body.sql, body.description, body.is_active
    )


@router.get("/{query_id}", response_model=QueryRead)
def get_query(query_id: int, db: Session = Depends(get_db)):
    return query_service.get_query(db, query_id)


@router.patch("/{query_id}", response_model=QueryRead)
def update_query(query_id: int, body: QueryUpdate, db: Session = Depends(get_db)):
    """Update only the fields present in the request."""
    return query_service.update_query(db, query_id, **body.model_dump(exclude_unset=True))


@router.delete("/{query_id}", status_code=204)
def delete_query(query_id: int, db: Session = Depends(get_db)) -> None:
    if not query_service.delete_query(db, query_id):
        raise HTTPException(status_code=404, detail="Query not found")


@router.post("/{query_id}/bindings", response_model=BindingRead, status_code=201)
def add_binding(query_id: int, body: BindingCreate, db: Session = Depends(get_db)):
    """Bind a dashboard filter to this query."""
    return query_service.add_binding(
        db,
        query_id,
        body.dashboard_id,
        body.filter_key,
        body.active_value,
        body.inactive_value,
    )


@router.delete("/{query_id}/bindings/{binding_id}", status_code=204)
def delete_binding(query_id: int, binding_id: int, db: Session = Depends(get_db)) -> None:
    if not query_service.delete_binding(db, query_id, binding_id):
        raise HTTPException(status_code=404, detail="Binding not found")


@router.get("/{query_id}/sql", response_model=BoundSql)
def get_bound_sql(
    query_id: int,
    dashboard_id: int = Query(..., description="Dashboard whose filter state to bind"),
    db: Session = Depends(get_db),
) -> BoundSql:
    """SQL ready for execution with the dashboard's filters bound in."""
    sql = query_service.render_query_sql(db, query_id, dashboard_id)
    return BoundSql(
        query_id=query_id,
        dashboard_id=dashboard_id,
        sql=sql,
        unbound_placeholders=find_placeholders(sql),
    )
