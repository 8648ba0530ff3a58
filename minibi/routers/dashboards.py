from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from minibi.database import get_db
from minibi.schemas.requests import (
    DashboardCreate,
    DashboardRead,
    DashboardUpdate,
    FilterCreate,
    FilterRead,
    FilterStateUpdate,
    FilterUpdate,
)
from minibi.services import dashboard_service

router = APIRouter()


@router.get("/", response_model=list[DashboardRead])
def list_dashboards(db: Session = Depends(get_db)):
    """List all dashboards with their filters."""
    return dashboard_service.get_all_dashboards(db)


@router.post("/", response_model=DashboardRead, status_code=201)
def create_dashboard(body: DashboardCreate, db: Session = Depends(get_db)):
    """Create a dashboard."""
    return dashboard_service.create_dashboard(
        db, body.name, body.description, body.variables, body.public
    )


@router.get("/{dashboard_id}", response_model=DashboardRead)
def get_dashboard(dashboard_id: int, db: Session = Depends(get_db)):
    return dashboard_service.get_dashboard(db, dashboard_id)


@router.patch("/{dashboard_id}", response_model=DashboardRead)
def update_dashboard(dashboard_id: int, body: DashboardUpdate, db: Session = Depends(get_db)):
    """Update only the fields present in the request."""
    changes = body.model_dump(exclude_unset=True)
    return dashboard_service.update_dashboard(db, dashboard_id, **changes)


@router.delete("/{dashboard_id}", status_code=204)
def delete_dashboard(dashboard_id: int, db: Session = Depends(get_db)) -> None:
    if not dashboard_service.delete_dashboard(db, dashboard_id):
        raise HTTPException(status_code=404, detail="Dashboard not found")


@router.post("/{dashboard_id}/filters", response_model=FilterRead, status_code=201)
def create_filter(dashboard_id: int, body: FilterCreate, db: Session = Depends(get_db)):
    """Add a filter to a dashboard."""
    options = [o.model_dump() for o in body.options] if body.options is not None else None
    return dashboard_service.create_filter(
        db,
        dashboard_id,
        key=body.key,
        name=body.name,
        type=body.type,
        initial_value=body.initial_value,
        active=body.active,
        options=options,
        min=body.min,
        max=body.max,
        placeholder=body.placeholder,
        description=body.description,
    )


@router.patch("/{dashboard_id}/filters/{filter_id}/definition", response_model=FilterRead)
def update_filter_definition(
    dashboard_id: int,
    filter_id: int,
    body: FilterUpdate,
    db: Session = Depends(get_db),
):
    """Change a filter's display fields or initial value."""
    return dashboard_service.update_filter(
        db, dashboard_id, filter_id, **body.model_dump(exclude_unset=True)
    )


@router.patch("/{dashboard_id}/filters/{filter_id}", response_model=FilterRead)
def update_filter_state(
    dashboard_id: int,
    filter_id: int,
    body: FilterStateUpdate,
    db: Session = Depends(get_db),
):
    """Toggle a filter, set its current value, or reset it to the initial value."""
    record = dashboard_service.get_filter(db, dashboard_id, filter_id)

    if body.reset:
        record = dashboard_service.reset_filter_value(db, dashboard_id, filter_id)
    elif "current_value" in body.model_fields_set:
        record = dashboard_service.set_filter_value(
            db, dashboard_id, filter_id, body.current_value
        )

    if body.active is not None:
        record = dashboard_service.set_filter_active(db, dashboard_id, filter_id, body.active)

    return record


@router.delete("/{dashboard_id}/filters/{filter_id}", status_code=204)
def delete_filter(dashboard_id: int, filter_id: int, db: Session = Depends(get_db)) -> None:
    if not dashboard_service.delete_filter(db, dashboard_id, filter_id):
        raise HTTPException(status_code=404, detail="Filter not found")
