"""Base CRUD operations for services."""

from typing import Any, Generic, TypeVar

from sqlalchemy.orm import Session

from minibi.exceptions import NotFoundError

T = TypeVar("T")


class CRUDMixin(Generic[T]):
    """
    Mixin class providing generic CRUD operations.

    Usage:
        class DashboardCRUD(CRUDMixin[Dashboard]):
            model = Dashboard

        dashboards = DashboardCRUD()
        dashboard = dashboards.get_or_404(db, 1)
    """

    model: type[T]

    def get_by_id(self, db: Session, id: int) -> T | None:
        """Get a single record by ID."""
        return db.query(self.model).filter(self.model.id == id).first()  # type: ignore[attr-defined]

    def get_or_404(self, db: Session, id: int) -> T:
        """Get a single record by ID or raise NotFoundError."""
        obj = self.get_by_id(db, id)
        if obj is None:
            raise NotFoundError(self.model.__name__, id)
        return obj

    def get_all(self, db: Session, *, order_by: Any | None = None) -> list[T]:
        """Get all records, optionally ordered."""
        query = db.query(self.model)
        if order_by is not None:
            query = query.order_by(order_by)
        return query.all()

    def create(self, db: Session, **kwargs) -> T:
        """Create a new record."""
        obj = self.model(**kwargs)
        db.add(obj)
        db.commit()
        db.refresh(obj)
        return obj

    def delete(self, db: Session, id: int) -> bool:
        """Delete a record. Returns True if deleted, False if not found."""
        obj = self.get_by_id(db, id)
        if not obj:
            return False
        db.delete(obj)
        db.commit()
        return True
