from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from minibi.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from minibi.models.dashboard import Dashboard
    from minibi.models.query import Query


class FilterBinding(Base, TimestampMixin):
    """How one dashboard filter renders inside one query."""

    __tablename__ = "filter_bindings"
    __table_args__ = (UniqueConstraint("query_id", "dashboard_id", "filter_key"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    query_id: Mapped[int] = mapped_column(ForeignKey("queries.id"), index=True)
    dashboard_id: Mapped[int] = mapped_column(ForeignKey("dashboards.id"), index=True)
    filter_key: Mapped[str] = mapped_column(String(100))

    active_value: Mapped[str] = mapped_column(Text)  # contains {{val}}
    inactive_value: Mapped[str] = mapped_column(Text, default="")  # e.g. "1=1"

    # Relationships
    query: Mapped["Query"] = relationship(back_populates="bindings")
    dashboard: Mapped["Dashboard"] = relationship(back_populates="bindings")
