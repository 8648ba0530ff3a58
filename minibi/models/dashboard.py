from typing import TYPE_CHECKING

from sqlalchemy import JSON, Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from minibi.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from minibi.models.dashboard_filter import DashboardFilter
    from minibi.models.filter_binding import FilterBinding


class Dashboard(Base, TimestampMixin):
    """Dashboard owning filters and template variables."""

    __tablename__ = "dashboards"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), index=True)
    description: Mapped[str | None] = mapped_column(Text)
    # Dashboard-level {{variable}} values for text blocks
    variables: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    public: Mapped[bool] = mapped_column(Boolean, default=False)

    # Relationships
    filters: Mapped[list["DashboardFilter"]] = relationship(
        back_populates="dashboard",
        cascade="all, delete-orphan",
        order_by="DashboardFilter.id",
    )
    bindings: Mapped[list["FilterBinding"]] = relationship(
        back_populates="dashboard", cascade="all, delete-orphan"
    )
