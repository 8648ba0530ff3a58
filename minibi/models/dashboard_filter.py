from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, Boolean, Float, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from minibi.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from minibi.models.dashboard import Dashboard


class DashboardFilter(Base, TimestampMixin):
    """Persisted dashboard filter and its current state."""

    __tablename__ = "dashboard_filters"
    __table_args__ = (UniqueConstraint("dashboard_id", "key"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    dashboard_id: Mapped[int] = mapped_column(ForeignKey("dashboards.id"), index=True)

    key: Mapped[str] = mapped_column(String(100), index=True)  # used as {{key}}
    name: Mapped[str] = mapped_column(String(255))
    type: Mapped[str] = mapped_column(String(20))  # string, date_range, list, ...
    active: Mapped[bool] = mapped_column(Boolean, default=False)

    # Values are JSON: scalars, [lower, upper] pairs or lists
    initial_value: Mapped[Any] = mapped_column(JSON, nullable=True)
    current_value: Mapped[Any] = mapped_column(JSON, nullable=True)
    options: Mapped[list | None] = mapped_column(JSON, nullable=True)  # [{label, value}]

    min: Mapped[float | None] = mapped_column(Float)
    max: Mapped[float | None] = mapped_column(Float)
    placeholder: Mapped[str | None] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text)

    # Relationships
    dashboard: Mapped["Dashboard"] = relationship(back_populates="filters")
