from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from minibi.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from minibi.models.filter_binding import FilterBinding


class Query(Base, TimestampMixin):
    """Stored SQL template with {{filter_key}} placeholders."""

    __tablename__ = "queries"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), index=True)
    description: Mapped[str | None] = mapped_column(Text)
    sql: Mapped[str] = mapped_column(Text)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    public: Mapped[bool] = mapped_column(Boolean, default=False)
    last_executed: Mapped[datetime | None] = mapped_column(DateTime)

    # Relationships
    bindings: Mapped[list["FilterBinding"]] = relationship(
        back_populates="query",
        cascade="all, delete-orphan",
        order_by="FilterBinding.id",
    )
