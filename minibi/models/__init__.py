from minibi.models.base import Base
from minibi.models.dashboard import Dashboard
from minibi.models.dashboard_filter import DashboardFilter
from minibi.models.query import Query
from minibi.models.filter_binding import FilterBinding

__all__ = [
    "Base",
    "Dashboard",
    "DashboardFilter",
    "Query",
    "FilterBinding",
]
