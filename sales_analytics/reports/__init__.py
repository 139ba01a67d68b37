"""
Reports Module

Sales report endpoints for the dashboard, layered as filters (SQL
predicates), service (query execution), handlers (report logic) and router
(HTTP surface).
"""

from .router import router as reports_router
from .filters import build_filter, FILTER_COLUMNS, ALL_SENTINEL
from .service import ReportService, ReportQueryError
from .models import ChartData, KpiSummary, FilterOptions

__all__ = [
    "reports_router",
    "build_filter",
    "FILTER_COLUMNS",
    "ALL_SENTINEL",
    "ReportService",
    "ReportQueryError",
    "ChartData",
    "KpiSummary",
    "FilterOptions"
]
