"""
Report Router (API Layer)

FastAPI router exposing the dashboard report endpoints. Every report accepts
the same optional filters; a value of "All" disables a filter.
"""

import logging
from typing import Optional
from fastapi import APIRouter, Query, Depends

from .handlers import KpiReports, BreakdownReports, MetadataReports
from .models import ChartData, KpiSummary, FilterOptions
from .service import ReportService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["reports"])


def get_report_service() -> ReportService:
    """Get report service instance bound to the application's adapter"""
    from ..app import app_state
    return ReportService(app_state["db_adapter"], app_state["sales_table"])


def sales_filters(
    region: Optional[str] = Query(None, description="Region, or 'All'"),
    product: Optional[str] = Query(None, description="Product name, or 'All'"),
    channel: Optional[str] = Query(None, description="Sales channel, or 'All'"),
    category: Optional[str] = Query(None, description="Product category, or 'All'")
) -> dict:
    """Collect the recognized filter parameters"""
    return {
        "region": region,
        "product": product,
        "channel": channel,
        "category": category
    }


# ============================================================================
# KPI ENDPOINTS
# ============================================================================

@router.get("/kpis", response_model=KpiSummary)
def get_kpis(
    filters: dict = Depends(sales_filters),
    service: ReportService = Depends(get_report_service)
):
    """Get revenue, orders, customers and growth"""
    return KpiReports(service).get_kpis(filters)


# ============================================================================
# CHART ENDPOINTS
# ============================================================================

@router.get("/sales", response_model=ChartData)
def get_sales(
    filters: dict = Depends(sales_filters),
    service: ReportService = Depends(get_report_service)
):
    """Get revenue by month"""
    return BreakdownReports(service).get_sales_by_month(filters)


@router.get("/products", response_model=ChartData)
def get_products(
    filters: dict = Depends(sales_filters),
    service: ReportService = Depends(get_report_service)
):
    """Get top five products by revenue"""
    return BreakdownReports(service).get_top_products(filters)


@router.get("/regions", response_model=ChartData)
def get_regions(
    filters: dict = Depends(sales_filters),
    service: ReportService = Depends(get_report_service)
):
    """Get revenue by region"""
    return BreakdownReports(service).get_regions(filters)


@router.get("/channels", response_model=ChartData)
def get_channels(
    filters: dict = Depends(sales_filters),
    service: ReportService = Depends(get_report_service)
):
    """Get revenue by sales channel"""
    return BreakdownReports(service).get_channels(filters)


@router.get("/tiers", response_model=ChartData)
def get_tiers(
    filters: dict = Depends(sales_filters),
    service: ReportService = Depends(get_report_service)
):
    """Get revenue by customer tier"""
    return BreakdownReports(service).get_tiers(filters)


# ============================================================================
# METADATA ENDPOINTS
# ============================================================================

@router.get("/metadata", response_model=FilterOptions)
def get_metadata(service: ReportService = Depends(get_report_service)):
    """Get distinct values for the filter dropdowns"""
    return MetadataReports(service).get_metadata()
