"""
Report Models

Pydantic response models for the sales report endpoints.
"""

from typing import Optional, List
from pydantic import BaseModel, Field


class ChartData(BaseModel):
    """Chart data response model"""
    labels: List[Optional[str]]
    data: List[float]


class KpiSummary(BaseModel):
    """Headline figures for the filtered sales set"""
    revenue: float = Field(0.0, description="Total revenue")
    orders: int = Field(0, description="Number of orders")
    customers: int = Field(0, description="Number of distinct customers")
    growth: float = Field(0.0, description="Revenue change from first to last month, in percent")


class FilterOptions(BaseModel):
    """Distinct values for the dashboard filter dropdowns"""
    regions: List[Optional[str]]
    products: List[Optional[str]]
    channels: List[Optional[str]]
    categories: List[Optional[str]]
