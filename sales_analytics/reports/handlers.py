"""
Report Handlers (Business Logic Layer)

Each handler class composes the shared filter predicate into one or more
aggregate statements over the sales table and reshapes the rows for the
dashboard charts. Query failures propagate as ReportQueryError.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Mapping, Optional

from .service import ReportService, to_float, to_int
from .filters import build_filter

logger = logging.getLogger(__name__)

MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

# Display order for customer tiers; anything else sorts ahead of these
TIER_ORDER = ("Platinum", "Gold", "Silver", "Bronze")

TOP_PRODUCTS_LIMIT = 5


def month_label(month_key: Optional[str]) -> Optional[str]:
    """'2024-03' -> 'Mar'"""
    if not month_key:
        return None
    return MONTH_ABBREVIATIONS[int(str(month_key)[5:7]) - 1]


def calculate_growth(monthly_revenue: List[float]) -> float:
    """
    Percentage change between the first and last month of a chronological
    revenue series, rounded half away from zero to one decimal.

    Returns 0 with fewer than two months or a non-positive first month.
    """
    if len(monthly_revenue) < 2:
        return 0.0
    first, last = monthly_revenue[0], monthly_revenue[-1]
    if first <= 0:
        return 0.0
    pct = (last - first) / first * 100
    # Decimal(float) keeps the exact binary value; ties round away from zero
    return float(Decimal(pct).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


class KpiReports:
    """Handlers for headline KPI figures"""

    def __init__(self, service: ReportService):
        self.service = service

    def get_kpis(self, query: Mapping[str, Any]) -> dict:
        """Get revenue, orders, distinct customers and growth"""
        where_clause, params = build_filter(query)
        table = self.service.sales_table

        totals = self.service.execute_single(f"""
            SELECT
                SUM(revenue) AS revenue,
                COUNT(order_id) AS orders,
                COUNT(DISTINCT customer_id) AS customers
            FROM {table}
            {where_clause}
        """, params) or {}

        month = self.service.month_expression("order_date")
        monthly = self.service.execute_query(f"""
            SELECT
                {month} AS month_year,
                SUM(revenue) AS monthly_revenue
            FROM {table}
            {where_clause}
            GROUP BY {month}
            ORDER BY month_year ASC
        """, params)

        return {
            "revenue": to_float(totals.get("revenue")),
            "orders": to_int(totals.get("orders")),
            "customers": to_int(totals.get("customers")),
            "growth": calculate_growth([to_float(row["monthly_revenue"]) for row in monthly])
        }


class BreakdownReports:
    """Handlers for revenue broken down by a single dimension"""

    def __init__(self, service: ReportService):
        self.service = service

    def _revenue_by(self, column: str, query: Mapping[str, Any],
                    order_by: str = "", limit: Optional[int] = None) -> Dict[str, List]:
        where_clause, params = build_filter(query)
        sql = f"""
            SELECT
                {column} AS label,
                SUM(revenue) AS value
            FROM {self.service.sales_table}
            {where_clause}
            GROUP BY {column}
            {order_by}
        """
        if limit is not None:
            sql += f" LIMIT {int(limit)}"
        results = self.service.execute_query(sql, params)
        return self.service.format_chart_data(results)

    def get_sales_by_month(self, query: Mapping[str, Any]) -> Dict[str, List]:
        """Get revenue per calendar month, chronologically"""
        where_clause, params = build_filter(query)
        month = self.service.month_expression("order_date")
        results = self.service.execute_query(f"""
            SELECT
                {month} AS sort_order,
                SUM(revenue) AS value
            FROM {self.service.sales_table}
            {where_clause}
            GROUP BY {month}
            ORDER BY sort_order
        """, params)

        return {
            "labels": [month_label(row["sort_order"]) for row in results],
            "data": [to_float(row["value"]) for row in results]
        }

    def get_top_products(self, query: Mapping[str, Any]) -> Dict[str, List]:
        """Get the highest-revenue products"""
        return self._revenue_by("product_name", query,
                                order_by="ORDER BY value DESC", limit=TOP_PRODUCTS_LIMIT)

    def get_regions(self, query: Mapping[str, Any]) -> Dict[str, List]:
        """Get revenue per region"""
        return self._revenue_by("region", query)

    def get_channels(self, query: Mapping[str, Any]) -> Dict[str, List]:
        """Get revenue per sales channel"""
        return self._revenue_by("sales_channel", query, order_by="ORDER BY value DESC")

    def get_tiers(self, query: Mapping[str, Any]) -> Dict[str, List]:
        """Get revenue per customer tier, best tier first"""
        ranks = " ".join(
            f"WHEN '{tier}' THEN {rank}" for rank, tier in enumerate(TIER_ORDER, start=1)
        )
        return self._revenue_by(
            "customer_tier", query,
            order_by=f"ORDER BY CASE customer_tier {ranks} ELSE 0 END"
        )


class MetadataReports:
    """Handlers for filter dropdown metadata"""

    # Response key -> column
    COLUMNS = (
        ('regions', 'region'),
        ('products', 'product_name'),
        ('channels', 'sales_channel'),
        ('categories', 'product_category'),
    )

    def __init__(self, service: ReportService):
        self.service = service

    def get_distinct_values(self, column: str) -> List[Any]:
        results = self.service.execute_query(
            f"SELECT DISTINCT {column} AS value FROM {self.service.sales_table} ORDER BY {column}"
        )
        return [row["value"] for row in results]

    def get_metadata(self) -> dict:
        """Get distinct values for every filterable column"""
        return {key: self.get_distinct_values(column) for key, column in self.COLUMNS}
