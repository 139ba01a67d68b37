"""
Report Service (Data Access Layer)

Runs report statements through the configured database adapter and shapes
label/value rows into chart payloads.
"""

import logging
from typing import List, Dict, Any, Optional

from ..database_adapter import DatabaseAdapter, DatabaseError

logger = logging.getLogger(__name__)

QUERY_ERROR_MESSAGE = (
    "Failed to fetch data from the database. "
    "Check database connection and SQL syntax."
)


class ReportQueryError(Exception):
    """A report statement could not be executed"""

    def __init__(self, message: str = QUERY_ERROR_MESSAGE):
        super().__init__(message)
        self.message = message


class ReportService:
    """Base service for executing report queries"""

    def __init__(self, adapter: DatabaseAdapter, sales_table: str = "sales_data"):
        self.adapter = adapter
        self.sales_table = sales_table

    def month_expression(self, column: str = "order_date") -> str:
        """Dialect-specific YYYY-MM expression for a date column"""
        return self.adapter.month_expression(column)

    def execute_query(self, query: str, params: Optional[List[Any]] = None) -> List[Dict[str, Any]]:
        """
        Execute a query and return results.

        Args:
            query: SQL query string with '?' placeholders
            params: Query parameters

        Returns:
            List of rows keyed by column alias

        Raises:
            ReportQueryError: if the connection or statement fails
        """
        params = params or []
        logger.info("Executing SQL: %s...", query[:80].replace("\n", " "))
        try:
            return self.adapter.fetchall(query, params)
        except DatabaseError as e:
            logger.error(f"Database query error: {e}")
            raise ReportQueryError() from e

    def execute_single(self, query: str, params: Optional[List[Any]] = None) -> Optional[Dict[str, Any]]:
        """Execute query and return single result"""
        rows = self.execute_query(query, params)
        return rows[0] if rows else None

    def format_chart_data(self, results: List[Dict[str, Any]],
                          label_key: str = "label", value_key: str = "value") -> Dict[str, List]:
        """
        Format query results as chart data.

        Returns:
            Dictionary with 'labels' and 'data' keys
        """
        return {
            "labels": [row[label_key] for row in results],
            "data": [to_float(row[value_key]) for row in results]
        }


def to_float(value: Any) -> float:
    """Coerce a SQL aggregate (Decimal, int, None) to float"""
    return float(value) if value is not None else 0.0


def to_int(value: Any) -> int:
    return int(value) if value is not None else 0
