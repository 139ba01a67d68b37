"""
Report Filters

Builds the SQL WHERE clause shared by every sales report from the query
string. Values are always bound as positional parameters, never formatted
into the statement text.
"""

from typing import Any, List, Mapping, Optional, Tuple


ALL_SENTINEL = "All"

# Query parameter -> sales_data column, in predicate order.
# Customer tier is a grouping dimension, never a filter.
FILTER_COLUMNS = (
    ('region', 'region'),
    ('product', 'product_name'),
    ('channel', 'sales_channel'),
    ('category', 'product_category'),
)


def is_active(value: Optional[str]) -> bool:
    """True when a filter value should narrow the result set"""
    return bool(value) and value != ALL_SENTINEL


def build_filter(query: Mapping[str, Any]) -> Tuple[str, List[Any]]:
    """
    Build WHERE clause and params from recognized query parameters.

    Args:
        query: Query-string mapping (unrecognized keys are ignored)

    Returns:
        Tuple of (where_clause, params_list)
        Example: ("WHERE region = ? AND sales_channel = ?", ["North", "Online"])
    """
    conditions = []
    params = []

    for param, column in FILTER_COLUMNS:
        value = query.get(param)
        if is_active(value):
            conditions.append(f"{column} = ?")
            params.append(value)

    where_clause = f"WHERE {' AND '.join(conditions)}" if conditions else ""
    return where_clause, params
