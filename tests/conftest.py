"""
================================================================================
Sales Analytics API - Test Configuration and Fixtures
================================================================================
Description:
    Shared pytest configuration and fixtures for unit and API tests.
    Provides a seeded SQLite sales table, mock adapters and a FastAPI
    test client wired to the seeded data.

Fixtures:
    - sales_rows: Sample sales_data rows
    - sales_db: Temporary SQLite database holding sales_rows
    - mock_adapter: Mock DatabaseAdapter
    - client: FastAPI test client backed by sales_db
================================================================================
"""
import sqlite3
import sys
from pathlib import Path
from unittest.mock import Mock

import pytest

# Add project root to path for all tests
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from sales_analytics.database_adapter import DatabaseAdapter, SQLiteAdapter
from sales_analytics.reports.service import ReportService


SALES_SCHEMA = """
    CREATE TABLE sales_data (
        order_id INTEGER PRIMARY KEY,
        order_date TEXT,
        customer_id TEXT,
        customer_tier TEXT,
        region TEXT,
        product_name TEXT,
        product_category TEXT,
        sales_channel TEXT,
        revenue REAL
    )
"""


@pytest.fixture
def sales_rows():
    """Sample sales data spanning January to March 2024"""
    return [
        (1, '2024-01-05', 'C1', 'Gold', 'North', 'Widget', 'Hardware', 'Online', 100.0),
        (2, '2024-01-20', 'C2', 'Platinum', 'South', 'Gadget', 'Hardware', 'Retail', 200.0),
        (3, '2024-02-10', 'C1', 'Gold', 'North', 'Gizmo', 'Accessories', 'Online', 150.0),
        (4, '2024-03-15', 'C3', 'Bronze', 'East', 'Widget', 'Hardware', 'Partner', 300.0),
        (5, '2024-03-18', 'C4', 'Silver', 'North', 'Doohickey', 'Accessories', 'Retail', 50.0),
        (6, '2024-03-25', 'C2', 'Platinum', 'South', 'Sprocket', 'Parts', 'Online', 25.0),
        (7, '2024-03-28', 'C5', 'Diamond', 'West', 'Thingamajig', 'Parts', 'Online', 10.0),
    ]


@pytest.fixture
def sales_db(tmp_path, sales_rows):
    """Create a temporary SQLite database with a seeded sales_data table"""
    db_path = tmp_path / "sales.db"
    conn = sqlite3.connect(str(db_path))
    try:
        conn.execute(SALES_SCHEMA)
        conn.executemany(
            "INSERT INTO sales_data VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
            sales_rows
        )
        conn.commit()
    finally:
        conn.close()
    return db_path


@pytest.fixture
def mock_adapter():
    """Create a mock database adapter speaking the SQLite dialect"""
    adapter = Mock(spec=DatabaseAdapter)
    adapter.fetchall.return_value = []
    adapter.month_expression.side_effect = lambda column: f"strftime('%Y-%m', {column})"
    return adapter


@pytest.fixture
def client(sales_db):
    """Create a FastAPI test client whose reports read from sales_db"""
    from fastapi.testclient import TestClient
    from sales_analytics.app import app
    from sales_analytics.reports.router import get_report_service

    adapter = SQLiteAdapter(sales_db)
    app.dependency_overrides[get_report_service] = lambda: ReportService(adapter)
    yield TestClient(app)
    app.dependency_overrides.clear()
