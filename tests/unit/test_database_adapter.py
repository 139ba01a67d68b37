"""
================================================================================
Sales Analytics API - Database Adapter Unit Tests
================================================================================
Description:
    Unit tests for the MySQL and SQLite adapters. MySQL is exercised with a
    mocked pymysql connection; SQLite runs against a temporary database.

Test Coverage:
    - Placeholder and literal '%' rewriting for pymysql
    - Connection release on success and failure
    - Driver error wrapping
    - Adapter selection from configuration
================================================================================
"""
from pathlib import Path
from unittest.mock import MagicMock, patch

import pymysql
import pytest

from sales_analytics.config import DatabaseConfig
from sales_analytics.database_adapter import (
    DatabaseAdapter,
    DatabaseError,
    MySQLAdapter,
    SQLiteAdapter,
    get_database_adapter
)


@pytest.fixture
def mysql_adapter():
    return MySQLAdapter(host="db.local", database="analytics_db", username="root", password="secret")


@pytest.fixture
def mock_mysql_connection():
    """Mock pymysql connection returning a DictCursor-like cursor"""
    conn = MagicMock()
    cursor = conn.cursor.return_value
    cursor.fetchall.return_value = [{'label': 'North', 'value': 300}]
    return conn, cursor


class TestMySQLAdapter:
    """Test suite for MySQLAdapter"""

    def test_normalize_sql_rewrites_placeholders(self, mysql_adapter):
        sql = "SELECT region FROM sales_data WHERE region = ? AND sales_channel = ?"

        assert mysql_adapter.normalize_sql(sql, True) == (
            "SELECT region FROM sales_data WHERE region = %s AND sales_channel = %s"
        )

    def test_normalize_sql_escapes_percent_with_params(self, mysql_adapter):
        sql = "SELECT DATE_FORMAT(order_date, '%Y-%m') FROM sales_data WHERE region = ?"

        assert mysql_adapter.normalize_sql(sql, True) == (
            "SELECT DATE_FORMAT(order_date, '%%Y-%%m') FROM sales_data WHERE region = %s"
        )

    def test_normalize_sql_untouched_without_params(self, mysql_adapter):
        sql = "SELECT DATE_FORMAT(order_date, '%Y-%m') FROM sales_data"

        assert mysql_adapter.normalize_sql(sql, False) == sql

    def test_month_expression(self, mysql_adapter):
        assert mysql_adapter.month_expression("order_date") == "DATE_FORMAT(order_date, '%Y-%m')"

    @patch('sales_analytics.database_adapter.pymysql.connect')
    def test_fetchall_with_params(self, mock_connect, mysql_adapter, mock_mysql_connection):
        conn, cursor = mock_mysql_connection
        mock_connect.return_value = conn

        rows = mysql_adapter.fetchall("SELECT region AS label FROM sales_data WHERE region = ?", ['North'])

        assert rows == [{'label': 'North', 'value': 300}]
        cursor.execute.assert_called_once_with(
            "SELECT region AS label FROM sales_data WHERE region = %s", ('North',)
        )
        conn.close.assert_called_once()

    @patch('sales_analytics.database_adapter.pymysql.connect')
    def test_fetchall_without_params(self, mock_connect, mysql_adapter, mock_mysql_connection):
        conn, cursor = mock_mysql_connection
        mock_connect.return_value = conn

        mysql_adapter.fetchall("SELECT DISTINCT region FROM sales_data", [])

        cursor.execute.assert_called_once_with("SELECT DISTINCT region FROM sales_data")

    @patch('sales_analytics.database_adapter.pymysql.connect')
    def test_connect_arguments(self, mock_connect, mysql_adapter, mock_mysql_connection):
        mock_connect.return_value = mock_mysql_connection[0]

        mysql_adapter.fetchall("SELECT 1")

        kwargs = mock_connect.call_args.kwargs
        assert kwargs['host'] == "db.local"
        assert kwargs['database'] == "analytics_db"
        assert kwargs['user'] == "root"
        assert kwargs['password'] == "secret"
        assert kwargs['port'] == 3306
        assert kwargs['cursorclass'] is pymysql.cursors.DictCursor

    @patch('sales_analytics.database_adapter.pymysql.connect')
    def test_connection_released_on_execute_failure(self, mock_connect, mysql_adapter, mock_mysql_connection):
        conn, cursor = mock_mysql_connection
        cursor.execute.side_effect = pymysql.err.ProgrammingError(1146, "Table 'analytics_db.sales_data' doesn't exist")
        mock_connect.return_value = conn

        with pytest.raises(DatabaseError) as exc_info:
            mysql_adapter.fetchall("SELECT * FROM sales_data")

        assert "doesn't exist" in str(exc_info.value)
        cursor.close.assert_called_once()
        conn.close.assert_called_once()

    @patch('sales_analytics.database_adapter.pymysql.connect')
    def test_uses_shared_fetch_path(self, mock_connect, mysql_adapter, mock_mysql_connection):
        """Test MySQL rows flow through the base adapter's fetchall"""
        conn, cursor = mock_mysql_connection
        mock_connect.return_value = conn

        assert type(mysql_adapter).fetchall is DatabaseAdapter.fetchall
        assert mysql_adapter.fetchall("SELECT 1") == [{'label': 'North', 'value': 300}]
        cursor.close.assert_called_once()

    @patch('sales_analytics.database_adapter.pymysql.connect')
    def test_connect_failure_wrapped(self, mock_connect, mysql_adapter):
        mock_connect.side_effect = pymysql.err.OperationalError(2003, "Can't connect to MySQL server")

        with pytest.raises(DatabaseError):
            mysql_adapter.fetchall("SELECT 1")

    @patch('sales_analytics.database_adapter.pymysql.connect')
    def test_fetchone(self, mock_connect, mysql_adapter, mock_mysql_connection):
        mock_connect.return_value = mock_mysql_connection[0]

        assert mysql_adapter.fetchone("SELECT 1") == {'label': 'North', 'value': 300}


class TestSQLiteAdapter:
    """Test suite for SQLiteAdapter"""

    def test_fetchall_returns_dicts(self, sales_db):
        adapter = SQLiteAdapter(sales_db)

        rows = adapter.fetchall(
            "SELECT order_id, region FROM sales_data WHERE region = ? ORDER BY order_id", ['South']
        )

        assert rows == [{'order_id': 2, 'region': 'South'}, {'order_id': 6, 'region': 'South'}]

    def test_month_expression_runs(self, sales_db):
        adapter = SQLiteAdapter(sales_db)
        month = adapter.month_expression("order_date")

        row = adapter.fetchone(f"SELECT {month} AS month_key FROM sales_data WHERE order_id = ?", [1])

        assert row == {'month_key': '2024-01'}

    def test_fetchone_no_rows(self, sales_db):
        adapter = SQLiteAdapter(sales_db)

        assert adapter.fetchone("SELECT * FROM sales_data WHERE region = ?", ['Nowhere']) is None

    def test_missing_table_wrapped(self, tmp_path):
        db_path = tmp_path / "empty.db"
        db_path.touch()
        adapter = SQLiteAdapter(db_path)

        with pytest.raises(DatabaseError) as exc_info:
            adapter.fetchall("SELECT * FROM sales_data")

        assert "no such table" in str(exc_info.value)

    def test_missing_snapshot_not_created(self, tmp_path):
        """Test a missing snapshot file fails instead of becoming an empty database"""
        db_path = tmp_path / "missing.db"
        adapter = SQLiteAdapter(db_path)

        with pytest.raises(DatabaseError):
            adapter.fetchone("SELECT 1 AS ok")

        assert not db_path.exists()

    def test_snapshot_opened_read_only(self, sales_db):
        adapter = SQLiteAdapter(sales_db)

        with pytest.raises(DatabaseError) as exc_info:
            adapter.fetchall("DELETE FROM sales_data")

        assert "readonly" in str(exc_info.value)
        assert len(adapter.fetchall("SELECT order_id FROM sales_data")) == 7

    def test_normalize_sql_is_identity(self, tmp_path):
        adapter = SQLiteAdapter(tmp_path / "x.db")
        sql = "SELECT strftime('%Y-%m', order_date) FROM sales_data WHERE region = ?"

        assert adapter.normalize_sql(sql, True) == sql


class TestGetDatabaseAdapter:
    """Test suite for adapter selection"""

    def test_mysql_selected(self):
        db_config = DatabaseConfig(db_type="mysql", mysql_host="10.0.0.5", mysql_port=3307)

        adapter = get_database_adapter(db_config)

        assert isinstance(adapter, MySQLAdapter)
        assert adapter.host == "10.0.0.5"
        assert adapter.port == 3307

    def test_sqlite_selected(self, tmp_path):
        db_config = DatabaseConfig(db_type="sqlite", path=tmp_path / "snapshot.db")

        adapter = get_database_adapter(db_config)

        assert isinstance(adapter, SQLiteAdapter)
        assert adapter.db_path == Path(tmp_path / "snapshot.db")

    def test_unknown_type_rejected(self):
        with pytest.raises(ValueError):
            get_database_adapter(DatabaseConfig(db_type="oracle"))
