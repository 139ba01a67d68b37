"""
Database Adapter Layer

Database abstraction over MySQL (the production store) and SQLite (local
snapshots). Each call opens its own connection and closes it when the call
returns, whether the statement succeeded or not.
"""

import sqlite3
import logging
from pathlib import Path
from typing import Optional, Any, Dict, List, Sequence
from contextlib import contextmanager
from abc import ABC, abstractmethod

import pymysql
import pymysql.cursors

from .config import DatabaseConfig, config


class DatabaseError(Exception):
    """Raised when the underlying driver fails to connect or execute"""


class DatabaseAdapter(ABC):
    """Abstract base class for database adapters"""

    @abstractmethod
    @contextmanager
    def get_connection(self):
        """Get a database connection"""
        pass

    @abstractmethod
    def normalize_sql(self, sql: str, has_params: bool = True) -> str:
        """Rewrite '?' placeholder SQL into the driver's dialect"""
        pass

    @abstractmethod
    def month_expression(self, column: str) -> str:
        """SQL expression formatting a date column as YYYY-MM"""
        pass

    @abstractmethod
    def _driver_errors(self) -> tuple:
        pass

    def fetchall(self, query: str, params: Optional[Sequence[Any]] = None) -> List[Dict[str, Any]]:
        """Fetch all rows as dictionaries"""
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                try:
                    if params:
                        cursor.execute(self.normalize_sql(query, True), tuple(params))
                    else:
                        cursor.execute(self.normalize_sql(query, False))
                    return [dict(row) for row in cursor.fetchall()]
                finally:
                    cursor.close()
        except self._driver_errors() as e:
            raise DatabaseError(str(e)) from e

    def fetchone(self, query: str, params: Optional[Sequence[Any]] = None) -> Optional[Dict[str, Any]]:
        """Fetch the first row as a dictionary, or None"""
        rows = self.fetchall(query, params)
        return rows[0] if rows else None


class SQLiteAdapter(DatabaseAdapter):
    """SQLite database adapter"""

    def __init__(self, db_path: Path, timeout: float = 30.0):
        self.db_path = Path(db_path)
        self.timeout = timeout
        self.logger = logging.getLogger(self.__class__.__name__)

    def _create_connection(self) -> sqlite3.Connection:
        """Open the snapshot read-only; a missing file is an error, not a new database"""
        conn = sqlite3.connect(
            f"{self.db_path.resolve().as_uri()}?mode=ro",
            uri=True,
            timeout=self.timeout,
            check_same_thread=False
        )
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def get_connection(self):
        """Get a SQLite connection"""
        conn = self._create_connection()
        try:
            yield conn
        finally:
            conn.close()

    def _driver_errors(self) -> tuple:
        return (sqlite3.Error,)

    def normalize_sql(self, sql: str, has_params: bool = True) -> str:
        """SQLite accepts '?' placeholders natively"""
        return sql

    def month_expression(self, column: str) -> str:
        return f"strftime('%Y-%m', {column})"


class MySQLAdapter(DatabaseAdapter):
    """MySQL database adapter"""

    def __init__(self, host: str, database: str, username: str = "",
                 password: str = "", port: int = 3306, timeout: int = 30,
                 charset: str = "utf8mb4"):
        self.host = host
        self.database = database
        self.username = username
        self.password = password
        self.port = port
        self.timeout = timeout
        self.charset = charset
        self.logger = logging.getLogger(self.__class__.__name__)

    def _create_connection(self) -> pymysql.connections.Connection:
        """Create a new MySQL connection"""
        try:
            return pymysql.connect(
                host=self.host,
                database=self.database,
                user=self.username,
                password=self.password,
                port=self.port,
                connect_timeout=self.timeout,
                charset=self.charset,
                cursorclass=pymysql.cursors.DictCursor
            )
        except pymysql.Error as e:
            self.logger.error(f"Failed to connect to MySQL: {e}")
            raise

    @contextmanager
    def get_connection(self):
        """Get a MySQL connection"""
        conn = self._create_connection()
        try:
            yield conn
        finally:
            conn.close()

    def _driver_errors(self) -> tuple:
        return (pymysql.Error,)

    def normalize_sql(self, sql: str, has_params: bool = True) -> str:
        """
        Convert '?' placeholders to pymysql's '%s'.

        pymysql applies %-formatting only when arguments are passed, so
        literal '%' (as in DATE_FORMAT patterns) is doubled in that case.
        """
        if not has_params:
            return sql
        return sql.replace("%", "%%").replace("?", "%s")

    def month_expression(self, column: str) -> str:
        return f"DATE_FORMAT({column}, '%Y-%m')"


def get_database_adapter(db_config: Optional[DatabaseConfig] = None) -> DatabaseAdapter:
    """Get the appropriate database adapter based on configuration"""
    db_config = db_config or config.database

    if db_config.db_type == "mysql":
        return MySQLAdapter(
            host=db_config.mysql_host,
            database=db_config.mysql_database,
            username=db_config.mysql_username,
            password=db_config.mysql_password,
            port=db_config.mysql_port,
            timeout=db_config.connection_timeout
        )
    elif db_config.db_type == "sqlite":
        return SQLiteAdapter(
            db_path=db_config.path,
            timeout=db_config.connection_timeout
        )
    raise ValueError(f"Unsupported database type: {db_config.db_type}")
