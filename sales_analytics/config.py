"""
Configuration Management

Unified configuration for the sales analytics API. Settings are grouped in
dataclass sections, loaded from an optional .config.json file and overridden
by environment variables.
"""

import os
import json
import logging
import logging.handlers
from pathlib import Path
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field
from enum import Enum


class Environment(Enum):
    """Supported environments"""
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


class LogLevel(Enum):
    """Supported log levels"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass
class DatabaseConfig:
    """Database configuration with connection settings"""
    # Database type: 'mysql' or 'sqlite'
    db_type: str = "mysql"

    # MySQL settings
    mysql_host: str = "localhost"
    mysql_port: int = 3306
    mysql_database: str = "analytics_db"
    mysql_username: str = "root"
    mysql_password: str = ""

    # SQLite snapshot settings
    path: Path = field(default_factory=lambda: Path("data/snapshot.db"))

    # Common settings
    sales_table: str = "sales_data"
    connection_timeout: int = 30


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: LogLevel = LogLevel.INFO
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    file_rotation_size: int = 10 * 1024 * 1024  # 10MB
    file_retention_count: int = 5
    enable_file: bool = False
    logs_dir: Path = field(default_factory=lambda: Path("data/logs"))


@dataclass
class WebConfig:
    """Web interface configuration"""
    host: str = "0.0.0.0"
    port: int = 5001
    reload: bool = False
    log_level: str = "info"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    static_dir: Optional[str] = "static"


class UnifiedConfig:
    """
    Central configuration for the API.

    Singleton; loads .config.json when present and applies environment
    variable overrides on top.
    """

    _instance: Optional['UnifiedConfig'] = None
    _initialized: bool = False
    _config_file = Path(".config.json")
    _json_config: Optional[Dict[str, Any]] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._load_json_config()

        env_mode = self._get_config_value('environment', 'mode', default='development')
        if not env_mode or not isinstance(env_mode, str):
            env_mode = 'development'
        env_var = os.getenv('ANALYTICS_ENVIRONMENT')
        if env_var:
            env_mode = env_var
        try:
            self.environment = Environment(env_mode.lower())
        except ValueError:
            self.environment = Environment.DEVELOPMENT

        self.database = self._load_database_config()
        self.logging = self._load_logging_config()
        self.web = self._load_web_config()

        self._initialized = True

    def _load_json_config(self):
        """Load configuration from .config.json file"""
        if self._config_file.exists():
            try:
                with open(self._config_file, 'r', encoding='utf-8') as f:
                    self._json_config = json.load(f)
                logging.getLogger(__name__).info(f"Loaded configuration from {self._config_file}")
            except (json.JSONDecodeError, IOError) as e:
                logging.getLogger(__name__).warning(f"Error loading {self._config_file}: {e}. Using defaults.")
                self._json_config = None
        else:
            self._json_config = None

    def _get_config_value(self, *keys, default=None):
        """
        Get a value from JSON config using nested keys
        Example: _get_config_value('database', 'mysql', 'host', default='localhost')
        """
        if not self._json_config:
            return default

        value = self._json_config
        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        # Skip documentation keys (keys starting with _)
        if isinstance(value, dict):
            return {k: v for k, v in value.items() if not k.startswith('_')} if value else default

        return value if value is not None else default

    def _load_database_config(self) -> DatabaseConfig:
        """Load database configuration from JSON and environment overrides"""
        config = DatabaseConfig()

        db_type = self._get_config_value('database', 'type', default='mysql')
        config.db_type = os.getenv('ANALYTICS_DATABASE_TYPE', db_type).lower()

        mysql_config = self._get_config_value('database', 'mysql', default={})
        config.mysql_host = os.getenv('ANALYTICS_MYSQL_HOST', mysql_config.get('host', 'localhost'))
        config.mysql_port = int(os.getenv('ANALYTICS_MYSQL_PORT', str(mysql_config.get('port', 3306))))
        config.mysql_database = os.getenv('ANALYTICS_MYSQL_DATABASE', mysql_config.get('database', 'analytics_db'))
        config.mysql_username = os.getenv('ANALYTICS_MYSQL_USERNAME', mysql_config.get('username', 'root'))
        config.mysql_password = os.getenv('ANALYTICS_MYSQL_PASSWORD', mysql_config.get('password', ''))

        sqlite_path = self._get_config_value('database', 'sqlite', 'path', default='data/snapshot.db')
        config.path = Path(os.getenv('ANALYTICS_DATABASE_PATH', sqlite_path))

        common_config = self._get_config_value('database', 'common', default={})
        config.sales_table = os.getenv('ANALYTICS_SALES_TABLE', common_config.get('sales_table', 'sales_data'))
        config.connection_timeout = int(os.getenv('ANALYTICS_DATABASE_TIMEOUT', str(common_config.get('connection_timeout', 30))))

        return config

    def _load_logging_config(self) -> LoggingConfig:
        """Load logging configuration from JSON and environment overrides"""
        log_config = self._get_config_value('logging', default={})
        config = LoggingConfig()

        log_level = os.getenv('ANALYTICS_LOG_LEVEL', log_config.get('level', 'INFO'))
        try:
            config.level = LogLevel(log_level.upper())
        except ValueError:
            config.level = LogLevel.INFO

        config.format = os.getenv('ANALYTICS_LOG_FORMAT', log_config.get('format', config.format))
        config.date_format = log_config.get('date_format', config.date_format)
        rotation_mb = log_config.get('file_rotation_size_mb', 10)
        config.file_rotation_size = rotation_mb * 1024 * 1024
        config.file_retention_count = log_config.get('file_retention_count', 5)
        config.enable_file = log_config.get('enable_file', False)
        config.logs_dir = Path(os.getenv('ANALYTICS_LOGS_DIR', log_config.get('logs_dir', 'data/logs')))

        if self.environment == Environment.PRODUCTION:
            config.level = LogLevel.INFO
            config.enable_file = True

        return config

    def _load_web_config(self) -> WebConfig:
        """Load web configuration from JSON and environment overrides"""
        web_config = self._get_config_value('web', default={})
        config = WebConfig()

        config.host = os.getenv('WEB_HOST', web_config.get('host', '0.0.0.0'))
        config.port = int(os.getenv('WEB_PORT', str(web_config.get('port', 5001))))
        config.reload = web_config.get('reload', False)
        config.log_level = os.getenv('WEB_LOG_LEVEL', web_config.get('log_level', 'info'))
        config.cors_origins = web_config.get('cors_origins', ['*'])
        config.static_dir = os.getenv('WEB_STATIC_DIR', web_config.get('static_dir', 'static'))

        if self.environment == Environment.DEVELOPMENT:
            config.reload = True
            config.log_level = "debug"

        return config

    def is_development(self) -> bool:
        """Check if running in development mode"""
        return self.environment == Environment.DEVELOPMENT

    def is_production(self) -> bool:
        """Check if running in production mode"""
        return self.environment == Environment.PRODUCTION

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary for serialization (no secrets)"""
        return {
            'environment': self.environment.value,
            'database': {
                'type': self.database.db_type,
                'sales_table': self.database.sales_table,
                'connection_timeout': self.database.connection_timeout
            },
            'web': {
                'host': self.web.host,
                'port': self.web.port,
                'reload': self.web.reload
            }
        }


# Global configuration instance (singleton)
config = UnifiedConfig()


def get_config() -> UnifiedConfig:
    """Get the global configuration instance"""
    return config


def setup_logging():
    """Setup logging configuration based on current config"""
    log_config = config.logging
    root_logger = logging.getLogger()

    logging.basicConfig(
        level=getattr(logging, log_config.level.value),
        format=log_config.format,
        datefmt=log_config.date_format,
        force=True
    )

    if log_config.enable_file:
        log_config.logs_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_config.logs_dir / "analytics.log"

        # Only add handler if it doesn't already exist
        for handler in root_logger.handlers:
            if isinstance(handler, logging.handlers.RotatingFileHandler):
                if handler.baseFilename == str(log_file.resolve()):
                    return

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=log_config.file_rotation_size,
            backupCount=log_config.file_retention_count
        )
        file_handler.setFormatter(logging.Formatter(log_config.format, log_config.date_format))
        root_logger.addHandler(file_handler)
