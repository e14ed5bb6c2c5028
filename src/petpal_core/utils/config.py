"""
Configuration management utilities.

This module provides environment variable handling with type conversion,
database URL validation, logging configuration and the settings object
consumed by the database and file storage layers.
"""

import logging
import logging.config
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union
from urllib.parse import parse_qs, urlparse


class ConfigError(Exception):
    """Exception raised for configuration-related errors."""

    pass


class LogLevel(Enum):
    """Enumeration for log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class EnvironmentConfig:
    """Utility class for handling environment variables with type conversion."""

    @staticmethod
    def get_str(
        key: str, default: Optional[str] = None, required: bool = False
    ) -> Optional[str]:
        """
        Get a string environment variable.

        Args:
            key: Environment variable key
            default: Default value if not found
            required: Whether the variable is required

        Returns:
            String value or default

        Raises:
            ConfigError: If required variable is missing
        """
        value = os.getenv(key, default)

        if required and value is None:
            raise ConfigError(f"Required environment variable '{key}' is not set")

        return value

    @staticmethod
    def get_int(
        key: str, default: Optional[int] = None, required: bool = False
    ) -> Optional[int]:
        """
        Get an integer environment variable.

        Raises:
            ConfigError: If required variable is missing or invalid
        """
        value = os.getenv(key)

        if value is None:
            if required:
                raise ConfigError(f"Required environment variable '{key}' is not set")
            return default

        try:
            return int(value)
        except ValueError:
            raise ConfigError(
                f"Environment variable '{key}' must be an integer, got: {value}"
            )

    @staticmethod
    def get_bool(
        key: str, default: Optional[bool] = None, required: bool = False
    ) -> Optional[bool]:
        """
        Get a boolean environment variable.

        Accepts true/1/yes/on/enabled (case-insensitive) as truthy values;
        anything else is false.
        """
        value = os.getenv(key)

        if value is None:
            if required:
                raise ConfigError(f"Required environment variable '{key}' is not set")
            return default

        return value.lower() in ("true", "1", "yes", "on", "enabled")


class DatabaseURLValidator:
    """Utility class for validating database URLs."""

    SUPPORTED_DRIVERS = {
        "postgresql": ["postgresql", "postgresql+asyncpg"],
        "sqlite": ["sqlite", "sqlite+aiosqlite"],
    }

    @classmethod
    def is_sqlite(cls, url: str) -> bool:
        """Return True when the URL targets a SQLite database."""
        return urlparse(url).scheme in cls.SUPPORTED_DRIVERS["sqlite"]

    @classmethod
    def validate_url(cls, url: str) -> Dict[str, Any]:
        """
        Validate a database URL and return parsed components.

        Args:
            url: Database URL to validate

        Returns:
            Dictionary with validation results and parsed components

        Raises:
            ConfigError: If URL is invalid
        """
        if not url:
            raise ConfigError("Database URL cannot be empty")

        parsed = urlparse(url)

        if not parsed.scheme:
            raise ConfigError(
                "Database URL must include a scheme (e.g., postgresql+asyncpg://)"
            )

        supported = [d for drivers in cls.SUPPORTED_DRIVERS.values() for d in drivers]
        if parsed.scheme not in supported:
            raise ConfigError(
                f"Unsupported database driver '{parsed.scheme}'. "
                f"Supported: {', '.join(supported)}"
            )

        if not cls.is_sqlite(url):
            if not parsed.hostname:
                raise ConfigError("Database URL must include a hostname")
            if not parsed.path.lstrip("/"):
                raise ConfigError("Database URL must include a database name")

        return {
            "valid": True,
            "scheme": parsed.scheme,
            "hostname": parsed.hostname,
            "port": parsed.port,
            "database": parsed.path.lstrip("/") if parsed.path else "",
            "username": parsed.username,
            "password": parsed.password,
            "query": dict(parse_qs(parsed.query)),
        }


class LoggingConfigurator:
    """Utility class for configuring logging."""

    DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @staticmethod
    def configure_basic_logging(
        level: Union[str, LogLevel] = LogLevel.INFO,
        format_string: Optional[str] = None,
        log_file: Optional[str] = None,
    ) -> None:
        """
        Configure basic logging for the application.

        Args:
            level: Logging level
            format_string: Custom format string
            log_file: Optional log file path
        """
        if isinstance(level, LogLevel):
            level = level.value

        basic_config_args: Dict[str, Any] = {
            "level": level,
            "format": format_string or LoggingConfigurator.DEFAULT_FORMAT,
            "datefmt": "%Y-%m-%d %H:%M:%S",
        }
        if log_file:
            basic_config_args["filename"] = log_file
            basic_config_args["filemode"] = "a"

        logging.basicConfig(**basic_config_args)

    @staticmethod
    def default_config(level: Union[str, LogLevel] = LogLevel.INFO) -> Dict[str, Any]:
        """Build the default dictConfig for the ``petpal_core`` logger tree."""
        if isinstance(level, LogLevel):
            level = level.value

        return {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "standard": {"format": LoggingConfigurator.DEFAULT_FORMAT},
                "detailed": {
                    "format": (
                        "%(asctime)s - %(name)s - %(levelname)s - "
                        "%(module)s - %(funcName)s - %(message)s"
                    )
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "level": level,
                    "formatter": "standard",
                    "stream": "ext://sys.stdout",
                }
            },
            "loggers": {
                "petpal_core": {
                    "level": level,
                    "handlers": ["console"],
                    "propagate": False,
                }
            },
            "root": {"level": "WARNING", "handlers": ["console"]},
        }

    @staticmethod
    def configure_structured_logging(
        config_dict: Optional[Dict[str, Any]] = None,
        config_file: Optional[str] = None,
        level: Union[str, LogLevel] = LogLevel.INFO,
    ) -> None:
        """
        Configure structured logging using a dictionary or file.

        Args:
            config_dict: Logging configuration dictionary
            config_file: Path to logging configuration file
            level: Level for the default configuration
        """
        if config_file and Path(config_file).exists():
            logging.config.fileConfig(config_file)
        elif config_dict:
            logging.config.dictConfig(config_dict)
        else:
            logging.config.dictConfig(LoggingConfigurator.default_config(level))


@dataclass
class PetPalSettings:
    """Runtime settings for the core, usually loaded from the environment."""

    database_url: str = "sqlite+aiosqlite:///./petpal.db"
    db_pool_size: int = 5
    db_echo: bool = False
    upload_root: str = "uploads"
    public_base_url: str = "http://localhost:5000"
    log_level: str = LogLevel.INFO.value

    def __post_init__(self) -> None:
        DatabaseURLValidator.validate_url(self.database_url)
        if self.log_level.upper() not in LogLevel.__members__:
            raise ConfigError(f"Unknown log level '{self.log_level}'")

    @classmethod
    def from_environment(cls, prefix: str = "PETPAL_") -> "PetPalSettings":
        """Build settings from ``PETPAL_*`` environment variables."""
        env = EnvironmentConfig
        defaults = cls.__dataclass_fields__
        return cls(
            database_url=env.get_str(
                f"{prefix}DATABASE_URL", defaults["database_url"].default
            ),
            db_pool_size=env.get_int(
                f"{prefix}DB_POOL_SIZE", defaults["db_pool_size"].default
            ),
            db_echo=env.get_bool(f"{prefix}DB_ECHO", defaults["db_echo"].default),
            upload_root=env.get_str(
                f"{prefix}UPLOAD_ROOT", defaults["upload_root"].default
            ),
            public_base_url=env.get_str(
                f"{prefix}PUBLIC_BASE_URL", defaults["public_base_url"].default
            ),
            log_level=env.get_str(
                f"{prefix}LOG_LEVEL", defaults["log_level"].default
            ).upper(),
        )

    def configure_logging(self) -> None:
        """Apply the default structured logging config at this log level."""
        LoggingConfigurator.configure_structured_logging(level=self.log_level)
