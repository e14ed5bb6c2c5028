"""
Utility functions and helper modules.

This module provides common utility functions for datetime handling,
validation and configuration management.
"""

from .config import (
    ConfigError,
    DatabaseURLValidator,
    EnvironmentConfig,
    LoggingConfigurator,
    LogLevel,
    PetPalSettings,
)
from .datetime_utils import (
    UTC,
    add_months,
    calculate_pet_age,
    combine_utc,
    date_window,
    ensure_utc,
    format_pet_age,
    format_time_of_day,
    get_current_utc,
)
from .validation import (
    ValidationError,
    ValidationResult,
    validate_file_extension,
    validate_weight,
)

__all__ = [
    # DateTime utilities
    "UTC",
    "get_current_utc",
    "ensure_utc",
    "combine_utc",
    "add_months",
    "date_window",
    "format_time_of_day",
    "calculate_pet_age",
    "format_pet_age",
    # Validation helpers
    "ValidationError",
    "ValidationResult",
    "validate_weight",
    "validate_file_extension",
    # Configuration utilities
    "ConfigError",
    "LogLevel",
    "EnvironmentConfig",
    "DatabaseURLValidator",
    "LoggingConfigurator",
    "PetPalSettings",
]
