"""
Utility functions and helper modules.

This module provides common utility functions for datetime handling,
validation and configuration management.
"""

from .config import (
    ClinicSettings,
    ConfigError,
    DatabaseURLValidator,
    EnvironmentConfig,
    LoggingConfigurator,
    LogLevel,
)
from .datetime_utils import (
    CLINIC_TIME_SLOTS,
    calculate_age_years,
    day_bounds,
    format_calendar_date,
    get_current_date,
    get_current_utc,
    is_valid_time_slot,
    parse_datetime,
    to_utc,
)
from .validation import (
    ValidationError,
    ValidationResult,
    require_text,
    sanitize_string,
    validate_birth_date,
    validate_email,
    validate_record_id,
)

__all__ = [
    # DateTime utilities
    "CLINIC_TIME_SLOTS",
    "get_current_utc",
    "get_current_date",
    "to_utc",
    "parse_datetime",
    "day_bounds",
    "format_calendar_date",
    "calculate_age_years",
    "is_valid_time_slot",
    # Validation helpers
    "ValidationError",
    "ValidationResult",
    "sanitize_string",
    "require_text",
    "validate_email",
    "validate_record_id",
    "validate_birth_date",
    # Configuration utilities
    "ConfigError",
    "LogLevel",
    "EnvironmentConfig",
    "DatabaseURLValidator",
    "ClinicSettings",
    "LoggingConfigurator",
]
