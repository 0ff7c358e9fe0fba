"""
Configuration management utilities.

This module provides environment variable handling with type conversion,
database URL validation, logging configuration and the clinic settings
object assembled from ``VETCARE_*`` environment variables.
"""

import logging
import logging.config
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
from urllib.parse import parse_qs, urlparse

ENV_PREFIX = "VETCARE_"
DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./vetcare.db"
DEVELOPMENT_JWT_SECRET = "vetcare-development-secret-change-me"
MIN_PRODUCTION_SECRET_LENGTH = 32


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
    def _raw(key: str, required: bool) -> Optional[str]:
        value = os.getenv(key)
        if value is None and required:
            raise ConfigError(f"Required environment variable '{key}' is not set")
        return value

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
        value = EnvironmentConfig._raw(key, required)
        return default if value is None else value

    @staticmethod
    def get_int(
        key: str, default: Optional[int] = None, required: bool = False
    ) -> Optional[int]:
        """
        Get an integer environment variable.

        Raises:
            ConfigError: If required variable is missing or invalid
        """
        value = EnvironmentConfig._raw(key, required)
        if value is None:
            return default

        try:
            return int(value)
        except ValueError:
            raise ConfigError(
                f"Environment variable '{key}' must be an integer, got: {value}"
            )

    @staticmethod
    def get_float(
        key: str, default: Optional[float] = None, required: bool = False
    ) -> Optional[float]:
        """
        Get a float environment variable.

        Raises:
            ConfigError: If required variable is missing or invalid
        """
        value = EnvironmentConfig._raw(key, required)
        if value is None:
            return default

        try:
            return float(value)
        except ValueError:
            raise ConfigError(
                f"Environment variable '{key}' must be a float, got: {value}"
            )

    @staticmethod
    def get_bool(
        key: str, default: Optional[bool] = None, required: bool = False
    ) -> Optional[bool]:
        """Get a boolean environment variable."""
        value = EnvironmentConfig._raw(key, required)
        if value is None:
            return default

        return value.strip().lower() in ("true", "1", "yes", "on", "enabled")

    @staticmethod
    def get_list(
        key: str,
        separator: str = ",",
        default: Optional[List[str]] = None,
        required: bool = False,
    ) -> Optional[List[str]]:
        """
        Get a list environment variable.

        Args:
            key: Environment variable key
            separator: Separator character for list items
            default: Default value if not found
            required: Whether the variable is required

        Returns:
            List of strings or default
        """
        value = EnvironmentConfig._raw(key, required)
        if value is None:
            return default or []

        return [item.strip() for item in value.split(separator) if item.strip()]


class DatabaseURLValidator:
    """Utility class for validating database URLs."""

    SUPPORTED_DRIVERS = {
        "postgresql": ["postgresql+asyncpg"],
        "sqlite": ["sqlite+aiosqlite"],
    }

    @classmethod
    def backend_for(cls, scheme: str) -> Optional[str]:
        """Return the backend name ("postgresql" or "sqlite") for a scheme."""
        for backend, drivers in cls.SUPPORTED_DRIVERS.items():
            if scheme in drivers:
                return backend
        return None

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

        backend = cls.backend_for(parsed.scheme)
        if backend is None:
            supported_list = [
                driver for drivers in cls.SUPPORTED_DRIVERS.values() for driver in drivers
            ]
            raise ConfigError(
                f"Unsupported database driver '{parsed.scheme}'. Supported: {', '.join(supported_list)}"
            )

        if backend == "postgresql":
            if not parsed.hostname:
                raise ConfigError("Database URL must include a hostname")
            if not parsed.path.lstrip("/"):
                raise ConfigError("Database URL must include a database name")

        return {
            "valid": True,
            "backend": backend,
            "scheme": parsed.scheme,
            "hostname": parsed.hostname,
            "port": parsed.port,
            "database": parsed.path.lstrip("/") if parsed.path else "",
            "username": parsed.username,
            "password": parsed.password,
            "query": dict(parse_qs(parsed.query)),
        }


@dataclass
class ClinicSettings:
    """Runtime settings for the clinic service."""

    database_url: str = DEFAULT_DATABASE_URL
    jwt_secret: str = DEVELOPMENT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    jwt_expiry_hours: int = 24
    bcrypt_rounds: int = 12
    log_level: LogLevel = LogLevel.INFO
    environment: str = "development"
    sql_echo: bool = False

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    def validate(self) -> None:
        """
        Check settings for internal consistency.

        Raises:
            ConfigError: If any setting is out of range or unsafe
        """
        DatabaseURLValidator.validate_url(self.database_url)

        if self.jwt_expiry_hours <= 0:
            raise ConfigError("JWT expiry must be a positive number of hours")
        if not 4 <= self.bcrypt_rounds <= 31:
            raise ConfigError("bcrypt rounds must be between 4 and 31")
        if self.is_production and (
            self.jwt_secret == DEVELOPMENT_JWT_SECRET
            or len(self.jwt_secret) < MIN_PRODUCTION_SECRET_LENGTH
        ):
            raise ConfigError(
                f"{ENV_PREFIX}JWT_SECRET must be set to a secret of at least "
                f"{MIN_PRODUCTION_SECRET_LENGTH} characters in production"
            )

    @classmethod
    def from_environment(cls) -> "ClinicSettings":
        """
        Build settings from ``VETCARE_*`` environment variables.

        Raises:
            ConfigError: If a variable is malformed or a production secret is missing
        """
        environment = EnvironmentConfig.get_str(
            f"{ENV_PREFIX}ENV", default="development"
        )
        is_production = environment.lower() == "production"

        level_name = EnvironmentConfig.get_str(
            f"{ENV_PREFIX}LOG_LEVEL", default="INFO"
        ).upper()
        try:
            log_level = LogLevel(level_name)
        except ValueError:
            raise ConfigError(f"Unknown log level '{level_name}'")

        settings = cls(
            database_url=EnvironmentConfig.get_str(
                f"{ENV_PREFIX}DATABASE_URL", default=DEFAULT_DATABASE_URL
            ),
            jwt_secret=EnvironmentConfig.get_str(
                f"{ENV_PREFIX}JWT_SECRET",
                default=None if is_production else DEVELOPMENT_JWT_SECRET,
                required=is_production,
            ),
            jwt_algorithm=EnvironmentConfig.get_str(
                f"{ENV_PREFIX}JWT_ALGORITHM", default="HS256"
            ),
            jwt_expiry_hours=EnvironmentConfig.get_int(
                f"{ENV_PREFIX}JWT_EXPIRY_HOURS", default=24
            ),
            bcrypt_rounds=EnvironmentConfig.get_int(
                f"{ENV_PREFIX}BCRYPT_ROUNDS", default=12
            ),
            log_level=log_level,
            environment=environment,
            sql_echo=EnvironmentConfig.get_bool(f"{ENV_PREFIX}SQL_ECHO", default=False),
        )
        settings.validate()
        return settings


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
            level: Level of the ``vetcare`` logger when using the default layout
        """
        if isinstance(level, LogLevel):
            level = level.value

        if config_file and Path(config_file).exists():
            logging.config.fileConfig(config_file)
        elif config_dict:
            logging.config.dictConfig(config_dict)
        else:
            default_config = {
                "version": 1,
                "disable_existing_loggers": False,
                "formatters": {
                    "standard": {"format": LoggingConfigurator.DEFAULT_FORMAT},
                    "detailed": {
                        "format": "%(asctime)s - %(name)s - %(levelname)s - %(module)s - %(funcName)s - %(message)s"
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
                    "vetcare": {
                        "level": level,
                        "handlers": ["console"],
                        "propagate": False,
                    }
                },
                "root": {"level": "WARNING", "handlers": ["console"]},
            }
            logging.config.dictConfig(default_config)
