"""
Database-agnostic column types for vetcare.

This module provides column types that behave the same on PostgreSQL and
SQLite, in particular for timestamps that must always round-trip as UTC.
"""

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import DateTime, TypeDecorator
from sqlalchemy.engine import Dialect

from ..utils.datetime_utils import to_utc


class UTCDateTime(TypeDecorator):
    """
    Timestamp column that always stores and returns aware UTC datetimes.

    PostgreSQL keeps the offset in ``timestamptz``; SQLite drops it, so values
    are shifted to UTC before binding and tagged as UTC when loaded. Range
    comparisons therefore work on both backends.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(
        self, value: Optional[datetime], dialect: Dialect
    ) -> Optional[datetime]:
        """Process value when storing to database."""
        if value is None:
            return None
        utc_value = to_utc(value)
        if dialect.name == "sqlite":
            return utc_value.replace(tzinfo=None)
        return utc_value

    def process_result_value(self, value: Any, dialect: Dialect) -> Optional[datetime]:
        """Process value when loading from database."""
        if value is None:
            return None
        return to_utc(value)
