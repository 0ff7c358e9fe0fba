"""
Database connection, session management and entity store.

This module provides async SQLAlchemy engine configuration, session
management and the entity store used by the clinic services.
"""

from .connection import DatabaseConfig, check_connection, close_engine, create_engine
from .session import (
    SessionManager,
    get_session,
    get_session_manager,
    get_transaction,
    health_check,
    initialize_database,
    initialize_session_manager,
)
from .store import EntityStore, entity_label, translate_integrity_error
from .types import UTCDateTime

__all__ = [
    # Connection utilities
    "DatabaseConfig",
    "create_engine",
    "check_connection",
    "close_engine",
    # Session management
    "SessionManager",
    "initialize_session_manager",
    "get_session_manager",
    "get_session",
    "get_transaction",
    "health_check",
    "initialize_database",
    # Entity store
    "EntityStore",
    "entity_label",
    "translate_integrity_error",
    # Column types
    "UTCDateTime",
]
