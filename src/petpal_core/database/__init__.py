"""
Database connection and session management utilities.

This module provides async SQLAlchemy engine configuration, session
management and column types shared by the PetPal models.
"""

from .connection import (
    DatabaseConfig,
    check_connection,
    close_engine,
    create_engine,
    create_engine_from_settings,
    get_database_url,
)
from .session import (
    SessionManager,
    get_session,
    get_session_manager,
    get_transaction,
    initialize_session_manager,
)
from .types import UTCDateTime

__all__ = [
    # Connection utilities
    "DatabaseConfig",
    "create_engine",
    "create_engine_from_settings",
    "get_database_url",
    "check_connection",
    "close_engine",
    # Session management
    "SessionManager",
    "initialize_session_manager",
    "get_session_manager",
    "get_session",
    "get_transaction",
    # Column types
    "UTCDateTime",
]
