"""
Database Package

Database models, connection management, and data persistence layer.
"""
from src.sheriffsale.db.base import Base
from src.sheriffsale.db.session import (
    engine,
    SessionLocal,
    session_scope,
    get_db_session,
    health_check,
    create_all_tables,
)
from src.sheriffsale.db.models import ConfigEntry, ListingRecord
from src.sheriffsale.db.repository import (
    BaseRepository,
    ConfigRepository,
    ListingRepository,
    CURRENT_AUCTION_ID_KEY,
    GLOBAL_PP_DATE_KEY,
)

__all__ = [
    # Base
    "Base",
    # Session management
    "engine",
    "SessionLocal",
    "session_scope",
    "get_db_session",
    "health_check",
    "create_all_tables",
    # Models
    "ConfigEntry",
    "ListingRecord",
    # Repositories
    "BaseRepository",
    "ConfigRepository",
    "ListingRepository",
    "CURRENT_AUCTION_ID_KEY",
    "GLOBAL_PP_DATE_KEY",
]
