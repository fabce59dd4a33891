"""Core app configuration, database and security."""

from teamledger.core.config import get_settings, settings
from teamledger.core.database import get_db, transaction

__all__ = ["get_settings", "settings", "get_db", "transaction"]
