"""
Database module for persistent storage.

Provides the SQLAlchemy model, async database engine, and repository for the
monitor's alert state.
"""

from .models import Base, AlertStateRecord
from .database import DatabaseManager
from .repositories import AlertStateRepository

__all__ = [
    "Base",
    "AlertStateRecord",
    "DatabaseManager",
    "AlertStateRepository",
]
