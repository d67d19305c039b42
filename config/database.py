"""
Database configuration constants.

This is the single source of truth for the state database path. All code
imports from here so the CLI and the monitor always open the same file.

USAGE:
------
    from config.database import DATABASE_PATH, get_connection_string

    db_manager = DatabaseManager(get_connection_string(db_path))

PATHS:
------
- Production: data/weekly_watch.db (override with DATABASE_PATH)
- Docker mount: ./data:/app/data (persists across container restarts)
"""

import os

# Primary database path - used for production and development
DATABASE_PATH = os.getenv("DATABASE_PATH", "data/weekly_watch.db")


def get_connection_string(db_path: str = DATABASE_PATH) -> str:
    """
    Get SQLAlchemy connection string for the database.

    Args:
        db_path: Path to the SQLite database file (default: DATABASE_PATH)

    Returns:
        SQLAlchemy connection string for AsyncIO SQLite access

    Example:
        >>> get_connection_string("data/weekly_watch.db")
        'sqlite+aiosqlite:///data/weekly_watch.db'
    """
    return f"sqlite+aiosqlite:///{db_path}"
