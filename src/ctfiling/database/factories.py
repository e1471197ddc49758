"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from ctfiling.database.sqlalchemy_db import SQLAlchemyDatabase

DB_PATH_ENV = "CTFILING_DB_PATH"
DEFAULT_DB_PATH = Path.home() / ".ctfiling" / "ctfiling.db"


def resolve_database_path(database_path: Optional[str] = None) -> Path:
    """Pick the SQLite file: explicit path, then CTFILING_DB_PATH, then ~/.ctfiling/ctfiling.db.

    The parent directory is created if it does not exist yet.
    """
    path = Path(database_path or os.environ.get(DB_PATH_ENV) or DEFAULT_DB_PATH).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file (see resolve_database_path)

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    return SQLAlchemyDatabase(f"sqlite:///{resolve_database_path(database_path)}")
