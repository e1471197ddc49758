"""Database layer for ctfiling application."""

from ctfiling.database.base import Database
from ctfiling.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
