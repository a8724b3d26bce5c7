"""Database layer for coopbook application."""

from coopbook.database.base import Database
from coopbook.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
