"""Database layer for moneymngr application."""

from moneymngr.database.base import Database
from moneymngr.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
