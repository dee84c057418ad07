"""Database layer for estateledger application."""

from estateledger.database.base import Database
from estateledger.database.factories import create_database, create_sqlite_database

__all__ = ["Database", "create_database", "create_sqlite_database"]
