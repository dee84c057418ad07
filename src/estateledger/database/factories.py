"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from estateledger.database.sqlalchemy_db import SQLAlchemyDatabase


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks ESTATELEDGER_DB_PATH
            environment variable, then defaults to ~/.estateledger/estateledger.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        database_path = os.environ.get("ESTATELEDGER_DB_PATH")

    if database_path is None:
        db_dir = Path.home() / ".estateledger"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "estateledger.db")

    return SQLAlchemyDatabase(f"sqlite:///{database_path}")


def create_database(
    database_url: Optional[str] = None, database_path: Optional[str] = None
) -> SQLAlchemyDatabase:
    """Create a database from a URL, falling back to SQLite.

    Args:
        database_url: SQLAlchemy URL. If None, checks ESTATELEDGER_DATABASE_URL.
        database_path: SQLite path used when no URL is configured

    Returns:
        SQLAlchemyDatabase instance
    """
    if database_url is None:
        database_url = os.environ.get("ESTATELEDGER_DATABASE_URL")

    if database_url:
        return SQLAlchemyDatabase(database_url)
    return create_sqlite_database(database_path)
