"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from momoetl.config import DEFAULT_HOME
from momoetl.database.sqlalchemy_db import SQLAlchemyDatabase

DEFAULT_DB_FILE = "momo.db"


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    The parent directory of the file is created if it does not exist yet, so
    a fresh MOMO_DB_PATH such as ``~/momo/ledger.db`` works on first use.

    Args:
        database_path: Path to SQLite database file. Falls back to MOMO_DB_PATH,
            then to ~/.momoetl/momo.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    path = database_path or os.environ.get("MOMO_DB_PATH")
    db_file = Path(path).expanduser() if path else DEFAULT_HOME / DEFAULT_DB_FILE
    db_file.parent.mkdir(parents=True, exist_ok=True)
    return SQLAlchemyDatabase(f"sqlite:///{db_file}")
