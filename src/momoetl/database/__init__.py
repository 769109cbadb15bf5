"""Database layer for the momoetl ledger."""

from momoetl.database.base import Database
from momoetl.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
