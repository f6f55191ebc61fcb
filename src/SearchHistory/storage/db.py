"""SQLite database utilities."""

from __future__ import annotations

import sqlite3
from pathlib import Path

from SearchHistory.storage.migration import run_migrations

MEMORY_DB = ":memory:"


class DatabaseManager:
    """Shared database connection manager.

    One connection is created per process; later instantiations return the
    existing manager until it is closed. The schema is migrated when the
    connection is opened.

    Supports the context manager protocol for automatic connection cleanup.
    """

    _instance = None

    def __new__(cls, db_path: Path | str):
        """Create or return the existing DatabaseManager instance.

        Args:
            db_path: Path to the database file, or ``:memory:``.

        Returns:
            DatabaseManager singleton instance.
        """
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance.conn = ensure_db(db_path)
            run_migrations(cls._instance.conn)
        return cls._instance

    def get_connection(self) -> sqlite3.Connection:
        return self.conn

    def close(self) -> None:
        """Close the connection and reset the singleton instance."""
        if hasattr(self, "conn") and self.conn:
            self.conn.close()
            type(self)._instance = None

    def __enter__(self) -> DatabaseManager:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def ensure_db(db_path: Path | str) -> sqlite3.Connection:
    """Ensure the database file exists and return a connection.

    Args:
        db_path: Path to the database file, or ``:memory:``.

    Returns:
        SQLite connection returning :class:`sqlite3.Row` rows.

    Raises:
        OSError: If directory creation fails.
        sqlite3.Error: If the database connection fails.
    """
    if str(db_path) != MEMORY_DB:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    return conn
