"""Storage layer for SearchHistory.

Provides database management, schema migrations and the search history
store.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from SearchHistory.storage.db import DatabaseManager
from SearchHistory.storage.history import SearchHistoryStore, SearchRecord
from SearchHistory.storage.migration import Migration, run_migrations
from SearchHistory.utils.log import log

if TYPE_CHECKING:
    from SearchHistory.config import AppConfig


def create_storage(config: AppConfig) -> tuple[DatabaseManager | None, SearchHistoryStore | None]:
    """Create the database manager and history store.

    Args:
        config: Application configuration containing storage settings.

    Returns:
        Tuple of (db_manager, history_store); both are None when state
        storage is disabled.
    """
    if not config.storage.enabled:
        log.info("State storage disabled")
        return None, None

    db_path = Path(config.storage.db_path)
    db_manager = DatabaseManager(db_path)
    log.info("State storage enabled: %s", db_path)
    return db_manager, SearchHistoryStore(db_manager)


__all__ = [
    "DatabaseManager",
    "Migration",
    "SearchHistoryStore",
    "SearchRecord",
    "run_migrations",
    "create_storage",
]
