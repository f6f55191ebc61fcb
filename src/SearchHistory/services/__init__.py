"""Service layer for SearchHistory.

Provides the search history service and the factory that wires it from
configuration.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from SearchHistory.search.manager import ResultsManager
from SearchHistory.search.normalizer import SearchNormalizer
from SearchHistory.services.history import SearchHistoryService

if TYPE_CHECKING:
    from SearchHistory.config import AppConfig
    from SearchHistory.storage.history import SearchHistoryStore


def create_history_service(config: AppConfig, store: SearchHistoryStore) -> SearchHistoryService:
    """Create a history service for the configured search classes.

    Args:
        config: Application configuration containing the search classes.
        store: History store the service writes to.

    Returns:
        Configured SearchHistoryService instance.
    """
    manager = ResultsManager.from_config(config.search)
    return SearchHistoryService(normalizer=SearchNormalizer(manager), store=store)


__all__ = [
    "SearchHistoryService",
    "create_history_service",
]
