from __future__ import annotations

"""Public configuration API for SearchHistory."""

from SearchHistory.config.app import (
    DEFAULT_CONFIG_PATH,
    AppConfig,
    load_config,
    load_config_with_defaults,
    merge_config_dicts,
    parse_config_dict,
)
from SearchHistory.config.runtime import RuntimeConfig
from SearchHistory.config.search import SearchConfig
from SearchHistory.config.storage import StorageConfig

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "RuntimeConfig",
    "SearchConfig",
    "StorageConfig",
    "AppConfig",
    "load_config",
    "load_config_with_defaults",
    "merge_config_dicts",
    "parse_config_dict",
]
