from __future__ import annotations

"""Storage domain configuration for the search history database."""

import os
from dataclasses import dataclass
from typing import Any, Mapping

from SearchHistory.config.common import (
    expect_bool,
    expect_int,
    expect_optional_str,
    expect_str,
    get_required_value,
    get_section,
)


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Storage configuration.

    Attributes:
        enabled: Whether searches are persisted at all.
        db_path: SQLite database path, after the environment override.
        db_path_env: Environment variable that overrides ``db_path`` when set.
        retention_days: Age in days after which unsaved searches are purged.
    """

    enabled: bool
    db_path: str
    db_path_env: str | None
    retention_days: int


def load_storage(raw: Mapping[str, Any]) -> StorageConfig:
    """Load storage domain config from the ``state`` section."""
    section = get_section(raw, "state", required=True)
    db_path = expect_str(get_required_value(section, "db_path", "state.db_path"), "state.db_path")
    db_path_env = expect_optional_str(section.get("db_path_env"), "state.db_path_env")
    if db_path_env and os.environ.get(db_path_env):
        db_path = os.environ[db_path_env]
    return StorageConfig(
        enabled=expect_bool(get_required_value(section, "enabled", "state.enabled"), "state.enabled"),
        db_path=db_path,
        db_path_env=db_path_env,
        retention_days=expect_int(section.get("retention_days", 30), "state.retention_days"),
    )


def check_storage(config: StorageConfig) -> None:
    """Validate storage domain constraints."""
    if not config.db_path.strip():
        raise ValueError("state.db_path must not be empty")
    if config.retention_days <= 0:
        raise ValueError("state.retention_days must be positive")
