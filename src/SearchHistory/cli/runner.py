"""Command runner for coordinating CLI execution.

Manages logging configuration, component lifecycle, database cleanup and
error handling for command execution.
"""

from __future__ import annotations

from collections.abc import Callable

import click

from SearchHistory.cli.commands import Command
from SearchHistory.config import AppConfig
from SearchHistory.search.manager import ResultsManager
from SearchHistory.search.normalizer import SearchNormalizer
from SearchHistory.services import SearchHistoryService, create_history_service
from SearchHistory.storage import create_storage
from SearchHistory.utils.log import configure_logging, log


class CommandRunner:
    """Orchestrates command execution with proper resource management."""

    def __init__(self, config: AppConfig) -> None:
        self.config = config

    def _configure_logging(self, action: str) -> None:
        configure_logging(
            level=self.config.runtime.level,
            action=action,
            log_to_file=self.config.runtime.to_file,
            log_dir=self.config.runtime.dir,
        )

    def run_normalize(self, action: str, make_command: Callable[[SearchNormalizer], Command]) -> None:
        """Execute a command that needs no database.

        Raises:
            click.Abort: When the command fails.
        """
        self._configure_logging(action)
        try:
            normalizer = SearchNormalizer(ResultsManager.from_config(self.config.search))
            make_command(normalizer).execute()
        except Exception as e:  # noqa: BLE001 - cli boundary
            log.error("%s failed: %s", action, e)
            raise click.Abort from e

    def run_history(self, action: str, make_command: Callable[[SearchHistoryService], Command]) -> None:
        """Execute a command against the history database.

        Args:
            action: The CLI command name.
            make_command: Builds the command from the history service.

        Raises:
            click.Abort: When storage is disabled or the command fails.
        """
        self._configure_logging(action)
        try:
            db_manager, store = create_storage(self.config)
            if db_manager is None or store is None:
                raise RuntimeError("state.enabled=false: search history storage is disabled")
            with db_manager:
                make_command(create_history_service(self.config, store)).execute()
        except Exception as e:  # noqa: BLE001 - cli boundary
            log.error("%s failed: %s", action, e)
            raise click.Abort from e
