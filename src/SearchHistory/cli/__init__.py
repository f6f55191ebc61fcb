"""CLI package for SearchHistory command orchestration."""

from __future__ import annotations

__all__ = ["CommandRunner", "main"]

from SearchHistory.cli.runner import CommandRunner
from SearchHistory.cli.ui import cli


def main() -> None:
    """Run the SearchHistory CLI.

    Entry point referenced by the console script in pyproject.toml.
    """
    cli()
