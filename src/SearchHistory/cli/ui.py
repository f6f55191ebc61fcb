"""Click CLI interface definitions.

Defines the command-line interface and routes commands to the runner.
"""

from __future__ import annotations

from pathlib import Path

import click
from dotenv import load_dotenv

from SearchHistory.cli.commands import (
    DueCommand,
    FixChecksumsCommand,
    HistoryCommand,
    NormalizeCommand,
    PurgeCommand,
    RecordCommand,
    ScheduleCommand,
    ShowCommand,
)
from SearchHistory.cli.runner import CommandRunner
from SearchHistory.config import DEFAULT_CONFIG_PATH, AppConfig, load_config_with_defaults

_CLASS_OPTION = click.option(
    "--class",
    "search_class",
    default=None,
    help="Search class id (defaults to search.default_class).",
)


@click.group(help="SearchHistory: normalize searches and keep a deduplicated search history.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=DEFAULT_CONFIG_PATH,
    show_default=True,
    help="Path to YAML config file, merged over the defaults.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path) -> None:
    """CLI entry group.

    Loads environment variables from a .env file before reading the config,
    so that ``state.db_path_env`` can point at a variable defined there.
    """
    load_dotenv()
    ctx.obj = load_config_with_defaults(config_path)


def _runner(ctx: click.Context) -> CommandRunner:
    config: AppConfig = ctx.obj
    return CommandRunner(config)


@cli.command("normalize")
@click.argument("query")
@_CLASS_OPTION
@click.pass_context
def normalize_cmd(ctx: click.Context, query: str, search_class: str | None) -> None:
    """Print the canonical URL and checksum of QUERY (a URL query string)."""
    _runner(ctx).run_normalize(
        ctx.command.name,
        lambda normalizer: NormalizeCommand(normalizer, query, search_class),
    )


@cli.command("record")
@click.argument("query")
@click.option("--session", "session_id", required=True, help="Session id owning the search.")
@click.option("--user", "user_id", type=int, default=None, help="Logged-in user id.")
@click.option("--total", "result_total", type=int, default=None, help="Result count to record.")
@_CLASS_OPTION
@click.pass_context
def record_cmd(
    ctx: click.Context,
    query: str,
    session_id: str,
    user_id: int | None,
    result_total: int | None,
    search_class: str | None,
) -> None:
    """Store QUERY in the search history, reusing an equivalent entry."""
    _runner(ctx).run_history(
        ctx.command.name,
        lambda service: RecordCommand(service, query, session_id, user_id, search_class, result_total),
    )


@cli.command("history")
@click.option("--session", "session_id", required=True, help="Session id.")
@click.option("--user", "user_id", type=int, default=None, help="User id.")
@click.pass_context
def history_cmd(ctx: click.Context, session_id: str, user_id: int | None) -> None:
    """List the searches of a session and user."""
    _runner(ctx).run_history(ctx.command.name, lambda service: HistoryCommand(service, session_id, user_id))


@cli.command("show")
@click.argument("search_id", type=int)
@click.pass_context
def show_cmd(ctx: click.Context, search_id: int) -> None:
    """Rebuild stored search SEARCH_ID and print its URL."""
    _runner(ctx).run_history(ctx.command.name, lambda service: ShowCommand(service, search_id))


@cli.command("fix-checksums")
@click.pass_context
def fix_checksums_cmd(ctx: click.Context) -> None:
    """Compute checksums for stored searches that lack one."""
    _runner(ctx).run_history(ctx.command.name, FixChecksumsCommand)


@cli.command("purge")
@click.option("--days", type=int, default=None, help="Age threshold (defaults to state.retention_days).")
@click.pass_context
def purge_cmd(ctx: click.Context, days: int | None) -> None:
    """Delete unsaved searches older than --days days."""
    config: AppConfig = ctx.obj
    threshold = days if days is not None else config.storage.retention_days
    _runner(ctx).run_history(ctx.command.name, lambda service: PurgeCommand(service, threshold))


@cli.command("schedule")
@click.argument("search_id", type=int)
@click.option("--every", "frequency", type=int, required=True, help="Days between alerts; 0 turns them off.")
@click.option("--base-url", default=None, help="Site URL used for links in alerts.")
@click.pass_context
def schedule_cmd(ctx: click.Context, search_id: int, frequency: int, base_url: str | None) -> None:
    """Set how often alerts for stored search SEARCH_ID are sent."""
    _runner(ctx).run_history(
        ctx.command.name,
        lambda service: ScheduleCommand(service, search_id, frequency, base_url),
    )


@cli.command("due")
@click.option("--mark", is_flag=True, default=False, help="Record the listed alerts as sent.")
@click.pass_context
def due_cmd(ctx: click.Context, mark: bool) -> None:
    """List saved searches whose alert is due."""
    _runner(ctx).run_history(ctx.command.name, lambda service: DueCommand(service, mark))
