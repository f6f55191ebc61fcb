"""Schema migration mechanism for the search history database.

Migrations are versioned and applied in order when the DatabaseManager opens
its connection. Each migration runs in an explicit transaction; failures roll
back atomically, leaving the database in its previous state.
"""

from __future__ import annotations

import importlib
import pkgutil
import sqlite3
from dataclasses import dataclass
from typing import Sequence

from SearchHistory.utils.log import log

_MIGRATIONS_PACKAGE = "SearchHistory.storage.migrations"

_SCHEMA_VERSION_DDL = """
CREATE TABLE IF NOT EXISTS schema_version (
    id      INTEGER PRIMARY KEY CHECK (id = 1),
    version INTEGER NOT NULL
)
"""


@dataclass(frozen=True)
class Migration:
    """A single versioned schema migration.

    Attributes:
        version: Monotonically increasing integer, starting at 1.
        description: Human-readable summary of what this migration does.
        sql: One or more semicolon-separated DDL/DML statements to execute.
    """

    version: int
    description: str
    sql: str


def load_migrations() -> list[Migration]:
    """Collect the ``MIGRATION`` constant of every ``vNNN_*`` module, by version."""
    package = importlib.import_module(_MIGRATIONS_PACKAGE)
    migrations: list[Migration] = []
    for module_info in pkgutil.iter_modules(package.__path__):
        if not module_info.name.startswith("v"):
            continue
        module = importlib.import_module(f"{_MIGRATIONS_PACKAGE}.{module_info.name}")
        migrations.append(module.MIGRATION)
    return sorted(migrations, key=lambda m: m.version)


def run_migrations(conn: sqlite3.Connection, migrations: Sequence[Migration] | None = None) -> None:
    """Apply all pending migrations to the database.

    Args:
        conn: Active SQLite connection.
        migrations: Migrations to apply; defaults to the bundled ones.

    Raises:
        ValueError: If the migrations contain a version gap or do not start at 1.
        sqlite3.Error: If a migration statement fails (transaction is rolled back).
    """
    if migrations is None:
        migrations = load_migrations()
    _validate_migration_list(migrations)
    _ensure_version_table(conn)

    current_ver = get_current_version(conn)
    pending = [m for m in migrations if m.version > current_ver]

    if not pending:
        log.debug("schema already at version %d, no migrations to run", current_ver)
        return

    for migration in pending:
        _apply_migration(conn, migration)
        log.info("applied migration v%d: %s", migration.version, migration.description)


def get_current_version(conn: sqlite3.Connection) -> int:
    """Return the applied schema version, 0 for an unmigrated database."""
    row = conn.execute("SELECT version FROM schema_version WHERE id = 1").fetchone()
    return row[0] if row else 0


def _validate_migration_list(migrations: Sequence[Migration]) -> None:
    """Raise ValueError if migration versions are not consecutive from 1."""
    for expected, m in enumerate(migrations, start=1):
        if m.version != expected:
            raise ValueError(
                f"Migration version gap: expected version {expected}, "
                f"got {m.version} (description: {m.description!r}). "
                "Migration versions must be consecutive starting from 1."
            )


def _ensure_version_table(conn: sqlite3.Connection) -> None:
    conn.execute(_SCHEMA_VERSION_DDL)
    conn.commit()


def _apply_migration(conn: sqlite3.Connection, migration: Migration) -> None:
    """Execute a single migration inside an explicit transaction.

    Statements are executed one by one with ``conn.execute()``;
    ``executescript()`` would issue an implicit COMMIT and break atomicity.

    Raises:
        sqlite3.Error: If any statement fails; the transaction is rolled back.
    """
    conn.execute("BEGIN")
    try:
        for stmt in (s.strip() for s in migration.sql.split(";")):
            if stmt:
                conn.execute(stmt)
        conn.execute(
            "INSERT OR REPLACE INTO schema_version (id, version) VALUES (1, ?)",
            (migration.version,),
        )
        conn.execute("COMMIT")
    except Exception:
        conn.execute("ROLLBACK")
        raise
