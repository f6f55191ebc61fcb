"""Tests for the schema migration mechanism."""

import sqlite3
import sys
import tempfile
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from SearchHistory.storage.migration import Migration, get_current_version, load_migrations, run_migrations


def _table_names(conn: sqlite3.Connection) -> set[str]:
    return {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()}


_LATEST_VERSION = max(m.version for m in load_migrations())


class TestMigrations(unittest.TestCase):
    def setUp(self):
        self._tmpdir = tempfile.TemporaryDirectory()
        self._conn = sqlite3.connect(str(Path(self._tmpdir.name) / "history.db"))

    def tearDown(self):
        self._conn.close()
        self._tmpdir.cleanup()

    def test_bundled_migrations_are_discovered(self):
        versions = [m.version for m in load_migrations()]
        self.assertEqual(versions, list(range(1, len(versions) + 1)))

    def test_fresh_database(self):
        run_migrations(self._conn)

        self.assertEqual(get_current_version(self._conn), _LATEST_VERSION)
        self.assertIn("search", _table_names(self._conn))
        self.assertIn("schema_version", _table_names(self._conn))

    def test_second_run_is_noop(self):
        run_migrations(self._conn)
        run_migrations(self._conn)

        self.assertEqual(get_current_version(self._conn), _LATEST_VERSION)

    def test_new_migration_applied_and_data_kept(self):
        run_migrations(self._conn)
        self._conn.execute("INSERT INTO search (session_id, checksum) VALUES ('s1', 1)")
        self._conn.commit()
        extra = Migration(
            version=_LATEST_VERSION + 1,
            description="test column",
            sql="ALTER TABLE search ADD COLUMN note TEXT",
        )

        run_migrations(self._conn, load_migrations() + [extra])

        self.assertEqual(get_current_version(self._conn), _LATEST_VERSION + 1)
        row = self._conn.execute("SELECT session_id, note FROM search").fetchone()
        self.assertEqual(row, ("s1", None))

    def test_failing_migration_rolls_back(self):
        run_migrations(self._conn)
        broken = Migration(
            version=_LATEST_VERSION + 1,
            description="broken",
            sql="CREATE TABLE partial (id INTEGER); INSERT INTO missing_table VALUES (1)",
        )

        with self.assertRaises(sqlite3.OperationalError):
            run_migrations(self._conn, load_migrations() + [broken])

        self.assertEqual(get_current_version(self._conn), _LATEST_VERSION)
        self.assertNotIn("partial", _table_names(self._conn))

    def test_version_gap_raises(self):
        gap = [Migration(version=1, description="a", sql=""), Migration(version=3, description="c", sql="")]

        with self.assertRaises(ValueError):
            run_migrations(self._conn, gap)


if __name__ == "__main__":
    unittest.main()
