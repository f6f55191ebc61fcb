"""Migration v001: initial schema (search)."""

from __future__ import annotations

from SearchHistory.storage.migration import Migration

MIGRATION = Migration(
    version=1,
    description="Initial schema: search",
    sql="""
        CREATE TABLE IF NOT EXISTS search (
          id INTEGER PRIMARY KEY AUTOINCREMENT,
          user_id INTEGER,
          session_id TEXT,
          created_at INTEGER NOT NULL DEFAULT (CAST(strftime('%s','now') AS INTEGER)),
          title TEXT,
          saved INTEGER NOT NULL DEFAULT 0,
          search_object TEXT,
          checksum INTEGER,
          notification_frequency INTEGER NOT NULL DEFAULT 0,
          last_notification_sent INTEGER,
          notification_base_url TEXT
        );

        CREATE INDEX IF NOT EXISTS idx_search_checksum
          ON search(checksum);

        CREATE INDEX IF NOT EXISTS idx_search_session
          ON search(session_id);

        CREATE INDEX IF NOT EXISTS idx_search_user
          ON search(user_id);

        CREATE INDEX IF NOT EXISTS idx_search_created
          ON search(created_at);
    """,
)
