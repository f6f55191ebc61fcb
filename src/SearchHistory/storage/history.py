"""Search history store implementation."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from SearchHistory.search.minified import Minified
from SearchHistory.utils.log import log

if TYPE_CHECKING:
    from SearchHistory.storage.db import DatabaseManager

_COLUMNS = (
    "id, user_id, session_id, created_at, title, saved, search_object, checksum, "
    "notification_frequency, last_notification_sent, notification_base_url"
)


@dataclass(frozen=True, slots=True)
class SearchRecord:
    """One row of the ``search`` table.

    Attributes:
        id: Row id.
        user_id: Owning user, None for anonymous sessions.
        session_id: Session that ran the search.
        created: Creation time (UTC).
        title: Optional user-assigned title.
        saved: Whether the user saved the search.
        search_object: Stored minified search, None when the row has none.
        checksum: Checksum of the normalized search URL.
        notification_frequency: Days between alert mails, 0 when off.
        last_notification_sent: When the last alert went out, if ever.
        notification_base_url: Site URL used to build links in alerts.
    """

    id: int
    user_id: int | None
    session_id: str | None
    created: datetime
    title: str | None
    saved: bool
    search_object: Minified | None
    checksum: int | None
    notification_frequency: int = 0
    last_notification_sent: datetime | None = None
    notification_base_url: str | None = None


class SearchHistoryStore:
    """SQLite-backed store for the ``search`` table."""

    def __init__(self, db_manager: DatabaseManager):
        """Initialize the store.

        Args:
            db_manager: Shared database manager instance.
        """
        log.debug("Initializing SearchHistoryStore")
        self.conn = db_manager.get_connection()

    def create(
        self,
        *,
        session_id: str | None,
        user_id: int | None = None,
        search_object: Minified | None = None,
        checksum: int | None = None,
        title: str | None = None,
        saved: bool = False,
        created: datetime | None = None,
    ) -> SearchRecord:
        """Insert a new row and return it."""
        created = created or datetime.now(timezone.utc)
        cursor = self.conn.execute(
            """
            INSERT INTO search (user_id, session_id, created_at, title, saved, search_object, checksum)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                user_id,
                session_id,
                int(created.timestamp()),
                title,
                int(saved),
                _dump(search_object),
                checksum,
            ),
        )
        self.conn.commit()
        search_id = int(cursor.lastrowid)
        log.debug("Created search row %d (checksum=%s)", search_id, checksum)
        record = self.get(search_id)
        if record is None:
            raise RuntimeError(f"Search row {search_id} vanished after insert")
        return record

    def get(self, search_id: int) -> SearchRecord | None:
        row = self.conn.execute(f"SELECT {_COLUMNS} FROM search WHERE id = ?", (search_id,)).fetchone()
        return _to_record(row) if row is not None else None

    def update_search_object(self, search_id: int, search_object: Minified, checksum: int | None = None) -> None:
        """Replace the stored search of a row, and its checksum when given."""
        if checksum is None:
            self.conn.execute(
                "UPDATE search SET search_object = ? WHERE id = ?",
                (_dump(search_object), search_id),
            )
        else:
            self.conn.execute(
                "UPDATE search SET search_object = ?, checksum = ? WHERE id = ?",
                (_dump(search_object), checksum, search_id),
            )
        self.conn.commit()

    def find_by_checksum(self, checksum: int, session_id: str | None, user_id: int | None = None) -> list[SearchRecord]:
        """Return rows with ``checksum`` owned by the session or the user, oldest first.

        Args:
            checksum: Normalized search checksum.
            session_id: Current session id.
            user_id: Current user id, if logged in.

        Returns:
            Candidate rows; checksum equality alone does not make them equal
            searches.
        """
        if user_id is None:
            cursor = self.conn.execute(
                f"SELECT {_COLUMNS} FROM search WHERE checksum = ? AND session_id = ? ORDER BY id",
                (checksum, session_id),
            )
        else:
            cursor = self.conn.execute(
                f"""
                SELECT {_COLUMNS} FROM search
                WHERE checksum = ? AND (session_id = ? OR user_id = ?)
                ORDER BY id
                """,
                (checksum, session_id, user_id),
            )
        return [_to_record(row) for row in cursor]

    def get_history(self, session_id: str | None, user_id: int | None = None) -> list[SearchRecord]:
        """Return the searches of a session, plus every search of the user."""
        if user_id is None:
            cursor = self.conn.execute(
                f"SELECT {_COLUMNS} FROM search WHERE session_id = ? ORDER BY id",
                (session_id,),
            )
        else:
            cursor = self.conn.execute(
                f"SELECT {_COLUMNS} FROM search WHERE session_id = ? OR user_id = ? ORDER BY id",
                (session_id, user_id),
            )
        return [_to_record(row) for row in cursor]

    def set_saved(self, search_id: int, saved: bool) -> None:
        self.conn.execute("UPDATE search SET saved = ? WHERE id = ?", (int(saved), search_id))
        self.conn.commit()

    def set_title(self, search_id: int, title: str | None) -> None:
        self.conn.execute("UPDATE search SET title = ? WHERE id = ?", (title, search_id))
        self.conn.commit()

    def delete(self, search_id: int) -> bool:
        cursor = self.conn.execute("DELETE FROM search WHERE id = ?", (search_id,))
        self.conn.commit()
        return cursor.rowcount > 0

    def delete_expired(self, days: int, now: datetime | None = None) -> int:
        """Delete unsaved searches older than ``days`` days.

        Args:
            days: Age threshold in days.
            now: Reference time, defaults to the current UTC time.

        Returns:
            Number of deleted rows.
        """
        if days <= 0:
            raise ValueError("days must be positive")
        cutoff = (now or datetime.now(timezone.utc)) - timedelta(days=days)
        cursor = self.conn.execute(
            "DELETE FROM search WHERE saved = 0 AND created_at < ?",
            (int(cutoff.timestamp()),),
        )
        self.conn.commit()
        log.debug("Deleted %d expired searches", cursor.rowcount)
        return cursor.rowcount

    def rows_missing_checksum(self) -> list[SearchRecord]:
        cursor = self.conn.execute(f"SELECT {_COLUMNS} FROM search WHERE checksum IS NULL ORDER BY id")
        return [_to_record(row) for row in cursor]

    def set_checksum(self, search_id: int, checksum: int) -> None:
        self.conn.execute("UPDATE search SET checksum = ? WHERE id = ?", (checksum, search_id))
        self.conn.commit()

    def set_schedule(self, search_id: int, frequency: int, base_url: str | None = None) -> None:
        """Set how often, in days, alerts for a search are sent; 0 turns them off.

        The stored base URL is only replaced when ``base_url`` is given.
        """
        if base_url:
            self.conn.execute(
                "UPDATE search SET notification_frequency = ?, notification_base_url = ? WHERE id = ?",
                (frequency, base_url, search_id),
            )
        else:
            self.conn.execute(
                "UPDATE search SET notification_frequency = ? WHERE id = ?",
                (frequency, search_id),
            )
        self.conn.commit()

    def set_last_notification_sent(self, search_id: int, when: datetime) -> None:
        self.conn.execute(
            "UPDATE search SET last_notification_sent = ? WHERE id = ?",
            (int(when.timestamp()), search_id),
        )
        self.conn.commit()

    def get_scheduled(self) -> list[SearchRecord]:
        """Return saved searches with alerts turned on, oldest first."""
        cursor = self.conn.execute(
            f"SELECT {_COLUMNS} FROM search WHERE saved = 1 AND notification_frequency > 0 ORDER BY id"
        )
        return [_to_record(row) for row in cursor]


def _dump(search_object: Minified | None) -> str | None:
    return search_object.to_json() if search_object is not None else None


def _to_record(row: sqlite3.Row) -> SearchRecord:
    raw_object = row["search_object"]
    return SearchRecord(
        id=row["id"],
        user_id=row["user_id"],
        session_id=row["session_id"],
        created=datetime.fromtimestamp(row["created_at"], tz=timezone.utc),
        title=row["title"],
        saved=bool(row["saved"]),
        search_object=Minified.from_json(raw_object) if raw_object else None,
        checksum=row["checksum"],
        notification_frequency=row["notification_frequency"],
        last_notification_sent=_from_timestamp(row["last_notification_sent"]),
        notification_base_url=row["notification_base_url"],
    )


def _from_timestamp(value: int | None) -> datetime | None:
    return datetime.fromtimestamp(value, tz=timezone.utc) if value is not None else None
