"""Search history service: record searches without duplicating them."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from SearchHistory.search.normalizer import NormalizedSearch, SearchNormalizer
from SearchHistory.search.results import SearchResults
from SearchHistory.utils.log import log

if TYPE_CHECKING:
    from SearchHistory.storage.history import SearchHistoryStore, SearchRecord


@dataclass(slots=True)
class SearchHistoryService:
    """Application service that stores searches in the search history.

    A search that is equivalent to one already stored for the same session
    (or user) updates that row instead of adding another one.
    """

    normalizer: SearchNormalizer
    store: SearchHistoryStore

    def record(self, results: SearchResults, session_id: str, user_id: int | None = None) -> SearchRecord:
        """Store a search in the history.

        Args:
            results: Executed search.
            session_id: Session that ran the search.
            user_id: Logged-in user, if any.

        Returns:
            The stored row. ``results.search_id`` is set to its id.

        Raises:
            ValueError: If a candidate row names an unknown search class.
        """
        normalized = self.normalizer.normalize_search(results)
        duplicate = self._find_equivalent(normalized, session_id, user_id)
        if duplicate is not None:
            results.search_id = duplicate.id
            self.store.update_search_object(duplicate.id, results.minify())
            log.info("Search matches history row %d, updated", duplicate.id)
            return self._reload(duplicate.id)

        row = self.store.create(
            session_id=session_id,
            user_id=user_id,
            search_object=normalized.minified,
            checksum=normalized.checksum,
        )
        # Store again so the saved search knows its own id.
        results.search_id = row.id
        self.store.update_search_object(row.id, results.minify())
        log.info("Search stored as history row %d (checksum=%d)", row.id, normalized.checksum)
        return self._reload(row.id)

    def _find_equivalent(
        self,
        normalized: NormalizedSearch,
        session_id: str,
        user_id: int | None,
    ) -> SearchRecord | None:
        candidates = self.store.find_by_checksum(normalized.checksum, session_id, user_id)
        log.debug("Found %d history rows with checksum %d", len(candidates), normalized.checksum)
        for candidate in candidates:
            if candidate.search_object is None:
                continue
            if normalized.is_equivalent_to_minified_search(candidate.search_object):
                return candidate
        return None

    def _reload(self, search_id: int) -> SearchRecord:
        record = self.store.get(search_id)
        if record is None:
            raise RuntimeError(f"Search row {search_id} not found after write")
        return record

    def load(self, search_id: int) -> SearchResults:
        """Rebuild a stored search.

        Raises:
            ValueError: If the row is missing, holds no search, or names an
                unknown search class.
        """
        record = self.store.get(search_id)
        if record is None:
            raise ValueError(f"Search {search_id} not found")
        if record.search_object is None:
            raise ValueError(f"Search {search_id} has no stored search object")
        return record.search_object.deminify(self.normalizer.manager)

    def history(self, session_id: str, user_id: int | None = None) -> list[SearchRecord]:
        return self.store.get_history(session_id, user_id)

    def fix_checksums(self) -> int:
        """Compute the checksum of every row stored without one.

        Returns:
            Number of rows updated.
        """
        fixed = 0
        for record in self.store.rows_missing_checksum():
            if record.search_object is None:
                log.warning("Search row %d has no search object, checksum left empty", record.id)
                continue
            normalized = self.normalizer.normalize_minified_search(record.search_object)
            self.store.set_checksum(record.id, normalized.checksum)
            fixed += 1
        log.info("Fixed checksums of %d search rows", fixed)
        return fixed

    def purge(self, days: int) -> int:
        """Delete unsaved searches older than ``days`` days."""
        deleted = self.store.delete_expired(days)
        log.info("Purged %d unsaved searches older than %d days", deleted, days)
        return deleted

    def schedule(self, search_id: int, frequency: int, base_url: str | None = None) -> SearchRecord:
        """Turn alerts for a search on or off.

        A positive frequency also saves the search.

        Args:
            search_id: History row id.
            frequency: Days between alerts; 0 turns alerts off.
            base_url: Site URL used to build links in the alert; the stored
                one is kept when omitted.

        Raises:
            ValueError: If the row is missing or the frequency is negative.
        """
        if frequency < 0:
            raise ValueError("frequency must not be negative")
        if self.store.get(search_id) is None:
            raise ValueError(f"Search {search_id} not found")
        self.store.set_schedule(search_id, frequency, base_url)
        if frequency > 0:
            self.store.set_saved(search_id, True)
        log.info("Search %d alert frequency set to %d days", search_id, frequency)
        return self._reload(search_id)

    def due_notifications(self, now: datetime | None = None) -> list[SearchRecord]:
        """Return scheduled searches whose next alert is due at ``now``."""
        now = now or datetime.now(timezone.utc)
        due = [
            record
            for record in self.store.get_scheduled()
            if record.last_notification_sent is None
            or record.last_notification_sent + timedelta(days=record.notification_frequency) <= now
        ]
        log.debug("%d scheduled searches due for alerts", len(due))
        return due

    def mark_notified(self, search_id: int, now: datetime | None = None) -> None:
        self.store.set_last_notification_sent(search_id, now or datetime.now(timezone.utc))
