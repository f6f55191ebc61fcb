"""Command implementations for the SearchHistory CLI.

Encapsulates the work of each command, separated from click parameter
handling. Results are reported through the package logger.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Protocol

from SearchHistory.search.manager import ResultsManager
from SearchHistory.search.normalizer import SearchNormalizer
from SearchHistory.search.results import SearchResults
from SearchHistory.search.url_query import parse_query_string
from SearchHistory.services.history import SearchHistoryService
from SearchHistory.storage.history import SearchRecord
from SearchHistory.utils.log import log


class Command(Protocol):
    def execute(self) -> None:
        """Run the command."""
        raise NotImplementedError


def build_results(
    manager: ResultsManager,
    query_string: str,
    search_class: str | None = None,
    result_total: int | None = None,
) -> SearchResults:
    """Build a results object from a URL query string such as ``lookfor=cats``."""
    results = manager.from_request(parse_query_string(query_string), search_class)
    results.start_time = time.time()
    results.query_speed = 0.0
    results.result_total = result_total
    return results


def describe(record: SearchRecord) -> str:
    """One-line summary of a history row."""
    search = record.search_object
    if search is None:
        text = "<no search object>"
    else:
        text = f"[{search.search_class_id}/{search.search_type}] {search.terms}"
    flags = " saved" if record.saved else ""
    if record.notification_frequency:
        flags += f" every={record.notification_frequency}d"
    title = f' "{record.title}"' if record.title else ""
    return f"#{record.id} {record.created:%Y-%m-%d %H:%M}{flags}{title} checksum={record.checksum} {text}"


@dataclass(slots=True)
class NormalizeCommand:
    """Print the canonical URL and checksum of a search."""

    normalizer: SearchNormalizer
    query_string: str
    search_class: str | None = None

    def execute(self) -> None:
        results = build_results(self.normalizer.manager, self.query_string, self.search_class)
        normalized = self.normalizer.normalize_search(results)
        log.info("class=%s type=%s", results.search_class_id, results.params.search_type)
        log.info("display=%s", results.params.get_display_query())
        log.info("url=%s", normalized.url)
        log.info("checksum=%d", normalized.checksum)
        log.info("minified=%s", normalized.minified.to_json())


@dataclass(slots=True)
class RecordCommand:
    """Store a search in the history of a session."""

    service: SearchHistoryService
    query_string: str
    session_id: str
    user_id: int | None = None
    search_class: str | None = None
    result_total: int | None = None

    def execute(self) -> None:
        results = build_results(
            self.service.normalizer.manager,
            self.query_string,
            self.search_class,
            self.result_total,
        )
        record = self.service.record(results, self.session_id, self.user_id)
        log.info("Recorded %s", describe(record))


@dataclass(slots=True)
class HistoryCommand:
    """List the history of a session (and user)."""

    service: SearchHistoryService
    session_id: str
    user_id: int | None = None

    def execute(self) -> None:
        records = self.service.history(self.session_id, self.user_id)
        if not records:
            log.info("No searches for session %s", self.session_id)
            return
        for record in records:
            log.info("%s", describe(record))


@dataclass(slots=True)
class ShowCommand:
    """Rebuild a stored search and print its URL."""

    service: SearchHistoryService
    search_id: int

    def execute(self) -> None:
        results = self.service.load(self.search_id)
        log.info("class=%s type=%s", results.search_class_id, results.params.search_type)
        log.info("display=%s", results.params.get_display_query())
        log.info("url=%s", results.get_url_query().get_params(escape=False))
        if results.result_total is not None:
            log.info("results=%d", results.result_total)


@dataclass(slots=True)
class FixChecksumsCommand:
    """Fill in missing checksums of stored searches."""

    service: SearchHistoryService

    def execute(self) -> None:
        self.service.fix_checksums()


@dataclass(slots=True)
class PurgeCommand:
    """Delete old unsaved searches."""

    service: SearchHistoryService
    days: int

    def execute(self) -> None:
        self.service.purge(self.days)


@dataclass(slots=True)
class ScheduleCommand:
    """Set the alert frequency of a stored search."""

    service: SearchHistoryService
    search_id: int
    frequency: int
    base_url: str | None = None

    def execute(self) -> None:
        record = self.service.schedule(self.search_id, self.frequency, self.base_url)
        log.info("Scheduled %s", describe(record))


@dataclass(slots=True)
class DueCommand:
    """List searches whose alert is due, optionally marking them as sent."""

    service: SearchHistoryService
    mark: bool = False

    def execute(self) -> None:
        records = self.service.due_notifications()
        if not records:
            log.info("No alerts due")
            return
        for record in records:
            log.info("%s", describe(record))
            if self.mark:
                self.service.mark_notified(record.id)
