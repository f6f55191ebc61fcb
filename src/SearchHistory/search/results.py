from __future__ import annotations

from SearchHistory.search.minified import Minified
from SearchHistory.search.params import SearchParams
from SearchHistory.search.url_query import UrlQueryHelper


class SearchResults:
    """Outcome metadata of one executed search.

    Result records are never fetched here; only the figures a history entry
    needs are kept.
    """

    def __init__(self, params: SearchParams) -> None:
        self.params = params
        self.search_id: int | None = None
        self.start_time: float | None = None
        self.query_speed: float | None = None
        self.result_total: int | None = None

    @property
    def search_class_id(self) -> str:
        return self.params.search_class_id

    def get_url_query(self) -> UrlQueryHelper:
        return self.params.get_url_query()

    def minify(self) -> Minified:
        return Minified.from_results(self)

    def deminify(self, minified: Minified) -> None:
        """Restore the recorded figures from a minified search."""
        self.search_id = minified.id
        self.start_time = minified.start_time
        self.query_speed = minified.query_speed
        self.result_total = minified.result_total
