"""Normalized views of searches used to spot repeated searches."""

from __future__ import annotations

import zlib

from SearchHistory.search.manager import ResultsManager
from SearchHistory.search.minified import Minified
from SearchHistory.search.results import SearchResults

CHECKSUM_MASK = 0x0FFFFFFF


def url_checksum(url: str) -> int:
    """Return the stored checksum of a canonical search URL."""
    return zlib.crc32(url.encode("utf-8")) & CHECKSUM_MASK


class NormalizedSearch:
    """A search reduced to the canonical form shared by equivalent searches.

    The search is minified and immediately rebuilt, which drops everything the
    minified form does not keep (paging, sorting, view). Two searches that
    normalize to the same URL are treated as the same search.
    """

    def __init__(self, manager: ResultsManager, results: SearchResults) -> None:
        self._manager = manager
        self._raw_results = results
        self._minified = results.minify()
        self._normalized_results = self._minified.deminify(manager)
        self._url = self._normalized_results.get_url_query().get_params(escape=False)
        self._checksum = url_checksum(self._url)

    @property
    def raw_results(self) -> SearchResults:
        return self._raw_results

    @property
    def minified(self) -> Minified:
        return self._minified

    @property
    def normalized_results(self) -> SearchResults:
        return self._normalized_results

    @property
    def url(self) -> str:
        return self._url

    @property
    def checksum(self) -> int:
        return self._checksum

    def is_equivalent_to_minified_search(self, minified: Minified) -> bool:
        """Check whether a stored search is the same search as this one.

        Args:
            minified: Stored search to compare against.

        Returns:
            True when both use the same results class and search class and
            produce the same canonical URL.

        Raises:
            ValueError: If the stored search names an unknown search class.
        """
        other = minified.deminify(self._manager)
        if type(other) is not type(self._raw_results):
            return False
        if other.search_class_id != self._raw_results.search_class_id:
            return False
        return other.get_url_query().get_params(escape=False) == self._url


class SearchNormalizer:
    """Factory for :class:`NormalizedSearch` objects."""

    def __init__(self, manager: ResultsManager) -> None:
        self.manager = manager

    def normalize_search(self, results: SearchResults) -> NormalizedSearch:
        return NormalizedSearch(self.manager, results)

    def normalize_minified_search(self, minified: Minified) -> NormalizedSearch:
        return self.normalize_search(minified.deminify(self.manager))
