"""Search parameters, their minified storage form and normalization."""

from __future__ import annotations

from SearchHistory.search.manager import ResultsManager
from SearchHistory.search.minified import Minified
from SearchHistory.search.normalizer import NormalizedSearch, SearchNormalizer, url_checksum
from SearchHistory.search.options import SearchOptions
from SearchHistory.search.params import SearchParams
from SearchHistory.search.results import SearchResults
from SearchHistory.search.url_query import UrlQueryConfig, UrlQueryHelper, build_query_string, parse_query_string

__all__ = [
    "Minified",
    "NormalizedSearch",
    "ResultsManager",
    "SearchNormalizer",
    "SearchOptions",
    "SearchParams",
    "SearchResults",
    "UrlQueryConfig",
    "UrlQueryHelper",
    "build_query_string",
    "parse_query_string",
    "url_checksum",
]
