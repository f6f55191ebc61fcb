"""Shared fixtures for SearchHistory tests."""

from __future__ import annotations

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from SearchHistory.search.manager import ResultsManager
from SearchHistory.search.options import SearchOptions


def solr_options() -> SearchOptions:
    return SearchOptions(
        search_class_id="Solr",
        default_handler="AllFields",
        default_sort="relevance",
        default_limit=20,
        default_view="list",
        sort_options=("relevance", "year"),
        limit_options=(20, 50),
        view_options=("list", "grid"),
        handlers={"AllFields": "All Fields", "Title": "Title", "Author": "Author"},
        facet_aliases={"format": ("format_facet",)},
    )


def summon_options() -> SearchOptions:
    return SearchOptions(search_class_id="Summon", handlers={"AllFields": "All Fields"})


def make_manager() -> ResultsManager:
    return ResultsManager([solr_options(), summon_options()], "Solr")
