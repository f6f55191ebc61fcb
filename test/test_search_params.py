"""Tests for search parameter parsing and URL generation."""

import sys
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))
sys.path.insert(0, str(REPO_ROOT / "test"))

from helpers import solr_options

from SearchHistory.core.query import Query, QueryGroup
from SearchHistory.search.params import SearchParams


class TestInitFromRequest(unittest.TestCase):
    def test_basic_search_with_display_settings(self) -> None:
        params = SearchParams(solr_options())

        params.init_from_request(
            {
                "lookfor": "  cats ",
                "type": "Title",
                "sort": "year",
                "limit": "50",
                "page": "2",
                "view": "grid",
                "filter[]": ['format:"Book"', '-language:"German"'],
            }
        )

        self.assertEqual(params.query, Query("cats", "Title"))
        self.assertEqual(params.search_type, "basic")
        self.assertEqual(params.sort, "year")
        self.assertEqual(params.limit, 50)
        self.assertEqual(params.page, 2)
        self.assertEqual(params.get_view(), "grid")
        self.assertEqual(params.get_raw_filters(), {"format": ["Book"], "-language": ["German"]})

    def test_invalid_settings_fall_back_to_defaults(self) -> None:
        params = SearchParams(solr_options())

        params.init_from_request({"lookfor": "cats", "sort": "bogus", "limit": "7", "page": "x"})

        self.assertEqual(params.get_sort(), "relevance")
        self.assertEqual(params.limit, 20)
        self.assertEqual(params.page, 1)

    def test_multiple_basic_terms_rejected(self) -> None:
        params = SearchParams(solr_options())

        with self.assertRaises(ValueError):
            params.init_from_request({"lookfor": ["a", "b"]})

    def test_advanced_search(self) -> None:
        params = SearchParams(solr_options())

        params.init_from_request({"lookfor0[]": ["dog"], "type0[]": ["Title"]})

        self.assertEqual(params.search_type, "advanced")
        self.assertIsInstance(params.query, QueryGroup)

    def test_empty_request_is_empty_basic_search(self) -> None:
        params = SearchParams(solr_options())

        params.init_from_request({})

        self.assertEqual(params.query, Query("", "AllFields"))
        self.assertEqual(params.search_type, "basic")


class TestFilters(unittest.TestCase):
    def test_parse_filter(self) -> None:
        params = SearchParams(solr_options())

        self.assertEqual(params.parse_filter('format:"Book"'), ("format", "Book"))
        self.assertEqual(params.parse_filter("callnumber:QA:76"), ("callnumber", "QA:76"))
        self.assertEqual(params.parse_filter('topic:"  spaced "'), ("topic", "spaced"))
        with self.assertRaises(ValueError):
            params.parse_filter("no separator")

    def test_add_has_remove(self) -> None:
        params = SearchParams(solr_options())

        params.add_filter('format:"Book"')
        params.add_filter('format:"Book"')

        self.assertTrue(params.has_filter('format:"Book"'))
        self.assertEqual(params.get_raw_filters(), {"format": ["Book"]})
        params.remove_filter('format:"Book"')
        self.assertEqual(params.get_raw_filters(), {})

    def test_remove_all_filters_for_field_includes_prefixed(self) -> None:
        params = SearchParams(solr_options())
        for value in ('format:"Book"', '-format:"Map"', '~format:"CD"', 'language:"English"'):
            params.add_filter(value)

        params.remove_all_filters("format")

        self.assertEqual(params.get_raw_filters(), {"language": ["English"]})

    def test_hidden_filters_as_query_params(self) -> None:
        params = SearchParams(solr_options())

        params.init_from_request({"lookfor": "cats", "hiddenFilters[]": ['institution:"Main"']})

        self.assertEqual(params.get_hidden_filters_as_query_params(), ['institution:"Main"'])

    def test_aliases_keep_prefix(self) -> None:
        params = SearchParams(solr_options())

        self.assertEqual(params.get_aliases_for_facet_field("-format"), ["-format", "-format_facet"])
        self.assertEqual(params.get_aliases_for_facet_field("language"), ["language"])


class TestUrlQuery(unittest.TestCase):
    def test_default_settings_omitted(self) -> None:
        params = SearchParams(solr_options())
        params.init_from_request({"lookfor": "cats", "sort": "relevance", "limit": "20"})

        self.assertEqual(params.get_url_query().get_param_array(), {"lookfor": "cats", "type": "AllFields"})

    def test_non_default_settings_and_filters_included(self) -> None:
        params = SearchParams(solr_options())
        params.init_from_request({"lookfor": "cats", "type": "Title", "sort": "year", "page": "2"})
        params.add_filter('format:"Book"')

        self.assertEqual(
            params.get_url_query().get_param_array(),
            {"sort": "year", "page": 2, "filter": ['format:"Book"'], "lookfor": "cats", "type": "Title"},
        )

    def test_remove_facet_through_alias(self) -> None:
        params = SearchParams(solr_options())
        params.init_from_request({"lookfor": "cats", "filter": ['format_facet:"Book"']})

        helper = params.get_url_query().remove_facet("format", "Book")

        self.assertNotIn("filter", helper.get_param_array())

    def test_display_query(self) -> None:
        params = SearchParams(solr_options())
        params.init_from_request({"lookfor0": ["dog", "cat"], "type0": ["Title", "AllFields"], "bool0": ["OR"]})

        self.assertEqual(params.get_display_query(), "(Title:dog OR All Fields:cat)")


if __name__ == "__main__":
    unittest.main()
