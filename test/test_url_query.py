"""Tests for URL parameter generation from query graphs."""

import sys
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from SearchHistory.core.query import Query, QueryGroup, WorkKeysQuery
from SearchHistory.search.url_query import UrlQueryConfig, UrlQueryHelper, parse_query_string

_DEFAULTS = UrlQueryConfig(defaults={"sort": "relevance", "limit": 20})


class TestUrlQueryHelper(unittest.TestCase):
    def test_advanced_query_string(self) -> None:
        query = QueryGroup("OR", [QueryGroup("AND", [Query("dog", "Title"), Query("cat", "Author")])])

        params = UrlQueryHelper({}, query).get_params(escape=False)

        self.assertEqual(
            params,
            "?join=OR&bool0%5B%5D=AND&lookfor0%5B%5D=dog&lookfor0%5B%5D=cat"
            "&type0%5B%5D=Title&type0%5B%5D=Author",
        )

    def test_str_is_html_escaped(self) -> None:
        helper = UrlQueryHelper({"page": 2}, Query("cats & dogs", "AllFields"))

        self.assertEqual(str(helper), "?page=2&amp;lookfor=cats+%26+dogs&amp;type=AllFields")

    def test_basic_query_params(self) -> None:
        helper = UrlQueryHelper({}, Query("cats", "AllFields"))

        self.assertEqual(helper.get_param_array(), {"lookfor": "cats", "type": "AllFields"})

    def test_work_keys_params(self) -> None:
        helper = UrlQueryHelper({}, WorkKeysQuery("r1", False, ("k1",)))

        self.assertEqual(helper.get_param_array(), {"search": "versions", "id": "r1", "keys": ["k1"]})

    def test_stale_search_params_are_replaced(self) -> None:
        helper = UrlQueryHelper({"lookfor0": ["old"], "type0": ["Title"], "page": 2}, Query("new"))

        self.assertEqual(helper.get_param_array(), {"page": 2, "lookfor": "new"})

    def test_add_then_remove_filter_unsets_key(self) -> None:
        helper = UrlQueryHelper({}, Query("cats", "AllFields"))

        added = helper.add_filter('format:"Book"')
        removed = added.remove_filter('format:"Book"')

        self.assertEqual(added.get_param_array()["filter"], ['format:"Book"'])
        self.assertNotIn("filter", removed.get_param_array())
        self.assertNotIn("filter", helper.get_param_array())

    def test_add_filter_resets_page(self) -> None:
        helper = UrlQueryHelper({"page": 3}, Query("cats"))

        self.assertNotIn("page", helper.add_filter('format:"Book"').get_param_array())

    def test_negated_facet(self) -> None:
        helper = UrlQueryHelper({}, Query("cats")).add_facet("format", "Book", "NOT")

        self.assertEqual(helper.get_param_array()["filter"], ['-format:"Book"'])
        self.assertNotIn("filter", helper.remove_facet("format", "Book", operator="NOT").get_param_array())

    def test_remove_facet_keeps_other_filters(self) -> None:
        helper = UrlQueryHelper({"filter": ['format:"Book"', 'language:"English"']}, Query("cats"))

        remaining = helper.remove_facet("format", "Book").get_param_array()["filter"]

        self.assertEqual(remaining, ['language:"English"'])

    def test_remove_all_and_reset_default_filters(self) -> None:
        helper = UrlQueryHelper({"filter": ['format:"Book"'], "dfApplied": 1}, Query("cats"))

        removed = helper.remove_all_filters().get_param_array()
        reset = helper.reset_default_filters().get_param_array()

        self.assertNotIn("filter", removed)
        self.assertEqual(removed["dfApplied"], 1)
        self.assertNotIn("filter", reset)
        self.assertNotIn("dfApplied", reset)

    def test_default_sort_and_limit_are_omitted(self) -> None:
        helper = UrlQueryHelper({"page": 4}, Query("cats"), _DEFAULTS)

        self.assertNotIn("sort", helper.set_sort("relevance").get_param_array())
        sorted_params = helper.set_sort("year").get_param_array()
        self.assertEqual(sorted_params["sort"], "year")
        self.assertNotIn("page", sorted_params)
        self.assertNotIn("limit", helper.set_limit(20).get_param_array())
        self.assertEqual(helper.set_limit(50).get_param_array()["limit"], 50)

    def test_set_page(self) -> None:
        helper = UrlQueryHelper({}, Query("cats"))

        self.assertEqual(helper.set_page(3).get_param_array()["page"], 3)
        self.assertNotIn("page", helper.set_page(3).set_page(1).get_param_array())

    def test_replace_term_and_set_search_terms(self) -> None:
        helper = UrlQueryHelper({}, Query("cats and dogs", "AllFields"))

        self.assertEqual(helper.replace_term("dogs", "birds").get_param_array()["lookfor"], "cats and birds")
        self.assertEqual(helper.set_search_terms("fish").get_param_array(), {"lookfor": "fish"})

    def test_set_handler(self) -> None:
        helper = UrlQueryHelper({}, Query("cats", "AllFields")).set_handler("Title")

        self.assertEqual(helper.get_param_array()["type"], "Title")

    def test_suppressed_query_keeps_other_params(self) -> None:
        helper = UrlQueryHelper({"filter": ['format:"Book"']}, Query("cats")).set_suppress_query(True)

        self.assertTrue(helper.is_query_suppressed())
        self.assertEqual(helper.get_param_array(), {"filter": ['format:"Book"']})

    def test_flat_group_terms_get_their_own_params(self) -> None:
        query = QueryGroup("OR", [Query("dog", "Title"), Query("cat", "Author")])

        params = UrlQueryHelper({}, query).get_param_array()

        self.assertEqual(
            params,
            {"join": "OR", "lookfor0": ["dog"], "type0": ["Title"], "lookfor1": ["cat"], "type1": ["Author"]},
        )

    def test_view_without_default_only_drops_empty_string(self) -> None:
        helper = UrlQueryHelper({"view": "list"}, Query("cats"))

        self.assertNotIn("view", helper.set_view_param("").get_param_array())
        self.assertEqual(helper.set_view_param(0).get_param_array()["view"], 0)
        self.assertEqual(helper.set_view_param("grid").get_param_array()["view"], "grid")

    def test_hidden_fields(self) -> None:
        helper = UrlQueryHelper({"filter": ['format:"Book"']}, Query("cats"))

        self.assertEqual(
            helper.as_hidden_fields(),
            '<input type="hidden" name="filter[]" value="format:&quot;Book&quot;" />'
            '<input type="hidden" name="lookfor" value="cats" />',
        )
        self.assertEqual(
            helper.as_hidden_fields({"filter": "^format:"}),
            '<input type="hidden" name="lookfor" value="cats" />',
        )


class TestParseQueryString(unittest.TestCase):
    def test_array_keys_become_lists(self) -> None:
        params = parse_query_string("?lookfor0[]=dog&lookfor0[]=cat&join=OR")

        self.assertEqual(params, {"lookfor0": ["dog", "cat"], "join": "OR"})


if __name__ == "__main__":
    unittest.main()
