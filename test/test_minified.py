"""Tests for the stored (minified) search format."""

import sys
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))
sys.path.insert(0, str(REPO_ROOT / "test"))

from helpers import make_manager

from SearchHistory.core.query import Query
from SearchHistory.search.minified import Minified

_TERMS = [{"l": "cats", "i": "AllFields"}]


class TestMinifiedFormat(unittest.TestCase):
    def test_from_results_captures_search(self) -> None:
        results = make_manager().from_request({"lookfor": "cats", "filter": ['format:"Book"']})
        results.search_id = 7
        results.result_total = 42

        minified = results.minify()

        self.assertEqual(minified.id, 7)
        self.assertEqual(minified.result_total, 42)
        self.assertEqual(minified.search_class_id, "Solr")
        self.assertEqual(minified.search_type, "basic")
        self.assertEqual(minified.terms, [{"l": "cats", "i": "AllFields", "s": "b"}])
        self.assertEqual(minified.filters, {"format": ["Book"]})

    def test_json_uses_short_keys(self) -> None:
        results = make_manager().from_request({"lookfor": "cats"})

        data = results.minify().to_dict()

        self.assertEqual(set(data), {"id", "i", "s", "r", "ty", "cl", "t", "f", "hf"})
        self.assertEqual(Minified.from_json(results.minify().to_json()), results.minify())

    def test_deminify_restores_search(self) -> None:
        results = make_manager().from_request({"lookfor": "cats", "type": "Title"})
        results.search_id = 3

        restored = results.minify().deminify(make_manager())

        self.assertEqual(restored.search_id, 3)
        self.assertEqual(restored.params.query, Query("cats", "Title"))

    def test_unknown_search_class_raises(self) -> None:
        minified = Minified.from_dict({"t": _TERMS, "ty": "basic", "cl": "Nowhere"})

        with self.assertRaises(ValueError):
            minified.deminify(make_manager())

    def test_missing_terms_raise(self) -> None:
        with self.assertRaises(ValueError):
            Minified.from_dict({"ty": "basic", "cl": "Solr"})


class TestLegacyRecords(unittest.TestCase):
    def test_class_derived_from_advanced_type(self) -> None:
        minified = Minified.from_dict({"t": _TERMS, "ty": "SummonAdvanced"})

        self.assertEqual(minified.search_class_id, "Summon")
        self.assertEqual(minified.search_type, "advanced")

    def test_class_derived_from_basic_type(self) -> None:
        minified = Minified.from_dict({"t": _TERMS, "ty": "Authority"})

        self.assertEqual(minified.search_class_id, "SolrAuth")
        self.assertEqual(minified.search_type, "basic")

    def test_other_types_default_to_solr(self) -> None:
        minified = Minified.from_dict({"t": _TERMS, "ty": "advanced"})

        self.assertEqual(minified.search_class_id, "Solr")
        self.assertEqual(minified.search_type, "advanced")

    def test_empty_filter_array(self) -> None:
        minified = Minified.from_dict({"t": _TERMS, "ty": "basic", "cl": "Solr", "f": [], "hf": []})

        self.assertEqual(minified.filters, {})
        self.assertEqual(minified.hidden_filters, {})


if __name__ == "__main__":
    unittest.main()
