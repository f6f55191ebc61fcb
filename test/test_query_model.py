"""Tests for query value objects."""

import sys
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from SearchHistory.core.query import Query, QueryGroup, WorkKeysQuery


class TestQueryModel(unittest.TestCase):
    def test_not_group_becomes_negated_or(self) -> None:
        group = QueryGroup("NOT", [Query("x")])

        self.assertEqual(group.operator, "OR")
        self.assertTrue(group.is_negated())

    def test_replace_term_matches_whole_words_case_insensitively(self) -> None:
        query = Query("Cat catalog cat", "AllFields")

        self.assertEqual(query.replace_term("cat", "dog").string, "dog catalog dog")

    def test_replace_term_with_punctuation(self) -> None:
        self.assertEqual(Query("c++ books").replace_term("c++", "rust").string, "rust books")

    def test_group_replace_term_keeps_negation(self) -> None:
        group = QueryGroup("NOT", [Query("cats"), Query("more cats")])

        replaced = group.replace_term("cats", "dogs")

        self.assertTrue(replaced.is_negated())
        self.assertEqual([q.string for q in replaced.queries], ["dogs", "more dogs"])

    def test_contains_term(self) -> None:
        group = QueryGroup("AND", [QueryGroup("OR", [Query("black cats")])])

        self.assertTrue(group.contains_term("cats"))
        self.assertFalse(group.contains_term("cat"))
        self.assertFalse(WorkKeysQuery("r1").contains_term("r1"))

    def test_with_handler(self) -> None:
        self.assertEqual(Query("x", "AllFields").with_handler("Title"), Query("x", "Title"))


if __name__ == "__main__":
    unittest.main()
