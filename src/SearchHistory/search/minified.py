"""Compact, storable representation of a complete search."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Mapping, Sequence

from SearchHistory.search import query_adapter

if TYPE_CHECKING:
    from SearchHistory.search.manager import ResultsManager
    from SearchHistory.search.results import SearchResults

# Search types written before search class ids were stored, mapped to the
# class id they belong to.
_LEGACY_CLASS_IDS: dict[str, str] = {
    "Summon": "Summon",
    "SummonAdvanced": "Summon",
    "WorldCat": "WorldCat",
    "WorldCatAdvanced": "WorldCat",
    "Authority": "SolrAuth",
    "AuthorityAdvanced": "SolrAuth",
}
_LEGACY_DEFAULT_CLASS_ID = "Solr"


@dataclass(frozen=True, slots=True)
class Minified:
    """Minified search, persisted as an opaque blob.

    Attributes:
        id: Search row id, once the search has been stored.
        start_time: Epoch seconds when the search was run.
        query_speed: Seconds the backend needed.
        result_total: Number of hits.
        search_type: ``basic`` or ``advanced``.
        search_class_id: Search class used to rebuild the search.
        terms: Query in the array form of ``query_adapter.minify``.
        filters: Filter field (operator prefix included) to values.
        hidden_filters: Hidden filter field to values.
    """

    id: int | None
    start_time: float | None
    query_speed: float | None
    result_total: int | None
    search_type: str
    search_class_id: str
    terms: Any
    filters: Mapping[str, Sequence[str]] = field(default_factory=dict)
    hidden_filters: Mapping[str, Sequence[str]] = field(default_factory=dict)

    @classmethod
    def from_results(cls, results: SearchResults) -> Minified:
        """Minify a live results object."""
        params = results.params
        return cls(
            id=results.search_id,
            start_time=results.start_time,
            query_speed=results.query_speed,
            result_total=results.result_total,
            search_type=params.search_type,
            search_class_id=params.search_class_id,
            terms=query_adapter.minify(params.query),
            filters=params.get_raw_filters(),
            hidden_filters=params.get_hidden_filters(),
        )

    def deminify(self, manager: ResultsManager) -> SearchResults:
        """Rebuild a live results object.

        Args:
            manager: Results factory keyed by search class id.

        Returns:
            Results object of the stored search class.

        Raises:
            ValueError: If the search class id is unknown to ``manager``.
        """
        results = manager.get(self.search_class_id)
        results.params.deminify(self)
        results.deminify(self)
        return results

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the short keys of the stored format."""
        return {
            "id": self.id,
            "i": self.start_time,
            "s": self.query_speed,
            "r": self.result_total,
            "ty": self.search_type,
            "cl": self.search_class_id,
            "t": self.terms,
            "f": {key: list(values) for key, values in self.filters.items()},
            "hf": {key: list(values) for key, values in self.hidden_filters.items()},
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Minified:
        """Deserialize a stored record, including legacy records without ``cl``.

        Raises:
            ValueError: If the record has no terms.
        """
        if "t" not in data:
            raise ValueError("Minified search is missing its terms")
        search_type = data.get("ty") or "basic"
        search_class_id = data.get("cl")
        if not search_class_id:
            search_class_id, search_type = _legacy_class_id(search_type)
        return cls(
            id=data.get("id"),
            start_time=data.get("i"),
            query_speed=data.get("s"),
            result_total=data.get("r"),
            search_type=search_type,
            search_class_id=search_class_id,
            terms=data["t"],
            filters=_as_filter_map(data.get("f")),
            hidden_filters=_as_filter_map(data.get("hf")),
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, separators=(",", ":"))

    @classmethod
    def from_json(cls, text: str) -> Minified:
        data = json.loads(text)
        if not isinstance(data, Mapping):
            raise ValueError("Minified search must be a JSON object")
        return cls.from_dict(data)


def _legacy_class_id(search_type: str) -> tuple[str, str]:
    """Derive ``(search_class_id, search_type)`` for records without a class id."""
    class_id = _LEGACY_CLASS_IDS.get(search_type)
    if class_id is None:
        return _LEGACY_DEFAULT_CLASS_ID, search_type
    return class_id, "advanced" if search_type.endswith("Advanced") else "basic"


def _as_filter_map(value: Any) -> dict[str, list[str]]:
    # Older rows stored an empty filter list as a JSON array.
    if not value:
        return {}
    return {str(key): [str(item) for item in values] for key, values in value.items()}
