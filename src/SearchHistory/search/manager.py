from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable, Mapping

from SearchHistory.search.options import SearchOptions
from SearchHistory.search.params import SearchParams
from SearchHistory.search.results import SearchResults

if TYPE_CHECKING:
    from SearchHistory.config import SearchConfig


class ResultsManager:
    """Create fresh results objects by search class id."""

    def __init__(self, options: Iterable[SearchOptions], default_class: str | None = None) -> None:
        """Initialize the manager.

        Args:
            options: Options of every supported search class.
            default_class: Class used when a caller names none; defaults to
                the first entry of ``options``.

        Raises:
            ValueError: If no options are given or ``default_class`` is unknown.
        """
        self._options: dict[str, SearchOptions] = {item.search_class_id: item for item in options}
        if not self._options:
            raise ValueError("ResultsManager needs at least one search class")
        self.default_class = default_class or next(iter(self._options))
        if self.default_class not in self._options:
            raise ValueError(f"Unknown default search class: {self.default_class}")

    @classmethod
    def from_config(cls, config: SearchConfig) -> ResultsManager:
        return cls(config.backends, config.default_class)

    def supported_ids(self) -> tuple[str, ...]:
        return tuple(self._options)

    def has(self, search_class_id: str) -> bool:
        return search_class_id in self._options

    def get(self, search_class_id: str | None = None) -> SearchResults:
        """Return a new results object for ``search_class_id``.

        Raises:
            ValueError: If the class id is not registered.
        """
        class_id = search_class_id or self.default_class
        options = self._options.get(class_id)
        if options is None:
            raise ValueError(f"Unknown search class: {class_id}")
        return SearchResults(SearchParams(options))

    def from_request(self, request: Mapping[str, Any], search_class_id: str | None = None) -> SearchResults:
        """Return a results object initialized from request parameters."""
        results = self.get(search_class_id)
        results.params.init_from_request(request)
        return results
