"""Search parameters: query, filters and display settings of one search."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Mapping

from SearchHistory.core.query import AbstractQuery, Query, QueryGroup
from SearchHistory.search import query_adapter
from SearchHistory.search.options import SearchOptions
from SearchHistory.search.url_query import UrlQueryConfig, UrlQueryHelper

if TYPE_CHECKING:
    from SearchHistory.search.minified import Minified

_FILTER_PREFIXES = ("-", "~")


class SearchParams:
    """Mutable parameters of a search, bound to the options of its class."""

    def __init__(self, options: SearchOptions) -> None:
        self.options = options
        self.query: AbstractQuery = Query("", options.default_handler)
        self.search_type = "basic"
        self.filters: dict[str, list[str]] = {}
        self.hidden_filters: dict[str, list[str]] = {}
        self.sort: str | None = None
        self.limit: int = options.default_limit
        self.page: int = 1
        self.view: str | None = None

    @property
    def search_class_id(self) -> str:
        return self.options.search_class_id

    def init_from_request(self, request: Mapping[str, Any]) -> None:
        """Load the search from HTTP-style request parameters.

        Args:
            request: Request parameters; values are strings or lists of strings.

        Raises:
            ValueError: If the basic search parameter holds several values.
        """
        params = query_adapter.normalize_request(request)
        if not self._init_basic_search(params):
            self._init_advanced_search(params)
        self._init_filters(params)
        self.set_sort(_first(params.get("sort")))
        self._init_limit(params)
        self._init_page(params)
        self._init_view(params)

    def _init_basic_search(self, params: Mapping[str, Any]) -> bool:
        lookfor = params.get(self.options.basic_search_param)
        if lookfor is None:
            return False
        if isinstance(lookfor, list):
            if len(lookfor) > 1:
                raise ValueError("Unsupported search URL.")
            lookfor = lookfor[0] if lookfor else ""
        self.set_basic_search(str(lookfor).strip(), _first(params.get("type")))
        return True

    def _init_advanced_search(self, params: Mapping[str, Any]) -> None:
        query = query_adapter.from_request(params, self.options.default_handler)
        if isinstance(query, Query):
            # No usable advanced terms either: fall back to an empty basic search.
            self.set_basic_search("")
            return
        self.query = query
        self.search_type = "advanced" if isinstance(query, QueryGroup) else "basic"

    def _init_filters(self, params: Mapping[str, Any]) -> None:
        for value in _as_list(params.get("filter")):
            if value:
                self.add_filter(value)
        for value in _as_list(params.get("hiddenFilters")):
            if value:
                self.add_hidden_filter(value)

    def _init_limit(self, params: Mapping[str, Any]) -> None:
        limit = _as_int(_first(params.get("limit")))
        if limit is not None and limit in self.options.limit_options:
            self.limit = limit
        else:
            self.limit = self.options.default_limit

    def _init_page(self, params: Mapping[str, Any]) -> None:
        page = _as_int(_first(params.get("page")))
        self.page = page if page is not None and page > 0 else 1

    def _init_view(self, params: Mapping[str, Any]) -> None:
        view = _first(params.get("view"))
        self.view = view if view in self.options.view_options else None

    def set_basic_search(self, lookfor: str, handler: str | None = None) -> None:
        """Replace the query with a basic search."""
        self.query = Query(lookfor, handler or self.options.default_handler)
        self.search_type = "basic"

    def get_search_handler(self) -> str | None:
        if isinstance(self.query, Query):
            return self.query.handler
        return None

    def get_display_query(self, translate: Callable[[str], str] | None = None) -> str:
        """Render the query for display, translating operators and labels."""
        translate = translate or (lambda text: text)
        return query_adapter.display(
            self.query,
            translate,
            lambda handler: translate(self.options.get_human_readable_field_name(handler)),
        )

    def replace_search_term(self, old: str, new: str) -> None:
        self.query = self.query.replace_term(old, new)

    def find_search_term(self, needle: str) -> bool:
        return self.query.contains_term(needle)

    def parse_filter(self, filter_string: str) -> tuple[str, str]:
        """Split ``field:value``; one pair of surrounding quotes is removed.

        Raises:
            ValueError: If the string has no ``:`` separator.
        """
        field, separator, value = filter_string.partition(":")
        if not separator:
            raise ValueError(f"Malformed filter: {filter_string!r}")
        if value.startswith('"'):
            value = value[1:]
        if value.endswith('"'):
            value = value[:-1]
        return field, value.strip()

    def add_filter(self, new_filter: str) -> None:
        field, value = self.parse_filter(new_filter)
        values = self.filters.setdefault(field, [])
        if value not in values:
            values.append(value)

    def has_filter(self, filter_string: str) -> bool:
        field, value = self.parse_filter(filter_string)
        return value in self.filters.get(field, [])

    def remove_filter(self, old_filter: str) -> None:
        field, value = self.parse_filter(old_filter)
        values = self.filters.get(field)
        if values is None or value not in values:
            return
        values.remove(value)
        if not values:
            del self.filters[field]

    def remove_all_filters(self, field: str | None = None) -> None:
        """Remove every filter, or only those on ``field`` and its prefixed forms."""
        if field is None:
            self.filters = {}
            return
        for name in [field] + [prefix + field for prefix in _FILTER_PREFIXES]:
            self.filters.pop(name, None)

    def add_hidden_filter(self, new_filter: str) -> None:
        field, value = self.parse_filter(new_filter)
        values = self.hidden_filters.setdefault(field, [])
        if value not in values:
            values.append(value)

    def get_raw_filters(self) -> dict[str, list[str]]:
        """Return the filters keyed by field, operator prefixes included."""
        return {field: list(values) for field, values in self.filters.items()}

    def get_hidden_filters(self) -> dict[str, list[str]]:
        return {field: list(values) for field, values in self.hidden_filters.items()}

    def get_hidden_filters_as_query_params(self) -> list[str]:
        return [f'{field}:"{value}"' for field, values in self.hidden_filters.items() for value in values]

    def get_aliases_for_facet_field(self, field: str) -> list[str]:
        """List ``field`` and its configured aliases, keeping any operator prefix."""
        prefix = ""
        if field[:1] in _FILTER_PREFIXES:
            prefix, field = field[0], field[1:]
        aliases = [field] + [alias for alias in self.options.facet_aliases.get(field, ()) if alias != field]
        return [prefix + alias for alias in aliases]

    def set_sort(self, sort: str | None, force: bool = False) -> None:
        """Set the sort; unknown values fall back to the default unless forced."""
        if force or (sort is not None and sort in self.options.sort_options):
            self.sort = sort
        else:
            self.sort = self.get_default_sort()

    def get_default_sort(self) -> str:
        return self.options.default_sort

    def get_sort(self) -> str:
        return self.sort or self.get_default_sort()

    def get_view(self) -> str:
        return self.view or self.options.default_view

    def get_url_query(self) -> UrlQueryHelper:
        """Build the URL helper for this search, omitting default settings."""
        params: dict[str, Any] = {}
        if self.get_sort() != self.get_default_sort():
            params["sort"] = self.get_sort()
        if self.limit != self.options.default_limit:
            params["limit"] = self.limit
        if self.view is not None and self.view != self.options.default_view:
            params["view"] = self.view
        if self.page != 1:
            params["page"] = self.page

        filters = [f'{field}:"{value}"' for field, values in self.filters.items() for value in values]
        if filters:
            params["filter"] = filters
        hidden = self.get_hidden_filters_as_query_params()
        if hidden:
            params["hiddenFilters"] = hidden

        config = UrlQueryConfig(
            basic_search_param=self.options.basic_search_param,
            defaults={
                "handler": self.options.default_handler,
                "limit": self.options.default_limit,
                "sort": self.get_default_sort(),
                "view": self.options.default_view,
            },
            parse_filter_callback=self.parse_filter,
            aliases_for_facet_field_callback=self.get_aliases_for_facet_field,
        )
        return UrlQueryHelper(params, self.query, config)

    def deminify(self, minified: Minified) -> None:
        """Restore query, search type and filters from a minified search."""
        self.query = query_adapter.deminify(minified.terms)
        self.search_type = "advanced" if isinstance(self.query, QueryGroup) else minified.search_type
        self.filters = {field: list(values) for field, values in minified.filters.items()}
        self.hidden_filters = {field: list(values) for field, values in minified.hidden_filters.items()}


def _as_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, list):
        return [str(item) for item in value]
    return [str(value)]


def _first(value: Any) -> str | None:
    values = _as_list(value)
    return values[0] if values else None


def _as_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None
