"""URL query parameters that stay consistent with a search query graph."""

from __future__ import annotations

import html
import re
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import Any, Mapping
from urllib.parse import parse_qsl, quote_plus

from SearchHistory.core.query import AbstractQuery, Query, QueryGroup, WorkKeysQuery

_ADVANCED_PARAM_RE = re.compile(r"^(bool|lookfor|type|op)\d+$")

ParseFilterCallback = Callable[[str], tuple[str, str]]
AliasCallback = Callable[[str], list[str]]


@dataclass(frozen=True, slots=True)
class UrlQueryConfig:
    """Settings shared by a helper and every helper derived from it.

    Attributes:
        basic_search_param: Parameter holding the text of a basic search.
        defaults: Default values (``sort``, ``limit``, ...) omitted from URLs.
        suppress_query: Leave the query out of the URL entirely.
        escape: Whether ``str()`` HTML-escapes the query string.
        parse_filter_callback: Splits a filter string into field and value.
        aliases_for_facet_field_callback: Lists every alias of a facet field.
    """

    basic_search_param: str = "lookfor"
    defaults: Mapping[str, Any] = field(default_factory=dict)
    suppress_query: bool = False
    escape: bool = True
    parse_filter_callback: ParseFilterCallback | None = None
    aliases_for_facet_field_callback: AliasCallback | None = None


class UrlQueryHelper:
    """Build and transform the URL parameters of a search.

    Every transformation returns a new helper; an instance never changes after
    construction.
    """

    def __init__(
        self,
        url_params: Mapping[str, Any],
        query: AbstractQuery,
        config: UrlQueryConfig | None = None,
        regenerate_query_params: bool = True,
    ) -> None:
        """Initialize the helper.

        Args:
            url_params: URL parameters; values are scalars or lists.
            query: Query the search parameters are derived from.
            config: Helper configuration.
            regenerate_query_params: Rebuild the search parameters from
                ``query`` (True) or trust ``url_params`` to hold them (False).
        """
        self.config = config or UrlQueryConfig()
        self.query = query
        self._params: dict[str, Any] = _copy_params(url_params)
        if regenerate_query_params:
            self._regenerate_search_query_params()

    def _clear_search_query_params(self) -> None:
        for key in (self.config.basic_search_param, "join", "type", "keys"):
            self._params.pop(key, None)
        if self._params.get("search") == "versions":
            self._params.pop("search")
            self._params.pop("id", None)
        for key in [key for key in self._params if _ADVANCED_PARAM_RE.match(key)]:
            del self._params[key]

    def _regenerate_search_query_params(self) -> None:
        self._clear_search_query_params()
        if self.is_query_suppressed():
            return

        query = self.query
        if isinstance(query, QueryGroup):
            self._params["join"] = query.operator
            for index, current in enumerate(query.queries):
                if isinstance(current, QueryGroup):
                    self._add_group_params(index, current)
                elif isinstance(current, Query):
                    # A term of a flat group stands alone as a one-term group.
                    self._params[f"lookfor{index}"] = [current.string]
                    self._params[f"type{index}"] = [current.handler or ""]
                    if current.operator is not None:
                        self._params[f"op{index}"] = [current.operator]
        elif isinstance(query, Query):
            if query.string:
                self._params[self.config.basic_search_param] = query.string
            if query.handler:
                self._params["type"] = query.handler
        elif isinstance(query, WorkKeysQuery):
            self._params["search"] = "versions"
            self._params["id"] = query.id
            if query.keys:
                self._params["keys"] = list(query.keys)

    def _add_group_params(self, index: int, group: QueryGroup) -> None:
        self._params[f"bool{index}"] = ["NOT" if group.is_negated() else group.operator]
        lookfor = self._params.setdefault(f"lookfor{index}", [])
        types = self._params.setdefault(f"type{index}", [])
        for inner in group.queries:
            if not isinstance(inner, Query):
                raise ValueError("Cannot build URL parameters for groups nested this deeply")
            lookfor.append(inner.string)
            types.append(inner.handler or "")
            if inner.operator is not None:
                # op<N> must stay aligned with lookfor<N>; pad missing slots.
                ops = self._params.setdefault(f"op{index}", [])
                while len(ops) < len(lookfor) - 1:
                    ops.append("")
                ops.append(inner.operator)

    def _get_default(self, key: str) -> Any:
        return self.config.defaults.get(key)

    def _derive(
        self,
        params: Mapping[str, Any],
        *,
        query: AbstractQuery | None = None,
        config: UrlQueryConfig | None = None,
        regenerate: bool = False,
    ) -> UrlQueryHelper:
        return type(self)(
            params,
            self.query if query is None else query,
            self.config if config is None else config,
            regenerate,
        )

    def set_default_parameter(self, name: str, value: Any) -> UrlQueryHelper:
        """Return a helper with an extra parameter."""
        params = _copy_params(self._params)
        params[name] = value
        return self._derive(params)

    def set_suppress_query(self, suppress: bool) -> UrlQueryHelper:
        """Return a helper with query suppression switched on or off."""
        return self._derive(
            self._params,
            config=replace(self.config, suppress_query=suppress),
            regenerate=True,
        )

    def is_query_suppressed(self) -> bool:
        return bool(self.config.suppress_query)

    def get_param_array(self) -> dict[str, Any]:
        """Return a copy of the current URL parameters."""
        return _copy_params(self._params)

    def __str__(self) -> str:
        return self.get_params(self.config.escape)

    def replace_term(self, old: str, new: str) -> UrlQueryHelper:
        """Return a helper whose query has ``old`` replaced by ``new``."""
        return self._derive(self._params, query=self.query.replace_term(old, new), regenerate=True)

    def add_facet(
        self,
        field: str,
        value: str,
        operator: str = "AND",
        param_array: Mapping[str, Any] | None = None,
    ) -> UrlQueryHelper:
        """Return a helper with a facet filter added.

        ``NOT`` facets are written as ``-field``, ``OR`` facets as ``~field``.
        """
        prefix = "-" if operator == "NOT" else "~" if operator == "OR" else ""
        return self.add_filter(f'{prefix}{field}:"{value}"', param_array)

    def add_filter(self, new_filter: str, param_array: Mapping[str, Any] | None = None) -> UrlQueryHelper:
        """Return a helper with ``new_filter`` appended and the page reset."""
        params = _copy_params(self._params if param_array is None else param_array)
        params.setdefault("filter", []).append(new_filter)
        params.pop("page", None)
        return self._derive(params)

    def remove_all_filters(self) -> UrlQueryHelper:
        """Return a helper without filters, default filters included."""
        params = _copy_params(self._params)
        params.pop("filter", None)
        params["dfApplied"] = 1
        return self._derive(params)

    def reset_default_filters(self) -> UrlQueryHelper:
        """Return a helper without filters so that default filters apply again."""
        params = _copy_params(self._params)
        params.pop("filter", None)
        params.pop("dfApplied", None)
        return self._derive(params)

    def parse_filter(self, filter_string: str) -> tuple[str, str]:
        """Split a ``field:value`` filter string into its parts."""
        if self.config.parse_filter_callback is None:
            field, _, value = filter_string.partition(":")
            return field, value.strip('"')
        return self.config.parse_filter_callback(filter_string)

    def get_aliases_for_facet_field(self, field: str) -> list[str]:
        if self.config.aliases_for_facet_field_callback is None:
            return [field]
        return list(self.config.aliases_for_facet_field_callback(field))

    def remove_facet(
        self,
        field: str,
        value: str,
        escape: bool = True,
        operator: str = "AND",
        param_array: Mapping[str, Any] | None = None,
    ) -> UrlQueryHelper:
        """Return a helper without the matching facet filter.

        Args:
            field: Facet field.
            value: Facet value.
            escape: Whether ``str()`` of the result HTML-escapes.
            operator: Facet operator (AND, OR, NOT).
            param_array: Parameters to use instead of the current ones.

        Returns:
            New helper; the ``filter`` key is dropped once no filter is left.
        """
        params = _copy_params(self._params if param_array is None else param_array)

        if operator == "NOT":
            field = "-" + field
        elif operator == "OR":
            field = "~" + field
        aliases = self.get_aliases_for_facet_field(field)

        remaining: list[str] = []
        current_filters = params.get("filter")
        if isinstance(current_filters, list):
            for current in current_filters:
                current_field, current_value = self.parse_filter(current)
                if current_field not in aliases or current_value != value:
                    remaining.append(current)
        if remaining:
            params["filter"] = remaining
        else:
            params.pop("filter", None)
        params.pop("page", None)
        return self._derive(params, config=replace(self.config, escape=escape))

    def remove_filter(self, old_filter: str, escape: bool = True) -> UrlQueryHelper:
        """Return a helper without ``old_filter``."""
        field, value = self.parse_filter(old_filter)
        return self.remove_facet(field, value, escape)

    def set_page(self, page: int | str | None, escape: bool = True) -> UrlQueryHelper:
        return self._update_query_string("page", page, 1, escape)

    def set_sort(self, sort: str | None, escape: bool = True) -> UrlQueryHelper:
        return self._update_query_string("sort", sort, self._get_default("sort"), escape, True)

    def set_handler(self, handler: str, escape: bool = True) -> UrlQueryHelper:
        """Return a helper searching another handler (basic queries only)."""
        query = self.query
        if isinstance(query, Query):
            query = query.with_handler(handler)
        return self._derive(self._params, query=query, regenerate=True)

    def set_view_param(self, view: str | None, escape: bool = True) -> UrlQueryHelper:
        # The last view is remembered per session, so an explicit value is
        # always kept here.
        return self._update_query_string("view", view, None, escape)

    def set_limit(self, limit: int | str | None, escape: bool = True) -> UrlQueryHelper:
        return self._update_query_string("limit", limit, self._get_default("limit"), escape, True)

    def set_search_terms(self, lookfor: str, escape: bool = True) -> UrlQueryHelper:
        """Return a helper for a basic search on ``lookfor``."""
        return self._derive(self._params, query=Query(lookfor), regenerate=True)

    def get_params(self, escape: bool = True) -> str:
        """Return the parameters as a ``?``-prefixed query string."""
        return "?" + build_query_string(self._params, escape)

    def as_hidden_fields(self, exclude: Mapping[str, str | re.Pattern[str]] | None = None) -> str:
        """Render the parameters as hidden form inputs.

        Args:
            exclude: Field name to regular expression; matching values are
                left out.

        Returns:
            HTML markup.
        """
        exclude = exclude or {}
        fields: list[str] = []
        for name, value in self._params.items():
            if isinstance(value, list):
                for item in value:
                    if not _excluded(name, item, exclude):
                        fields.append(_hidden_input(f"{name}[]", item))
            elif not _excluded(name, value, exclude):
                fields.append(_hidden_input(name, value))
        return "".join(fields)

    def _update_query_string(
        self,
        field: str,
        value: Any,
        default: Any = None,
        escape: bool = True,
        clear_page: bool = False,
    ) -> UrlQueryHelper:
        params = _copy_params(self._params)
        if value is None or _matches_default(value, default):
            params.pop(field, None)
        else:
            params[field] = value
        if clear_page:
            params.pop("page", None)
        return self._derive(params, config=replace(self.config, escape=escape))


def build_query_string(params: Mapping[str, Any], escape: bool = True) -> str:
    """URL-encode parameters; list values become repeated ``key[]`` pairs.

    Args:
        params: Parameters to encode.
        escape: Whether to HTML-escape the result for embedding in markup.

    Returns:
        Encoded query string without a leading ``?``.
    """
    parts: list[str] = []
    for key, value in params.items():
        if isinstance(value, list):
            for item in value:
                parts.append(f"{quote_plus(key + '[]')}={quote_plus(_as_text(item))}")
        else:
            parts.append(f"{quote_plus(key)}={quote_plus(_as_text(value))}")
    query_string = "&".join(parts)
    return html.escape(query_string) if escape else query_string


def parse_query_string(query_string: str) -> dict[str, Any]:
    """Parse a URL query string into request parameters.

    ``key[]`` pairs are collected into a list stored under ``key``; a repeated
    plain key keeps its last value.
    """
    params: dict[str, Any] = {}
    for key, value in parse_qsl(query_string.lstrip("?"), keep_blank_values=True):
        if key.endswith("[]"):
            existing = params.get(key[:-2])
            if not isinstance(existing, list):
                existing = []
                params[key[:-2]] = existing
            existing.append(value)
        else:
            params[key] = value
    return params


def _copy_params(params: Mapping[str, Any]) -> dict[str, Any]:
    return {key: list(value) if isinstance(value, list) else value for key, value in params.items()}


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else ""
    return str(value)


def _matches_default(value: Any, default: Any) -> bool:
    if default is None:
        # Without a default only the empty string counts as unset; 0 and False are kept.
        return value == ""
    return _as_text(value) == _as_text(default)


def _excluded(field: str, value: Any, exclude: Mapping[str, str | re.Pattern[str]]) -> bool:
    pattern = exclude.get(field)
    return pattern is not None and re.search(pattern, _as_text(value)) is not None


def _hidden_input(name: str, value: Any) -> str:
    return f'<input type="hidden" name="{html.escape(name)}" value="{html.escape(_as_text(value))}" />'
