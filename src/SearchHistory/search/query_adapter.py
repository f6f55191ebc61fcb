"""Conversion between live query graphs and their compact stored form.

The minified form uses one-letter keys to keep saved searches small:

- ``l``: search string (or work id), ``i``: handler (or include-self flag)
- ``f``: handler of a term inside a group, ``b``: boolean operator of its group
- ``o``: per-term operator, ``j``: operator joining the top-level groups
- ``g``: terms of a group, ``k``: work keys
- ``s``: shape tag (``b`` basic, ``a`` advanced, ``w`` work keys)

Records written by older releases may lack the ``s`` tag; ``deminify`` falls
back on key presence for those.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import Any, Mapping, Sequence

from SearchHistory.core.query import AbstractQuery, Query, QueryGroup, WorkKeysQuery

_LOOKFOR_GROUP_RE = re.compile(r"^lookfor(\d+)$")
_OPERATORS = ("AND", "OR", "NOT")


def minify(query: AbstractQuery, top_level: bool = True) -> Any:
    """Compress a query graph into its array form.

    Args:
        query: Query to compress.
        top_level: Whether ``query`` is the outermost node.

    Returns:
        A list of term mappings, or a single mapping for work-keys queries.

    Raises:
        ValueError: If the group is empty or nested deeper than this format
            supports.
    """
    if isinstance(query, Query):
        return [{"l": query.string, "i": query.handler, "s": "b"}]
    if isinstance(query, WorkKeysQuery):
        return {"l": query.id, "i": query.include_self, "k": list(query.keys), "s": "w"}
    if not isinstance(query, QueryGroup):
        raise ValueError(f"Not sure how to minify {type(query).__name__}")

    operator = "NOT" if query.is_negated() else query.operator
    if top_level and not query.queries:
        raise ValueError("Not sure how to minify an empty query group")
    minified: list[dict[str, Any]] = []
    for current in query.queries:
        if top_level and isinstance(current, Query):
            # Leaf of a single flat group: a term tagged as advanced.
            leaf: dict[str, Any] = {"f": current.handler, "l": current.string, "j": operator, "s": "a"}
            if current.operator is not None:
                leaf["o"] = current.operator
            minified.append(leaf)
            continue
        if top_level and not isinstance(current, QueryGroup):
            raise ValueError(f"Not sure how to minify {type(current).__name__} inside a query group")
        if top_level:
            minified.append({"g": minify(current, False), "j": operator, "s": "a"})
            continue
        if not isinstance(current, Query):
            raise ValueError("Not sure how to minify this query: groups nested too deeply")
        term: dict[str, Any] = {"f": current.handler, "l": current.string, "b": operator}
        if current.operator is not None:
            # Search forms may omit the operator of the first term only; keep
            # the operator list aligned with the term list.
            if minified and "f" in minified[0]:
                minified[0].setdefault("o", "")
            term["o"] = current.operator
        minified.append(term)
    return minified


def deminify(search: Any) -> AbstractQuery:
    """Rebuild a query graph from its array form.

    Args:
        search: Output of :func:`minify`, or a legacy record without shape tags.

    Returns:
        The reconstructed query.

    Raises:
        ValueError: If ``search`` has none of the known shapes.
    """
    if isinstance(search, Mapping):
        shape = search.get("s")
        if shape == "w":
            return WorkKeysQuery(search["l"], bool(search.get("i", False)), tuple(search.get("k") or ()))
        if shape == "b" or "l" in search:
            handler = search["i"] if search.get("i") is not None else search.get("f")
            return Query(search["l"], handler, search.get("o"))
        if "g" in search:
            terms = search["g"]
            if not terms or not isinstance(terms[0], Mapping) or "b" not in terms[0]:
                raise ValueError("Not sure how to deminify a query group without terms")
            return QueryGroup(terms[0]["b"], [deminify(item) for item in terms])
        raise ValueError(f"Not sure how to deminify {dict(search)!r}")

    if not isinstance(search, Sequence) or isinstance(search, str) or not search:
        raise ValueError(f"Not sure how to deminify {search!r}")
    first = search[0]
    if not isinstance(first, Mapping):
        raise ValueError(f"Not sure how to deminify {first!r}")
    if "j" in first:
        return QueryGroup(first["j"], [deminify(item) for item in search])
    if "l" not in first:
        raise ValueError(f"Not sure how to deminify {dict(first)!r}")
    return Query(first["l"], first.get("i"))


def from_request(request: Mapping[str, Any], default_handler: str | None) -> AbstractQuery:
    """Build a query graph from HTTP request parameters.

    Args:
        request: Request parameters; values are strings or lists of strings.
            Bracketed array keys such as ``lookfor0[]`` are accepted.
        default_handler: Handler used for terms without an explicit type.

    Returns:
        A work-keys query for "versions" requests, an advanced query group when
        ``lookfor<N>`` parameters are present, else an empty basic query.
    """
    params = normalize_request(request)

    if params.get("search") == "versions" or ("id" in params and "keys" in params):
        record_id = _first(params.get("id"))
        if record_id:
            return WorkKeysQuery(record_id, False, _as_keys(params.get("keys")))

    groups: list[QueryGroup] = []
    for key, lookfor in params.items():
        match = _LOOKFOR_GROUP_RE.match(key)
        if match is None:
            continue
        group_id = match.group(1)
        types = _as_list(params.get(f"type{group_id}"))
        ops = _as_list(params.get(f"op{group_id}"))
        bools = _as_list(params.get(f"bool{group_id}"))
        joiner = bools[0] if bools and bools[0] in _OPERATORS else "AND"

        terms: list[AbstractQuery] = []
        for index, value in enumerate(_as_list(lookfor)):
            if value == "":
                continue
            handler = types[index] if index < len(types) and types[index] else default_handler
            operator = ops[index] if index < len(ops) and ops[index] else None
            terms.append(Query(value, handler, operator))
        if terms:
            groups.append(QueryGroup(joiner, terms))

    if groups:
        join = _first(params.get("join"))
        return QueryGroup(join if join in _OPERATORS else "AND", groups)
    return Query()


def display(
    query: AbstractQuery,
    translate: Callable[[str], str],
    show_name: Callable[[str | None], str],
) -> str:
    """Render a query for on-screen display.

    Args:
        query: Query to render.
        translate: Translator for operators and labels.
        show_name: Maps a handler identifier to a human-readable name.

    Returns:
        Display string.

    Raises:
        ValueError: If an advanced query has an unexpected shape.
    """
    if isinstance(query, Query):
        return query.string
    if isinstance(query, WorkKeysQuery):
        return f"{translate('Versions')} - {query.id}"
    return _display_advanced(query, translate, show_name)


def _display_advanced(
    query: QueryGroup,
    translate: Callable[[str], str],
    show_name: Callable[[str | None], str],
) -> str:
    groups: list[str] = []
    excludes: list[str] = []
    for search in query.queries:
        if isinstance(search, Query):
            # Terms of a flat group each render as a group of their own.
            text = f"{show_name(search.handler)}:{search.string}"
            (excludes if query.is_negated() else groups).append(text)
            continue
        if not isinstance(search, QueryGroup):
            raise ValueError(f"Unexpected {type(search).__name__}")
        rendered: list[str] = []
        for term in search.queries:
            if not isinstance(term, Query):
                raise ValueError(f"Unexpected {type(term).__name__}")
            rendered.append(f"{show_name(term.handler)}:{term.string}")
        text = f" {translate(search.operator)} ".join(rendered)
        if search.is_negated():
            excludes.append(text)
        else:
            groups.append(text)

    operator = translate(query.operator)
    output = "(" + f") {operator} (".join(groups) + ")"
    if excludes:
        output += f" {translate('NOT')} ((" + f") {translate('OR')} (".join(excludes) + "))"
    return output


def normalize_request(request: Mapping[str, Any]) -> dict[str, Any]:
    """Normalize ``key[]`` request keys to ``key``, keeping first-seen order."""
    params: dict[str, Any] = {}
    for key, value in request.items():
        name = key[:-2] if key.endswith("[]") else key
        if name in params:
            params[name] = _as_list(params[name]) + _as_list(value)
        else:
            params[name] = value
    return params


def _as_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value]
    return [str(value)]


def _first(value: Any) -> str | None:
    values = _as_list(value)
    return values[0] if values else None


def _as_keys(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        return tuple(value.split())
    return tuple(item for item in _as_list(value) if item)
