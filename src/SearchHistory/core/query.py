from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import Sequence, Union

_OPERATORS = frozenset({"AND", "OR", "NOT"})
_NON_WORD_RE = re.compile(r"\W")


@dataclass(frozen=True, slots=True)
class Query:
    """A single search term bound to a search handler.

    Attributes:
        string: Raw search text, possibly empty for an "all records" search.
        handler: Search handler identifier (e.g. ``AllFields``, ``Title``).
        operator: Optional per-term operator carried by advanced search forms.
    """

    string: str = ""
    handler: str | None = None
    operator: str | None = None

    def with_handler(self, handler: str | None) -> Query:
        """Return a copy of this query using another handler."""
        return replace(self, handler=handler)

    def replace_term(self, old: str, new: str) -> Query:
        """Return a copy with ``old`` replaced by ``new`` in the search text."""
        return replace(self, string=_term_pattern(old).sub(lambda _match: new, self.string))

    def contains_term(self, needle: str) -> bool:
        """Check whether ``needle`` occurs as a whole word in the search text."""
        return re.search(r"\b" + re.escape(needle) + r"\b", self.string) is not None


@dataclass(frozen=True, slots=True, init=False)
class QueryGroup:
    """Boolean combination of queries.

    A group built with operator ``NOT`` is stored as a negated ``OR`` group, so
    the operator of a negated group is always ``OR``.

    Attributes:
        operator: ``AND`` or ``OR``.
        queries: Ordered child queries (leaf queries or nested groups).
        negated: Whether the group as a whole is excluded.
    """

    operator: str
    queries: tuple[AbstractQuery, ...]
    negated: bool

    def __init__(self, operator: str, queries: Sequence[AbstractQuery] = (), negated: bool = False) -> None:
        if operator not in _OPERATORS:
            raise ValueError(f"Unsupported operator: {operator}")
        if operator == "NOT":
            operator = "OR"
            negated = True
        object.__setattr__(self, "operator", operator)
        object.__setattr__(self, "queries", tuple(queries))
        object.__setattr__(self, "negated", bool(negated))

    def is_negated(self) -> bool:
        return self.negated

    def replace_term(self, old: str, new: str) -> QueryGroup:
        """Return a copy with ``old`` replaced by ``new`` in every child."""
        return QueryGroup(
            self.operator,
            [query.replace_term(old, new) for query in self.queries],
            self.negated,
        )

    def contains_term(self, needle: str) -> bool:
        """Check whether any child contains ``needle`` as a whole word."""
        return any(query.contains_term(needle) for query in self.queries)


@dataclass(frozen=True, slots=True)
class WorkKeysQuery:
    """Query for other versions of a record sharing its work keys.

    Attributes:
        id: Identifier of the record whose versions are requested.
        include_self: Whether the record itself belongs to the result.
        keys: Work keys shared by all versions.
    """

    id: str
    include_self: bool = False
    keys: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "keys", tuple(self.keys))

    def replace_term(self, old: str, new: str) -> WorkKeysQuery:
        return self

    def contains_term(self, needle: str) -> bool:
        return False


AbstractQuery = Union[Query, QueryGroup, WorkKeysQuery]


def _term_pattern(term: str) -> re.Pattern[str]:
    """Build the case-insensitive pattern used for term replacement.

    Word boundaries are only usable when the term consists of word characters.
    """
    escaped = re.escape(term)
    if _NON_WORD_RE.search(term):
        return re.compile(escaped, re.IGNORECASE)
    return re.compile(r"\b" + escaped + r"\b", re.IGNORECASE)
