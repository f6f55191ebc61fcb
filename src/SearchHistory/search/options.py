from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Sequence


@dataclass(frozen=True, slots=True)
class SearchOptions:
    """Static settings of one search class (one search backend family).

    Attributes:
        search_class_id: Identifier used to store and rebuild searches.
        default_handler: Handler applied to terms without an explicit type.
        default_sort: Sort used when none (or an invalid one) is requested.
        default_limit: Page size used when none is requested.
        default_view: Result view used when none is requested.
        sort_options: Accepted sort values.
        limit_options: Accepted page sizes.
        view_options: Accepted result views.
        handlers: Handler identifier to display label.
        facet_aliases: Facet field to the other names it is known by.
        basic_search_param: URL parameter carrying a basic search.
    """

    search_class_id: str
    default_handler: str = "AllFields"
    default_sort: str = "relevance"
    default_limit: int = 20
    default_view: str = "list"
    sort_options: Sequence[str] = ("relevance",)
    limit_options: Sequence[int] = (20,)
    view_options: Sequence[str] = ("list",)
    handlers: Mapping[str, str] = field(default_factory=dict)
    facet_aliases: Mapping[str, Sequence[str]] = field(default_factory=dict)
    basic_search_param: str = "lookfor"

    def get_human_readable_field_name(self, handler: str | None) -> str:
        if handler is None:
            return ""
        return self.handlers.get(handler, handler)
