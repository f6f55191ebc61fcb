"""Search domain configuration: the search classes and their options."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from SearchHistory.config.common import (
    expect_int,
    expect_int_list,
    expect_str,
    expect_str_list,
    expect_str_mapping,
    get_required_value,
    get_section,
)
from SearchHistory.search.options import SearchOptions


@dataclass(frozen=True, slots=True)
class SearchConfig:
    """Store validated search classes.

    Attributes:
        default_class: Search class used when a caller names none.
        backends: Options of every configured search class, in config order.
    """

    default_class: str
    backends: tuple[SearchOptions, ...]

    def get_backend(self, search_class_id: str) -> SearchOptions | None:
        for options in self.backends:
            if options.search_class_id == search_class_id:
                return options
        return None


def load_search(raw: Mapping[str, Any]) -> SearchConfig:
    """Load search domain config from raw mapping.

    Args:
        raw: Root configuration mapping.

    Returns:
        Parsed search configuration.

    Raises:
        TypeError: If config types are invalid.
        ValueError: If required keys are missing.
    """
    section = get_section(raw, "search", required=True)
    backends_section = get_section(section, "search.backends", required=True)
    backends = tuple(
        _parse_backend(expect_str(class_id, "search.backends keys"), value, f"search.backends.{class_id}")
        for class_id, value in backends_section.items()
    )
    return SearchConfig(
        default_class=expect_str(
            get_required_value(section, "default_class", "search.default_class"),
            "search.default_class",
        ),
        backends=backends,
    )


def check_search(config: SearchConfig) -> None:
    """Validate search domain constraints.

    Raises:
        ValueError: If values violate search constraints.
    """
    if not config.backends:
        raise ValueError("search.backends must include at least one search class")
    if config.get_backend(config.default_class) is None:
        raise ValueError(f"search.default_class is not a configured backend: {config.default_class}")
    for options in config.backends:
        key = f"search.backends.{options.search_class_id}"
        if options.default_limit <= 0:
            raise ValueError(f"{key}.default_limit must be positive")
        if options.default_limit not in options.limit_options:
            raise ValueError(f"{key}.limit_options must include default_limit")
        if options.default_sort not in options.sort_options:
            raise ValueError(f"{key}.sort_options must include default_sort")
        if options.default_view not in options.view_options:
            raise ValueError(f"{key}.view_options must include default_view")
        if not options.basic_search_param.strip():
            raise ValueError(f"{key}.basic_search_param must not be empty")


def _parse_backend(search_class_id: str, value: Any, config_key: str) -> SearchOptions:
    """Parse the options of one search class.

    Args:
        search_class_id: Key of the backend under ``search.backends``.
        value: Backend mapping.
        config_key: Full key path used in error messages.

    Returns:
        Parsed options.

    Raises:
        TypeError: If the backend shape or types are invalid.
        ValueError: If required keys are missing.
    """
    if not isinstance(value, Mapping):
        raise TypeError(f"{config_key} must be an object")

    def required(field: str) -> Any:
        return get_required_value(value, field, f"{config_key}.{field}")

    default_sort = expect_str(required("default_sort"), f"{config_key}.default_sort")
    default_limit = expect_int(required("default_limit"), f"{config_key}.default_limit")
    default_view = expect_str(value.get("default_view", "list"), f"{config_key}.default_view")
    return SearchOptions(
        search_class_id=search_class_id,
        default_handler=expect_str(required("default_handler"), f"{config_key}.default_handler"),
        default_sort=default_sort,
        default_limit=default_limit,
        default_view=default_view,
        sort_options=tuple(expect_str_list(value.get("sort_options", [default_sort]), f"{config_key}.sort_options")),
        limit_options=tuple(
            expect_int_list(value.get("limit_options", [default_limit]), f"{config_key}.limit_options")
        ),
        view_options=tuple(expect_str_list(value.get("view_options", [default_view]), f"{config_key}.view_options")),
        handlers=expect_str_mapping(value.get("handlers", {}), f"{config_key}.handlers"),
        facet_aliases=_parse_aliases(value.get("facet_aliases", {}), f"{config_key}.facet_aliases"),
        basic_search_param=expect_str(value.get("basic_search_param", "lookfor"), f"{config_key}.basic_search_param"),
    )


def _parse_aliases(value: Any, config_key: str) -> dict[str, tuple[str, ...]]:
    if not isinstance(value, Mapping):
        raise TypeError(f"{config_key} must be an object")
    return {
        expect_str(field, f"{config_key} keys"): tuple(expect_str_list(aliases, f"{config_key}.{field}"))
        for field, aliases in value.items()
    }
