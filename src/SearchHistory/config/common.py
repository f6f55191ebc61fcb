from __future__ import annotations

"""Shared helpers for configuration loading and validation.

Every error names the dotted key path of the offending value.
"""

from typing import Any, Mapping


def get_section(raw: Mapping[str, Any], key: str, *, required: bool) -> Mapping[str, Any]:
    """Return a mapping section from a config mapping.

    Args:
        raw: Parent configuration mapping.
        key: Section name, or dotted key path for nested sections.
        required: Whether the section must exist.

    Returns:
        Section mapping, or an empty mapping for optional missing sections.

    Raises:
        ValueError: If the section is required but missing.
        TypeError: If the section is not a mapping.
    """
    section = raw.get(key.rsplit(".", 1)[-1])
    if section is None:
        if required:
            raise ValueError(f"Missing required config: {key}")
        return {}
    if not isinstance(section, Mapping):
        raise TypeError(f"{key} must be an object")
    return section


def get_required_value(section: Mapping[str, Any], field: str, config_key: str) -> Any:
    """Return a required field value from a section.

    Raises:
        ValueError: If the field is missing.
    """
    if field not in section:
        raise ValueError(f"Missing required config: {config_key}")
    return section[field]


def expect_str(value: Any, config_key: str) -> str:
    """Validate and return a string value."""
    if not isinstance(value, str):
        raise TypeError(f"{config_key} must be a string")
    return value


def expect_optional_str(value: Any, config_key: str) -> str | None:
    """Validate a string value that may be null; blank strings become None."""
    if value is None:
        return None
    return expect_str(value, config_key).strip() or None


def expect_bool(value: Any, config_key: str) -> bool:
    """Validate and return a boolean value."""
    if not isinstance(value, bool):
        raise TypeError(f"{config_key} must be a boolean")
    return value


def expect_int(value: Any, config_key: str) -> int:
    """Validate and return an integer value (excluding bool)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{config_key} must be an integer")
    return value


def expect_str_list(value: Any, config_key: str) -> list[str]:
    """Validate a list of strings."""
    if not isinstance(value, list):
        raise TypeError(f"{config_key} must be a list")
    out: list[str] = []
    for idx, item in enumerate(value):
        if not isinstance(item, str):
            raise TypeError(f"{config_key}[{idx}] must be a string")
        out.append(item)
    return out


def expect_int_list(value: Any, config_key: str) -> list[int]:
    """Validate a list of integers."""
    if not isinstance(value, list):
        raise TypeError(f"{config_key} must be a list")
    return [expect_int(item, f"{config_key}[{idx}]") for idx, item in enumerate(value)]


def expect_str_mapping(value: Any, config_key: str) -> dict[str, str]:
    """Validate a mapping of strings to strings."""
    if not isinstance(value, Mapping):
        raise TypeError(f"{config_key} must be an object")
    out: dict[str, str] = {}
    for key, item in value.items():
        out[expect_str(key, f"{config_key} keys")] = expect_str(item, f"{config_key}.{key}")
    return out
