"""
Helpers shared by check implementations.

Pods arrive as already-parsed mappings (YAML/JSON or serialized API
objects). Absent and malformed nested objects are read as "not set", so
the accessors here never raise.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

WINDOWS = "windows"


def pluralize(singular: str, plural: str, count: int) -> str:
    """Pick the singular or plural form for count."""
    if count == 1:
        return singular
    return plural


def join_quote(items: Iterable[Any]) -> str:
    """Render items as "a", "b", "c"."""
    return ", ".join(f'"{item}"' for item in items)


def mapping(obj: Any, key: str) -> Mapping[str, Any] | None:
    """
    Get a nested mapping.

    Returns:
        The value at key if it is a mapping, otherwise None
    """
    if not isinstance(obj, Mapping):
        return None
    value = obj.get(key)
    if isinstance(value, Mapping):
        return value
    return None


def sequence(obj: Any, key: str) -> list[Any]:
    """
    Get a nested list.

    Returns:
        The value at key if it is a list, otherwise an empty list
    """
    if not isinstance(obj, Mapping):
        return []
    value = obj.get(key)
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def scalar(obj: Any, key: str) -> Any:
    """Get a scalar from a mapping, None when absent."""
    if not isinstance(obj, Mapping):
        return None
    return obj.get(key)


def security_context(obj: Any) -> Mapping[str, Any] | None:
    """Get the securityContext of a pod spec or container."""
    return mapping(obj, "securityContext")


def container_name(container: Mapping[str, Any]) -> str:
    name = container.get("name")
    return "" if name is None else str(name)


def volume_name(volume: Mapping[str, Any]) -> str:
    name = volume.get("name")
    return "" if name is None else str(name)


def is_windows(spec: Mapping[str, Any] | None) -> bool:
    """True when spec.os.name is windows."""
    return scalar(mapping(spec, "os"), "name") == WINDOWS


def containers_label(names: list[str]) -> str:
    """Render container names as 'container "a"' or 'containers "a", "b"'."""
    return f"{pluralize('container', 'containers', len(names))} {join_quote(names)}"
