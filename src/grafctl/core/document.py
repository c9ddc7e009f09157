"""
Path helpers for untyped JSON documents.

Dashboards, panels and targets are kept as the plain ``dict``/``list``
trees that ``json`` decodes them into. These helpers read and write
nested keys without raising on absent keys or unexpected types.

Example:
    >>> panel = {"datasource": {"type": "prometheus"}, "gridPos": {"y": 3}}
    >>> as_str(get_path(panel, "datasource", "type"))
    'prometheus'
    >>> as_int(get_path(panel, "gridPos", "x"))
    0
"""

from __future__ import annotations

from typing import Any

JsonDict = dict[str, Any]


def get_path(node: Any, *keys: str | int, default: Any = None) -> Any:
    """
    Walk ``keys`` down from ``node``.

    String keys index dicts and integer keys index lists. Any miss
    (absent key, out-of-range index, wrong container type) returns
    ``default``.
    """
    current = node
    for key in keys:
        if isinstance(key, int) and isinstance(current, list):
            if -len(current) <= key < len(current):
                current = current[key]
                continue
            return default
        if isinstance(current, dict) and key in current:
            current = current[key]
            continue
        return default
    return current


def set_path(node: JsonDict, *keys: str, value: Any) -> None:
    """
    Set ``value`` at ``keys``, creating intermediate dicts as needed.

    Intermediate values that are not dicts are replaced.

    Raises:
        ValueError: If no key is given
    """
    if not keys:
        raise ValueError("set_path requires at least one key")
    current = node
    for key in keys[:-1]:
        child = current.get(key)
        if not isinstance(child, dict):
            child = {}
            current[key] = child
        current = child
    current[keys[-1]] = value


def delete_path(node: JsonDict, *keys: str) -> bool:
    """Delete the value at ``keys``. Returns True if something was removed."""
    if not keys:
        return False
    parent = get_path(node, *keys[:-1]) if len(keys) > 1 else node
    if isinstance(parent, dict) and keys[-1] in parent:
        del parent[keys[-1]]
        return True
    return False


def as_str(value: Any, default: str = "") -> str:
    """Return ``value`` if it is a string, else ``default``."""
    return value if isinstance(value, str) else default


def as_int(value: Any, default: int = 0) -> int:
    """
    Return ``value`` as an int, else ``default``.

    Integral floats are accepted because JSON numbers may decode either
    way. Booleans are rejected even though ``bool`` subclasses ``int``.
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return default


def as_list(value: Any) -> list[Any]:
    """Return ``value`` if it is a list, else a new empty list."""
    return value if isinstance(value, list) else []


def as_dict(value: Any) -> JsonDict:
    """Return ``value`` if it is a dict, else a new empty dict."""
    return value if isinstance(value, dict) else {}
