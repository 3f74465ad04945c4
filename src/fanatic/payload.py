"""Path lookups into decoded JSON payloads.

Paths are dotted keys where all-digit segments index into lists, so
``"media.0.url"`` reads ``payload["media"][0]["url"]``. A path that does not
resolve yields an empty value instead of an error.
"""

from __future__ import annotations

from typing import Any, Optional

_MISSING = object()


def get_path(data: Any, path: str, default: Any = None) -> Any:
    """Return the value at ``path`` or ``default`` when it does not resolve."""
    current = data
    for segment in path.split("."):
        if isinstance(current, dict):
            current = current.get(segment, _MISSING)
        elif isinstance(current, list) and segment.isdigit():
            index = int(segment)
            current = current[index] if index < len(current) else _MISSING
        else:
            current = _MISSING
        if current is _MISSING:
            return default
    return current


def get_str(data: Any, path: str) -> str:
    """Return the value at ``path`` as a string, ``""`` when missing or null."""
    value = get_path(data, path)
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return ""
    return str(value)


def get_int(data: Any, path: str) -> Optional[int]:
    """Return the value at ``path`` as an int.

    Missing or null values give 0. Values present but not integral
    (``"abc"``, ``1.5``, ``true``) give None so callers can tell a malformed
    field from an absent one.
    """
    value = get_path(data, path)
    if value is None:
        return 0
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        try:
            return int(text)
        except ValueError:
            return None
    return None
