"""Narrowing helpers for untyped data.

Plugin options arrive from TOML and API responses arrive as JSON; both are
plain ``object`` trees until validated here.
"""

from __future__ import annotations

from typing import Mapping, TypeGuard, cast

StrDict = dict[str, object]
ObjList = list[object]


def is_str_dict(obj: object) -> TypeGuard[StrDict]:
    if not isinstance(obj, dict):
        return False
    d = cast(dict[object, object], obj)
    return all(isinstance(k, str) for k in d.keys())


def as_str_dict(obj: object) -> StrDict | None:
    """Return obj as a string-keyed dict, or None."""
    if is_str_dict(obj):
        return obj
    return None


def as_obj_list(obj: object) -> ObjList | None:
    """Return obj as a list, or None."""
    if isinstance(obj, list):
        return cast(ObjList, obj)
    return None


def is_non_empty_str(obj: object) -> TypeGuard[str]:
    return isinstance(obj, str) and bool(obj.strip())


def is_str_or_str_list(obj: object) -> bool:
    """True for a non-empty string or a list made only of non-empty strings."""
    if is_non_empty_str(obj):
        return True
    items = as_obj_list(obj)
    return items is not None and all(is_non_empty_str(item) for item in items)


def get_str(table: Mapping[str, object], key: str) -> str | None:
    """Get a string value, stripped.

    Returns None if missing, not a str, or blank.
    """
    value = table.get(key)
    if not isinstance(value, str):
        return None
    s = value.strip()
    return s or None


def get_int(table: Mapping[str, object], key: str) -> int | None:
    value = table.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def get_table(table: Mapping[str, object], key: str) -> StrDict | None:
    """Get a nested string-keyed table."""
    return as_str_dict(table.get(key))
