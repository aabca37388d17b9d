"""Placeholder rendering for asset fields.

Supports ``${next_release.version}`` and ``<%= next_release.version %>``.
Lookups are dotted paths into the publish context variables; unknown names
render as an empty string.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

from glrel.core.structured import as_str_dict

_PLACEHOLDER = re.compile(r"\$\{\s*([\w.]+)\s*\}|<%=\s*([\w.]+)\s*%>")


def lookup(variables: Mapping[str, object], dotted: str) -> object | None:
    current: object = variables
    for part in dotted.split("."):
        table = as_str_dict(current)
        if table is None or part not in table:
            return None
        current = table[part]
    return current


def render(template: str, variables: Mapping[str, object]) -> str:
    def _sub(m: re.Match[str]) -> str:
        value = lookup(variables, m.group(1) or m.group(2))
        return "" if value is None else str(value)

    return _PLACEHOLDER.sub(_sub, template)


def render_opt(template: str | None, variables: Mapping[str, object]) -> str | None:
    """Render ``template`` unless it is unset or empty."""
    if not template:
        return None
    return render(template, variables)
