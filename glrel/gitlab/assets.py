"""Asset definitions and glob expansion.

An asset is either a glob string or a table:

    [[assets]]
    path = ["dist/*.whl", "!dist/*-dev*.whl"]
    label = "Wheel"
    type = "package"
    filepath = "/binaries/wheel"
    target = "generic_package"   # or "project_upload" (default)
    status = "hidden"            # generic packages only
    package = { name = "app", version = "${next_release.version}" }

    [[assets]]
    url = "https://example.com/docs/${next_release.version}"
    label = "Documentation"
"""

from __future__ import annotations

import glob as globlib
import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path

from glrel.core.errors import PluginError, get_error
from glrel.core.result import Err, Ok, Result
from glrel.core.structured import (
    as_str_dict,
    get_str,
    get_table,
    is_non_empty_str,
    is_str_or_str_list,
)
from glrel.core.template import render

GENERIC_PACKAGE_TARGET = "generic_package"


@dataclass(frozen=True, slots=True)
class PackageSpec:
    """Explicit generic package coordinates (templated)."""

    name: str
    version: str


@dataclass(frozen=True, slots=True)
class AssetSpec:
    path: str | tuple[str, ...] | None = None
    url: str | None = None
    label: str | None = None
    type: str | None = None
    filepath: str | None = None
    target: str | None = None
    status: str | None = None
    package: PackageSpec | None = None
    # True when the asset was given as a bare glob string.
    plain: bool = False

    @property
    def patterns(self) -> tuple[str, ...]:
        if self.path is None:
            return ()
        if isinstance(self.path, str):
            return (self.path,)
        return self.path

    @property
    def file_path(self) -> str:
        """Single path of an expanded asset."""
        patterns = self.patterns
        return patterns[0] if patterns else ""


def is_valid_asset(value: object) -> bool:
    if is_str_or_str_list(value):
        return True
    table = as_str_dict(value)
    if table is None:
        return False
    return is_non_empty_str(table.get("url")) or is_str_or_str_list(table.get("path"))


def _parse_one(value: object) -> AssetSpec | None:
    if isinstance(value, str):
        return AssetSpec(path=value, plain=True)
    if isinstance(value, list):
        return AssetSpec(path=tuple(str(v) for v in value), plain=True)

    table = as_str_dict(value)
    if table is None:
        return None

    raw_path = table.get("path")
    path: str | tuple[str, ...] | None
    if isinstance(raw_path, list):
        path = tuple(str(v) for v in raw_path)
    elif isinstance(raw_path, str):
        path = raw_path
    else:
        path = None

    package: PackageSpec | None = None
    pkg = get_table(table, "package")
    if pkg is not None:
        package = PackageSpec(
            name=get_str(pkg, "name") or "",
            version=get_str(pkg, "version") or "",
        )

    return AssetSpec(
        path=path,
        url=get_str(table, "url"),
        label=get_str(table, "label"),
        type=get_str(table, "type"),
        filepath=get_str(table, "filepath"),
        target=get_str(table, "target"),
        status=get_str(table, "status"),
        package=package,
    )


def parse_assets(values: list[object]) -> Result[list[AssetSpec], PluginError]:
    """Turn raw option values into asset specs."""
    specs: list[AssetSpec] = []
    for value in values:
        if not is_valid_asset(value):
            return Err(get_error("EINVALIDASSETS", assets=values))
        spec = _parse_one(value)
        if spec is None:
            return Err(get_error("EINVALIDASSETS", assets=values))
        specs.append(spec)
    return Ok(specs)


def _expand_pattern(cwd: Path, pattern: str) -> list[str]:
    # A plain directory stands for every file below it.
    if not globlib.has_magic(pattern) and (cwd / pattern).is_dir():
        base = pattern.rstrip("/")
        matches = globlib.glob(f"{base}/**/*", root_dir=cwd, recursive=True, include_hidden=True)
        return sorted(m.replace(os.sep, "/") for m in matches if (cwd / m).is_file())
    matches = globlib.glob(pattern, root_dir=cwd, recursive=True, include_hidden=True)
    return sorted(m.replace(os.sep, "/") for m in matches)


def expand_globs(cwd: Path, patterns: tuple[str, ...]) -> list[str]:
    """Match ``patterns`` relative to ``cwd``; ``!pattern`` entries exclude."""
    positive = [p for p in patterns if not p.startswith("!")]
    negative = [p[1:] for p in patterns if p.startswith("!")]

    excluded: set[str] = set()
    for pattern in negative:
        excluded.update(_expand_pattern(cwd, pattern))

    out: list[str] = []
    seen: set[str] = set()
    for pattern in positive:
        for match in _expand_pattern(cwd, pattern):
            if match in excluded or match in seen:
                continue
            seen.add(match)
            out.append(match)
    return out


def _resolved(cwd: Path, path: str) -> str:
    return os.path.normpath(os.path.join(cwd, path))


def render_patterns(spec: AssetSpec, variables: Mapping[str, object]) -> tuple[str, ...]:
    """Resolve placeholders in every path pattern of ``spec``."""
    return tuple(render(p, variables) for p in spec.patterns)


def glob_assets(
    cwd: Path,
    specs: list[AssetSpec],
    variables: Mapping[str, object] | None = None,
) -> list[AssetSpec]:
    """Expand path globs into one spec per file.

    Path patterns are rendered with ``variables`` first. Unmatched
    definitions are kept with their rendered path so that the publisher
    reports them as missing.
    """
    expanded: list[AssetSpec] = []
    for spec in specs:
        patterns = render_patterns(spec, variables) if variables is not None else spec.patterns
        if not patterns:
            continue
        # A lone negation would match almost everything.
        if len(patterns) == 1 and patterns[0].startswith("!"):
            continue

        matches = expand_globs(cwd, patterns)
        if spec.plain:
            found = matches or [p for p in patterns if not p.startswith("!")]
            expanded.extend(AssetSpec(path=m, plain=True) for m in found)
        elif len(matches) > 1:
            expanded.extend(replace(spec, path=m, label=os.path.basename(m)) for m in matches)
        else:
            expanded.append(replace(spec, path=matches[0] if matches else patterns[0]))

    unique: list[AssetSpec] = []
    seen: set[str] = set()
    for spec in expanded:
        key = _resolved(cwd, spec.file_path)
        if key in seen:
            continue
        seen.add(key)
        unique.append(spec)
    return unique
