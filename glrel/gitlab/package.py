"""Generic package coordinates and their format checks."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass

from glrel.core.errors import PluginError, get_error
from glrel.core.result import Err, Ok, Result
from glrel.core.template import render
from glrel.gitlab.assets import AssetSpec
from glrel.gitlab.urls import encode_component
from glrel.output.console import ConsoleProtocol

DEFAULT_PACKAGE_NAME = "release"

NAME_PATTERN = re.compile(r"^([a-zA-Z0-9\.\-_])+$")
VERSION_PATTERN = re.compile(r"^(\d+)(.\d+){1,2}(-([a-zA-Z_\-])+)?(.[0-9]+)?$")
FILE_NAME_PATTERN = re.compile(r"^([a-zA-Z0-9\.\-_])+$")

NAME_VERIFY_LINK = "https://rubular.com/r/5JSp7wklAnpdJS"
VERSION_VERIFY_LINK = "https://rubular.com/r/TuBOM7KNCkpW0M"
FILE_NAME_VERIFY_LINK = "https://rubular.com/r/JMdtYW8wczUHxj"


@dataclass(frozen=True, slots=True)
class PackageTarget:
    name: str
    version: str
    file_name: str


def validate_format(
    pattern: re.Pattern[str],
    value: str,
    name: str,
    verify_link: str,
    *,
    console: ConsoleProtocol,
) -> Result[None, PluginError]:
    if pattern.fullmatch(value):
        return Ok(None)
    console.error(f"Invalid {name} format ({value}). Please check the format at {verify_link}")
    return Err(
        get_error(
            "EINVALIDASSETPACKAGEPROPERTY",
            property_name=name,
            property_value=value,
            verify_link=verify_link,
        )
    )


def resolve_package_target(
    asset: AssetSpec,
    *,
    version: str,
    label: str | None,
    variables: Mapping[str, object],
    console: ConsoleProtocol,
) -> Result[PackageTarget, PluginError]:
    """Decide where a generic package file is uploaded.

    Without a ``package`` table the file goes to ``release/<version>/<label>``
    (falling back to the file name when there is no label). With one, name and
    version are rendered and all three coordinates are checked.
    """
    file_base = os.path.basename(asset.file_path)
    if asset.package is None:
        return Ok(
            PackageTarget(
                name=DEFAULT_PACKAGE_NAME,
                version=encode_component(version),
                file_name=encode_component(label or file_base),
            )
        )

    target = PackageTarget(
        name=render(asset.package.name, variables),
        version=render(asset.package.version, variables),
        file_name=file_base,
    )
    checks = (
        (NAME_PATTERN, target.name, "name", NAME_VERIFY_LINK),
        (VERSION_PATTERN, target.version, "version", VERSION_VERIFY_LINK),
        (FILE_NAME_PATTERN, target.file_name, "fileName", FILE_NAME_VERIFY_LINK),
    )
    for pattern, value, name, link in checks:
        ok = validate_format(pattern, value, name, link, console=console)
        if isinstance(ok, Err):
            return ok
    return Ok(target)
