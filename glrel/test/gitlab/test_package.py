"""Tests for glrel.gitlab.package."""

from __future__ import annotations

import pytest

from glrel.core.result import Err, Ok
from glrel.gitlab.assets import AssetSpec, PackageSpec
from glrel.gitlab.package import (
    FILE_NAME_PATTERN,
    NAME_PATTERN,
    VERSION_PATTERN,
    PackageTarget,
    resolve_package_target,
    validate_format,
)
from glrel.output.console import MockConsole

VARIABLES: dict[str, object] = {"next_release": {"version": "2.0.0", "channel": "beta"}}


@pytest.mark.parametrize("value", ["release", "my-app_1.0", "A.b-C_d"])
def test_name_pattern_accepts(value: str) -> None:
    assert NAME_PATTERN.match(value)


@pytest.mark.parametrize("value", ["", "my app", "app/x", "app@1"])
def test_name_pattern_rejects(value: str) -> None:
    assert not NAME_PATTERN.match(value)


@pytest.mark.parametrize("value", ["1.0", "1.2.3", "1.2.3-beta", "1.2.3-beta.4", "10.20.30-rc_x.1"])
def test_version_pattern_accepts(value: str) -> None:
    assert VERSION_PATTERN.match(value)


@pytest.mark.parametrize("value", ["1", "v1.2.3", "latest", "1.2.3.4.5"])
def test_version_pattern_rejects(value: str) -> None:
    assert not VERSION_PATTERN.match(value)


def test_file_name_pattern() -> None:
    assert FILE_NAME_PATTERN.match("app-1.0.tar.gz")
    assert not FILE_NAME_PATTERN.match("app 1.0.tar.gz")


def test_validate_format_logs_and_fails() -> None:
    console = MockConsole()
    result = validate_format(
        NAME_PATTERN, "bad name", "name", "https://rubular.com/r/x", console=console
    )
    assert isinstance(result, Err)
    assert result.error.code == "EINVALIDASSETPACKAGEPROPERTY"
    assert console.messages == [
        "error: Invalid name format (bad name). Please check the format at https://rubular.com/r/x"
    ]


def test_default_coordinates_use_release_version_and_label() -> None:
    result = resolve_package_target(
        AssetSpec(path="dist/app.zip"),
        version="1.0.0+build/1",
        label="App bundle",
        variables=VARIABLES,
        console=MockConsole(),
    )
    assert result == Ok(
        PackageTarget(name="release", version="1.0.0%2Bbuild%2F1", file_name="App%20bundle")
    )


def test_default_coordinates_fall_back_to_file_name() -> None:
    result = resolve_package_target(
        AssetSpec(path="dist/app.zip"),
        version="1.0.0",
        label=None,
        variables=VARIABLES,
        console=MockConsole(),
    )
    assert isinstance(result, Ok)
    assert result.value.file_name == "app.zip"


def test_explicit_package_is_rendered_and_validated() -> None:
    asset = AssetSpec(
        path="dist/app-2.0.0.tgz",
        package=PackageSpec(name="app", version="${next_release.version}"),
    )
    result = resolve_package_target(
        asset, version="ignored", label="x", variables=VARIABLES, console=MockConsole()
    )
    assert result == Ok(PackageTarget(name="app", version="2.0.0", file_name="app-2.0.0.tgz"))


@pytest.mark.parametrize(
    ("package", "path", "property_name"),
    [
        (PackageSpec(name="my app", version="1.0.0"), "dist/a.zip", "name"),
        (PackageSpec(name="app", version="v1"), "dist/a.zip", "version"),
        (PackageSpec(name="app", version="1.0.0"), "dist/a b.zip", "fileName"),
    ],
)
def test_explicit_package_rejects_bad_property(
    package: PackageSpec, path: str, property_name: str
) -> None:
    console = MockConsole()
    result = resolve_package_target(
        AssetSpec(path=path, package=package),
        version="1.0.0",
        label=None,
        variables=VARIABLES,
        console=console,
    )
    assert isinstance(result, Err)
    assert result.error.code == "EINVALIDASSETPACKAGEPROPERTY"
    assert property_name in result.error.message
    assert console.has_error()


@pytest.mark.parametrize("value", ["1.0.0\n", "1.0.0\nmalicious"])
def test_validate_format_rejects_trailing_newline(value: str) -> None:
    console = MockConsole()
    result = validate_format(
        VERSION_PATTERN, value, "version", "https://rubular.com/r/x", console=console
    )
    assert isinstance(result, Err)
    assert result.error.code == "EINVALIDASSETPACKAGEPROPERTY"
    assert console.has_error()


def test_templated_version_with_newline_is_rejected() -> None:
    result = resolve_package_target(
        AssetSpec(path="app.tgz", package=PackageSpec(name="app", version="${env.VERSION}")),
        version="1.0.0",
        label="App",
        variables={"env": {"VERSION": "1.0.0\n"}},
        console=MockConsole(),
    )
    assert isinstance(result, Err)
    assert result.error.code == "EINVALIDASSETPACKAGEPROPERTY"
