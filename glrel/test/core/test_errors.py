"""Tests for glrel.core.errors."""

from __future__ import annotations

from glrel.core.errors import RELEASE_NAME, ErrorCode, PluginError, get_error


def test_release_name() -> None:
    assert RELEASE_NAME == "GitLab release"


def test_error_code_values_are_stable() -> None:
    assert int(ErrorCode.OK) == 0
    assert int(ErrorCode.USER_ERROR) == 1
    assert int(ErrorCode.ENV_ERROR) == 2
    assert int(ErrorCode.NETWORK_ERROR) == 4
    assert int(ErrorCode.IO_ERROR) == 5
    assert str(ErrorCode.NETWORK_ERROR) == "network error"
    assert ErrorCode.OK.is_success


def test_package_property_error_carries_property() -> None:
    err = get_error(
        "EINVALIDASSETPACKAGEPROPERTY",
        property_name="version",
        property_value="v1",
        verify_link="https://rubular.com/r/TuBOM7KNCkpW0M",
    )
    assert err.code == "EINVALIDASSETPACKAGEPROPERTY"
    assert "version" in err.message
    assert "'v1'" in err.message
    assert err.details is not None
    assert "https://rubular.com/r/TuBOM7KNCkpW0M" in err.details
    assert err.exit_code == ErrorCode.USER_ERROR


def test_repo_errors_mention_repo() -> None:
    assert "group/project" in get_error("EMISSINGREPO", repo_id="group/project").message
    assert "group/project" in get_error("EGLNOPUSHPERMISSION", repo_id="group/project").message
    assert get_error("ENOGLTOKEN", repository_url="x").exit_code == ErrorCode.ENV_ERROR


def test_upload_error_is_network_error() -> None:
    err = get_error("EUPLOADFAILED", path="dist/a.zip", reason="HTTP 500: boom")
    assert err.exit_code == ErrorCode.NETWORK_ERROR
    assert err.details == "HTTP 500: boom"


def test_pretty() -> None:
    assert PluginError("EHTTP", "failed").pretty() == "failed (EHTTP)"
    assert PluginError("EHTTP", "failed", "timeout").pretty() == "failed (EHTTP: timeout)"
