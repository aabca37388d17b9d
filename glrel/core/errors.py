"""Error codes and the plugin error catalog.

``ErrorCode`` values are process exit codes for the ``glrel`` entry point.
``PluginError`` is the payload carried by every ``Err`` produced while
verifying or publishing a release.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Literal

__all__ = [
    "ErrorCode",
    "PluginError",
    "PluginErrorCode",
    "RELEASE_NAME",
    "get_error",
]

RELEASE_NAME = "GitLab release"


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    - 0: Success
    - 1: User error (invalid plugin options, bad asset definitions)
    - 2: Environment error (missing token, unknown repository, permissions)
    - 4: Network error (upload or release request failed)
    - 5: I/O error (unreadable options file)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK


PluginErrorCode = Literal[
    "EINVALIDASSETS",
    "EINVALIDMILESTONES",
    "EINVALIDGITLABURL",
    "ENOGLTOKEN",
    "EINVALIDGLTOKEN",
    "EMISSINGREPO",
    "EGLNOPUSHPERMISSION",
    "EGLNOPULLPERMISSION",
    "EINVALIDASSETPACKAGEPROPERTY",
    "EUPLOADFAILED",
    "ERELEASEFAILED",
    "EHTTP",
    "ENORELEASE",
]


@dataclass(frozen=True, slots=True)
class PluginError:
    code: PluginErrorCode
    message: str
    details: str | None = None

    def pretty(self) -> str:
        if self.details:
            return f"{self.message} ({self.code}: {self.details})"
        return f"{self.message} ({self.code})"

    @property
    def exit_code(self) -> ErrorCode:
        """Exit status used when this error ends a CLI command."""
        return _EXIT_CODES.get(self.code, ErrorCode.USER_ERROR)


_EXIT_CODES: dict[str, ErrorCode] = {
    "EINVALIDASSETS": ErrorCode.USER_ERROR,
    "EINVALIDMILESTONES": ErrorCode.USER_ERROR,
    "EINVALIDASSETPACKAGEPROPERTY": ErrorCode.USER_ERROR,
    "EINVALIDGITLABURL": ErrorCode.ENV_ERROR,
    "ENOGLTOKEN": ErrorCode.ENV_ERROR,
    "EINVALIDGLTOKEN": ErrorCode.ENV_ERROR,
    "EMISSINGREPO": ErrorCode.ENV_ERROR,
    "EGLNOPUSHPERMISSION": ErrorCode.ENV_ERROR,
    "EGLNOPULLPERMISSION": ErrorCode.ENV_ERROR,
    "EUPLOADFAILED": ErrorCode.NETWORK_ERROR,
    "ERELEASEFAILED": ErrorCode.NETWORK_ERROR,
    "EHTTP": ErrorCode.NETWORK_ERROR,
    "ENORELEASE": ErrorCode.USER_ERROR,
}


def _ctx(ctx: dict[str, object], key: str) -> str:
    value = ctx.get(key)
    return "" if value is None else str(value)


def get_error(code: PluginErrorCode, **ctx: object) -> PluginError:
    """Build a catalog error.

    Args:
        code: Catalog code.
        **ctx: Values interpolated into the message (repo_id, assets, ...).
    """
    match code:
        case "EINVALIDASSETS":
            return PluginError(
                code,
                "Invalid `assets` option",
                "The `assets` option must be a list of globs, or of tables with a `path` "
                f"or `url`. Got: {_ctx(ctx, 'assets')!r}",
            )
        case "EINVALIDMILESTONES":
            return PluginError(
                code,
                "Invalid `milestones` option",
                "The `milestones` option must be a list of milestone titles. "
                f"Got: {_ctx(ctx, 'milestones')!r}",
            )
        case "EINVALIDGITLABURL":
            return PluginError(
                code,
                "The repository path could not be determined",
                "Check that the repository URL points to the configured GitLab url "
                f"({_ctx(ctx, 'gitlab_url')}). Repository URL: {_ctx(ctx, 'repository_url')}",
            )
        case "ENOGLTOKEN":
            return PluginError(
                code,
                "No GitLab token specified",
                "Set GL_TOKEN or GITLAB_TOKEN to a personal access token with the "
                f"`api` scope for {_ctx(ctx, 'repository_url')}",
            )
        case "EINVALIDGLTOKEN":
            return PluginError(
                code,
                "Invalid GitLab token",
                f"The token is not valid for project {_ctx(ctx, 'repo_id')}",
            )
        case "EMISSINGREPO":
            return PluginError(
                code,
                f"The repository {_ctx(ctx, 'repo_id')} doesn't exist",
                "Check the repository URL and that the token can see the project",
            )
        case "EGLNOPUSHPERMISSION":
            return PluginError(
                code,
                f"The token doesn't allow to push to {_ctx(ctx, 'repo_id')}",
                "Developer (30) access or higher is required to publish a release",
            )
        case "EGLNOPULLPERMISSION":
            return PluginError(
                code,
                f"The token doesn't allow to pull from {_ctx(ctx, 'repo_id')}",
                "Reporter (10) access or higher is required for a dry run",
            )
        case "EINVALIDASSETPACKAGEPROPERTY":
            return PluginError(
                code,
                f"Invalid generic package {_ctx(ctx, 'property_name')}: "
                f"{_ctx(ctx, 'property_value')!r}",
                f"Check the format at {_ctx(ctx, 'verify_link')}",
            )
        case "EUPLOADFAILED":
            return PluginError(
                code,
                f"Failed to upload {_ctx(ctx, 'path')}",
                _ctx(ctx, "reason") or None,
            )
        case "ERELEASEFAILED":
            return PluginError(
                code,
                f"Failed to create the release for {_ctx(ctx, 'git_tag')}",
                _ctx(ctx, "reason") or None,
            )
        case "EHTTP":
            return PluginError(
                code,
                "GitLab API request failed",
                _ctx(ctx, "reason") or None,
            )
        case "ENORELEASE":
            return PluginError(
                code,
                "No release to publish",
                "A version and a git tag are required to publish a release",
            )
