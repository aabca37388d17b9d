from __future__ import annotations

from collections.abc import Mapping

from glrel.core.config import resolve_config
from glrel.core.errors import PluginError, get_error
from glrel.core.model import PublishContext
from glrel.core.result import Err, Ok, Result
from glrel.core.structured import StrDict, get_int, get_table, is_non_empty_str
from glrel.gitlab.api import GitLabApi, get_project
from glrel.gitlab.assets import is_valid_asset
from glrel.gitlab.http import HttpClient, RealHttpClient
from glrel.gitlab.repo_id import get_repo_id

DEVELOPER_ACCESS = 30
REPORTER_ACCESS = 10


def _access_level(permissions: StrDict, key: str) -> int:
    table = get_table(permissions, key)
    if table is None:
        return 0
    return get_int(table, "access_level") or 0


def has_access(project: StrDict, minimum: int) -> bool:
    """True if project or group access reaches ``minimum``."""
    permissions = get_table(project, "permissions") or {}
    return (
        _access_level(permissions, "project_access") >= minimum
        or _access_level(permissions, "group_access") >= minimum
    )


def _validate_options(
    assets: list[object] | None, milestones: list[object] | None
) -> list[PluginError]:
    errors: list[PluginError] = []
    if assets is not None and not all(is_valid_asset(a) for a in assets):
        errors.append(get_error("EINVALIDASSETS", assets=assets))
    if milestones is not None and not all(is_non_empty_str(m) for m in milestones):
        errors.append(get_error("EINVALIDMILESTONES", milestones=milestones))
    return errors


def verify_conditions(
    options: Mapping[str, object],
    context: PublishContext,
    *,
    http: HttpClient | None = None,
) -> Result[None, tuple[PluginError, ...]]:
    """Check options, token and project access before a release.

    All problems are collected and returned together so they can be fixed in
    one go.
    """
    cfg = resolve_config(options, context)
    repo_id = get_repo_id(context, cfg.gitlab_url, context.repository_url)

    errors = _validate_options(cfg.assets, cfg.milestones)
    if repo_id is None:
        errors.append(
            get_error(
                "EINVALIDGITLABURL",
                gitlab_url=cfg.gitlab_url,
                repository_url=context.repository_url,
            )
        )
    if not cfg.gitlab_token:
        errors.append(get_error("ENOGLTOKEN", repository_url=context.repository_url))

    if cfg.gitlab_token and repo_id is not None:
        context.console.log(f"Verify GitLab authentication ({cfg.gitlab_api_url})")
        api = GitLabApi(
            http=http if http is not None else RealHttpClient(proxy=cfg.proxy),
            api_url=cfg.gitlab_api_url,
            token=cfg.gitlab_token,
        )
        project = get_project(api, repo_id)
        if isinstance(project, Err):
            match project.error.status:
                case 401:
                    errors.append(get_error("EINVALIDGLTOKEN", repo_id=repo_id))
                case 404:
                    errors.append(get_error("EMISSINGREPO", repo_id=repo_id))
                case _:
                    errors.append(get_error("EHTTP", reason=str(project.error)))
        elif context.dry_run:
            if not has_access(project.value, REPORTER_ACCESS):
                errors.append(get_error("EGLNOPULLPERMISSION", repo_id=repo_id))
        elif not has_access(project.value, DEVELOPER_ACCESS):
            errors.append(get_error("EGLNOPUSHPERMISSION", repo_id=repo_id))

    if errors:
        return Err(tuple(errors))
    return Ok(None)
