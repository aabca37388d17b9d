from __future__ import annotations

import re
from urllib.parse import unquote, urlsplit

from glrel.core.model import PublishContext

# git@gitlab.com:group/project.git
_SCP_LIKE = re.compile(r"^(?:[\w.\-]+@)?(?P<host>[\w.\-]+):(?!//)(?P<path>.+)$")


def _url_path(url: str) -> str:
    if "://" not in url:
        m = _SCP_LIKE.match(url)
        if m:
            return "/" + m.group("path").lstrip("/")
    return unquote(urlsplit(url).path)


def get_repo_id(context: PublishContext, gitlab_url: str, repository_url: str) -> str | None:
    """Return the ``namespace/project`` path of the repository.

    On GitLab CI the predefined ``CI_PROJECT_PATH`` is authoritative.
    Otherwise the path is taken from the repository URL, minus the path of
    the GitLab instance URL (for instances served under a sub path) and the
    ``.git`` suffix.
    """
    ci_project_path = context.env.get("CI_PROJECT_PATH")
    if context.is_gitlab_ci and ci_project_path:
        return ci_project_path

    if not repository_url:
        return None

    path = _url_path(repository_url)
    base = urlsplit(gitlab_url).path.rstrip("/")
    if base and path.startswith(base):
        path = path[len(base):]
    path = path.strip("/")
    path = re.sub(r"\.git$", "", path)
    return path or None
