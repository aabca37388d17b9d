"""Plugin options loading and resolution.

Options come from a TOML file (``load_options``) and are combined with the
environment of the pipeline (``resolve_config``) into a ``ResolvedConfig``.

Recognised options:

    gitlab_url = "https://gitlab.example.com"
    gitlab_api_path_prefix = "/api/v4"
    milestones = ["1.0"]

    [[assets]]
    path = "dist/*.tar.gz"
    label = "Source (${next_release.version})"
    target = "generic_package"
"""

from __future__ import annotations

import re
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlsplit

from glrel.core.model import PublishContext
from glrel.core.result import Err, Ok, Result
from glrel.core.structured import StrDict, as_obj_list, as_str_dict, get_str, get_table
from glrel.gitlab.urls import url_join

__all__ = [
    "ConfigError",
    "ProxyConfig",
    "ResolvedConfig",
    "DEFAULT_GITLAB_URL",
    "DEFAULT_API_PATH_PREFIX",
    "load_options",
    "resolve_config",
]

DEFAULT_GITLAB_URL = "https://gitlab.com"
DEFAULT_API_PATH_PREFIX = "/api/v4"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when the options file cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ProxyConfig:
    """Proxy used for API requests, keyed by URL scheme."""

    scheme: str
    url: str

    def as_handler_map(self) -> dict[str, str]:
        return {self.scheme: self.url}


@dataclass(frozen=True, slots=True)
class ResolvedConfig:
    gitlab_token: str | None
    gitlab_url: str
    gitlab_api_url: str
    assets: list[object] | None
    milestones: list[object] | None
    proxy: ProxyConfig | None


def _env(env: Mapping[str, str], key: str) -> str | None:
    value = env.get(key)
    return value if value else None


def _cast_list(value: object) -> list[object] | None:
    if value is None:
        return None
    items = as_obj_list(value)
    if items is not None:
        return items
    return [value]


def _no_proxy_matches(host: str, no_proxy: str) -> bool:
    host = host.lower()
    for raw in no_proxy.split(","):
        entry = raw.strip().lower()
        if not entry:
            continue
        if entry == "*":
            return True
        # Drop an optional port on the entry.
        entry = entry.split(":", 1)[0]
        domain = entry.lstrip(".")
        if host == domain or host.endswith(f".{domain}"):
            return True
    return False


def proxy_for(gitlab_url: str, env: Mapping[str, str]) -> ProxyConfig | None:
    """Pick HTTP_PROXY or HTTPS_PROXY according to the GitLab URL scheme."""
    parts = urlsplit(gitlab_url)
    scheme = parts.scheme or "https"
    host = parts.hostname or ""

    no_proxy = _env(env, "NO_PROXY") or _env(env, "no_proxy")
    if no_proxy and host and _no_proxy_matches(host, no_proxy):
        return None

    if scheme == "https":
        url = _env(env, "HTTPS_PROXY") or _env(env, "https_proxy")
    else:
        url = _env(env, "HTTP_PROXY") or _env(env, "http_proxy")
    if url is None:
        return None
    return ProxyConfig(scheme=scheme, url=url)


def resolve_config(options: Mapping[str, object], context: PublishContext) -> ResolvedConfig:
    """Resolve plugin options against the pipeline environment.

    Explicit options win over ``GL_*``/``GITLAB_*`` variables, which win over
    the GitLab CI predefined variables.
    """
    env = context.env
    on_gitlab = context.is_gitlab_ci

    option_prefix = options.get("gitlab_api_path_prefix")
    if isinstance(option_prefix, str):
        user_prefix: str | None = option_prefix
    elif "GL_PREFIX" in env:
        user_prefix = env["GL_PREFIX"]
    else:
        user_prefix = env.get("GITLAB_PREFIX")

    user_url = get_str(options, "gitlab_url") or _env(env, "GL_URL") or _env(env, "GITLAB_URL")

    ci_project_url = _env(env, "CI_PROJECT_URL")
    ci_project_path = _env(env, "CI_PROJECT_PATH")
    if user_url:
        gitlab_url = user_url
    elif on_gitlab and ci_project_url and ci_project_path:
        gitlab_url = re.sub(f"/{re.escape(ci_project_path)}$", "", ci_project_url)
    else:
        gitlab_url = DEFAULT_GITLAB_URL

    ci_api_url = _env(env, "CI_API_V4_URL")
    if user_url and user_prefix:
        api_url = url_join(user_url, user_prefix)
    elif on_gitlab and ci_api_url:
        api_url = ci_api_url
    else:
        prefix = DEFAULT_API_PATH_PREFIX if user_prefix is None else user_prefix
        api_url = url_join(gitlab_url, prefix)

    return ResolvedConfig(
        gitlab_token=_env(env, "GL_TOKEN") or _env(env, "GITLAB_TOKEN"),
        gitlab_url=gitlab_url,
        gitlab_api_url=api_url,
        assets=_cast_list(options.get("assets")),
        milestones=_cast_list(options.get("milestones")),
        proxy=proxy_for(gitlab_url, env),
    )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Options file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading options: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Options root must be a TOML table", path=path))
    return Ok(data)


def load_options(path: Path) -> Result[StrDict, ConfigError]:
    """Load plugin options from a TOML file.

    For ``pyproject.toml`` the options live under ``[tool.glrel]``; any other
    file is read as a flat options table.
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    if path.name == "pyproject.toml":
        tool = get_table(result.value, "tool") or {}
        return Ok(get_table(tool, "glrel") or {})
    return result
