"""Tests for glrel.core.config."""

from __future__ import annotations

from pathlib import Path

from glrel.core.config import (
    ConfigError,
    ProxyConfig,
    load_options,
    proxy_for,
    resolve_config,
)
from glrel.core.model import NextRelease, PublishContext
from glrel.core.result import Err, Ok
from glrel.output.console import MockConsole


def _ctx(env: dict[str, str], *, ci_service: str | None = None) -> PublishContext:
    return PublishContext(
        cwd=Path("/work"),
        repository_url="https://gitlab.com/group/project.git",
        next_release=NextRelease(version="1.0.0", git_tag="v1.0.0"),
        console=MockConsole(),
        env=env,
        ci_service=ci_service,
    )


class TestResolveConfig:
    def test_defaults(self) -> None:
        cfg = resolve_config({}, _ctx({}))
        assert cfg.gitlab_token is None
        assert cfg.gitlab_url == "https://gitlab.com"
        assert cfg.gitlab_api_url == "https://gitlab.com/api/v4"
        assert cfg.assets is None
        assert cfg.milestones is None
        assert cfg.proxy is None

    def test_token_from_gl_token_then_gitlab_token(self) -> None:
        assert resolve_config({}, _ctx({"GITLAB_TOKEN": "b"})).gitlab_token == "b"
        cfg = resolve_config({}, _ctx({"GL_TOKEN": "a", "GITLAB_TOKEN": "b"}))
        assert cfg.gitlab_token == "a"

    def test_url_and_prefix_from_env(self) -> None:
        cfg = resolve_config({}, _ctx({"GL_URL": "https://host.com", "GL_PREFIX": "/api/prefix"}))
        assert cfg.gitlab_url == "https://host.com"
        assert cfg.gitlab_api_url == "https://host.com/api/prefix"

    def test_gitlab_prefixed_env(self) -> None:
        env = {"GITLAB_URL": "https://other.com", "GITLAB_PREFIX": "/prefix"}
        cfg = resolve_config({}, _ctx(env))
        assert cfg.gitlab_api_url == "https://other.com/prefix"

    def test_options_win_over_env(self) -> None:
        options: dict[str, object] = {
            "gitlab_url": "https://opt.com",
            "gitlab_api_path_prefix": "/v5",
        }
        cfg = resolve_config(options, _ctx({"GL_URL": "https://env.com", "GL_PREFIX": "/x"}))
        assert cfg.gitlab_url == "https://opt.com"
        assert cfg.gitlab_api_url == "https://opt.com/v5"

    def test_empty_prefix(self) -> None:
        cfg = resolve_config({"gitlab_url": "https://host.com", "gitlab_api_path_prefix": ""}, _ctx({}))
        assert cfg.gitlab_api_url == "https://host.com"

    def test_url_without_prefix_uses_api_v4(self) -> None:
        cfg = resolve_config({"gitlab_url": "https://host.com"}, _ctx({}))
        assert cfg.gitlab_api_url == "https://host.com/api/v4"

    def test_gitlab_ci_variables(self) -> None:
        env = {
            "CI_PROJECT_URL": "https://ci.example.com/sub/group/project",
            "CI_PROJECT_PATH": "group/project",
            "CI_API_V4_URL": "https://ci.example.com/sub/api/v4",
        }
        cfg = resolve_config({}, _ctx(env, ci_service="gitlab"))
        assert cfg.gitlab_url == "https://ci.example.com/sub"
        assert cfg.gitlab_api_url == "https://ci.example.com/sub/api/v4"

    def test_ci_variables_ignored_outside_gitlab(self) -> None:
        env = {
            "CI_PROJECT_URL": "https://ci.example.com/group/project",
            "CI_PROJECT_PATH": "group/project",
            "CI_API_V4_URL": "https://ci.example.com/api/v4",
        }
        cfg = resolve_config({}, _ctx(env, ci_service="ci"))
        assert cfg.gitlab_url == "https://gitlab.com"
        assert cfg.gitlab_api_url == "https://gitlab.com/api/v4"

    def test_single_values_become_lists(self) -> None:
        cfg = resolve_config({"assets": "dist/*.zip", "milestones": "1.0"}, _ctx({}))
        assert cfg.assets == ["dist/*.zip"]
        assert cfg.milestones == ["1.0"]

    def test_lists_are_kept(self) -> None:
        cfg = resolve_config({"assets": ["a", {"path": "b"}]}, _ctx({}))
        assert cfg.assets == ["a", {"path": "b"}]


class TestProxy:
    def test_https_proxy(self) -> None:
        proxy = proxy_for("https://gitlab.com", {"HTTPS_PROXY": "http://proxy:3128"})
        assert proxy == ProxyConfig(scheme="https", url="http://proxy:3128")
        assert proxy.as_handler_map() == {"https": "http://proxy:3128"}

    def test_http_proxy_for_http_url(self) -> None:
        env = {"HTTP_PROXY": "http://p:80", "HTTPS_PROXY": "http://s:80"}
        assert proxy_for("http://gitlab.local", env) == ProxyConfig(scheme="http", url="http://p:80")

    def test_no_proxy_exact_host(self) -> None:
        env = {"HTTPS_PROXY": "http://p:80", "NO_PROXY": "localhost, gitlab.com"}
        assert proxy_for("https://gitlab.com", env) is None

    def test_no_proxy_domain_suffix(self) -> None:
        env = {"HTTPS_PROXY": "http://p:80", "NO_PROXY": ".example.com"}
        assert proxy_for("https://git.example.com", env) is None
        assert proxy_for("https://gitlab.com", env) is not None

    def test_no_proxy_wildcard(self) -> None:
        assert proxy_for("https://gitlab.com", {"HTTPS_PROXY": "http://p", "NO_PROXY": "*"}) is None

    def test_resolve_config_sets_proxy(self) -> None:
        cfg = resolve_config({}, _ctx({"HTTPS_PROXY": "http://proxy:3128"}))
        assert cfg.proxy == ProxyConfig(scheme="https", url="http://proxy:3128")


class TestLoadOptions:
    def test_flat_file(self, tmp_path: Path) -> None:
        path = tmp_path / ".glrel.toml"
        path.write_text(
            'gitlab_url = "https://host.com"\n\n[[assets]]\npath = "dist/*.zip"\n',
            encoding="utf-8",
        )
        result = load_options(path)
        assert isinstance(result, Ok)
        assert result.value == {"gitlab_url": "https://host.com", "assets": [{"path": "dist/*.zip"}]}

    def test_pyproject_tool_table(self, tmp_path: Path) -> None:
        path = tmp_path / "pyproject.toml"
        path.write_text(
            '[project]\nname = "x"\n\n[tool.glrel]\nmilestones = ["1.0"]\n',
            encoding="utf-8",
        )
        result = load_options(path)
        assert isinstance(result, Ok)
        assert result.value == {"milestones": ["1.0"]}

    def test_pyproject_without_table(self, tmp_path: Path) -> None:
        path = tmp_path / "pyproject.toml"
        path.write_text('[project]\nname = "x"\n', encoding="utf-8")
        assert load_options(path) == Ok({})

    def test_missing_file(self, tmp_path: Path) -> None:
        result = load_options(tmp_path / "missing.toml")
        assert isinstance(result, Err)
        assert isinstance(result.error, ConfigError)
        assert "not found" in result.error.message

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / ".glrel.toml"
        path.write_text("assets = [", encoding="utf-8")
        result = load_options(path)
        assert isinstance(result, Err)
        assert "Invalid TOML" in result.error.message
