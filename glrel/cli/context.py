from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

import typer

from glrel.core.config import load_options
from glrel.core.errors import ErrorCode
from glrel.core.model import NextRelease, PublishContext
from glrel.core.result import Err
from glrel.core.structured import StrDict
from glrel.output.console import RichConsole

DEFAULT_OPTIONS_FILES = (".glrel.toml", "pyproject.toml")


@dataclass(frozen=True, slots=True)
class CLIContext:
    options: StrDict
    publish: PublishContext


def detect_ci_service(env: Mapping[str, str]) -> str | None:
    if env.get("GITLAB_CI"):
        return "gitlab"
    if env.get("CI"):
        return "ci"
    return None


def repository_url_from_env(env: Mapping[str, str]) -> str:
    """Best repository URL available from GitLab CI variables."""
    return env.get("CI_REPOSITORY_URL") or env.get("CI_PROJECT_URL") or ""


def _find_options_file(cwd: Path) -> Path | None:
    for name in DEFAULT_OPTIONS_FILES:
        candidate = cwd / name
        if candidate.is_file():
            return candidate
    return None


def build_context(
    *,
    cwd: Path,
    config_path: Path | None,
    repository_url: str | None,
    next_release: NextRelease | None,
    dry_run: bool,
    verbose: bool,
) -> CLIContext:
    console = RichConsole(verbose=verbose)
    env = dict(os.environ)

    options: StrDict = {}
    path = config_path or _find_options_file(cwd)
    if path is not None:
        loaded = load_options(path)
        if isinstance(loaded, Err):
            console.error(loaded.error.message)
            raise typer.Exit(code=int(ErrorCode.IO_ERROR))
        options = loaded.value

    return CLIContext(
        options=options,
        publish=PublishContext(
            cwd=cwd,
            repository_url=repository_url or repository_url_from_env(env),
            next_release=next_release,
            console=console,
            env=env,
            ci_service=detect_ci_service(env),
            branch=env.get("CI_COMMIT_BRANCH") or env.get("CI_COMMIT_REF_NAME"),
            dry_run=dry_run,
        ),
    )
