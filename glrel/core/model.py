from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from glrel.output.console import ConsoleProtocol


@dataclass(frozen=True, slots=True)
class NextRelease:
    """The release computed by the host pipeline."""

    version: str
    git_tag: str
    git_head: str | None = None
    notes: str | None = None
    channel: str | None = None
    name: str | None = None


def _empty_env() -> dict[str, str]:
    return {}


@dataclass(frozen=True, slots=True)
class PublishContext:
    """Everything the host pipeline hands to verify/publish."""

    cwd: Path
    repository_url: str
    next_release: NextRelease | None
    console: ConsoleProtocol
    env: Mapping[str, str] = field(default_factory=_empty_env)
    # CI provider name ("gitlab" on GitLab CI), None when running locally.
    ci_service: str | None = None
    branch: str | None = None
    dry_run: bool = False

    @property
    def is_gitlab_ci(self) -> bool:
        return self.ci_service == "gitlab"

    def variables(self) -> dict[str, object]:
        """Values available to templated asset fields."""
        release: dict[str, object] = {}
        if self.next_release is not None:
            nr = self.next_release
            release = {
                "version": nr.version,
                "git_tag": nr.git_tag,
                "git_head": nr.git_head,
                "notes": nr.notes,
                "channel": nr.channel,
                "name": nr.name,
            }
        return {
            "cwd": str(self.cwd),
            "next_release": release,
            "branch": {"name": self.branch},
            "env": dict(self.env),
        }


@dataclass(frozen=True, slots=True)
class ReleaseLink:
    """A release asset link before it is rendered into the release payload.

    ``raw_url`` is set for assets configured with a URL and is used verbatim;
    ``url`` comes from an upload response and may be relative to the project.
    """

    label: str | None = None
    alt: str | None = None
    url: str | None = None
    raw_url: str | None = None
    type: str | None = None
    filepath: str | None = None


@dataclass(frozen=True, slots=True)
class PublishedRelease:
    name: str
    url: str
