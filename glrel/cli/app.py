from __future__ import annotations

from pathlib import Path

import typer

from glrel import __version__
from glrel.cli.context import build_context
from glrel.core.errors import ErrorCode
from glrel.core.model import NextRelease
from glrel.core.result import Err
from glrel.gitlab.publish import publish
from glrel.gitlab.verify import verify_conditions

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Publish GitLab releases."""
    del version


@app.command()
def verify(
    config: Path | None = typer.Option(None, "--config", help="Options file (TOML)"),
    repository_url: str | None = typer.Option(None, "--repository-url", help="Git remote URL"),
    cwd: Path = typer.Option(Path("."), "--cwd", help="Directory assets are resolved from"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Only require read access"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Print debug output"),
) -> None:
    """Check options, token and project permissions."""
    ctx = build_context(
        cwd=cwd.resolve(),
        config_path=config,
        repository_url=repository_url,
        next_release=None,
        dry_run=dry_run,
        verbose=verbose,
    )
    console = ctx.publish.console

    result = verify_conditions(ctx.options, ctx.publish)
    if isinstance(result, Err):
        for error in result.error:
            console.error(error.pretty())
        raise typer.Exit(code=int(max(e.exit_code for e in result.error)))

    console.success("GitLab configuration verified")


@app.command("publish")
def publish_cmd(
    version: str = typer.Option(..., "--version", help="Version being released"),
    tag: str = typer.Option(..., "--tag", help="Git tag of the release"),
    notes_file: Path | None = typer.Option(None, "--notes-file", help="Release notes (markdown)"),
    head: str | None = typer.Option(None, "--head", help="Commit the tag points to"),
    channel: str | None = typer.Option(None, "--channel", help="Release channel"),
    config: Path | None = typer.Option(None, "--config", help="Options file (TOML)"),
    repository_url: str | None = typer.Option(None, "--repository-url", help="Git remote URL"),
    cwd: Path = typer.Option(Path("."), "--cwd", help="Directory assets are resolved from"),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Log the uploads and the release without sending them"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Print debug output"),
) -> None:
    """Upload assets and create the GitLab release."""
    notes: str | None = None
    if notes_file is not None:
        try:
            notes = notes_file.read_text(encoding="utf-8")
        except OSError as e:
            typer.echo(f"error: cannot read notes file: {e}", err=True)
            raise typer.Exit(code=int(ErrorCode.IO_ERROR))

    ctx = build_context(
        cwd=cwd.resolve(),
        config_path=config,
        repository_url=repository_url,
        next_release=NextRelease(
            version=version,
            git_tag=tag,
            git_head=head,
            notes=notes,
            channel=channel,
        ),
        dry_run=dry_run,
        verbose=verbose,
    )
    console = ctx.publish.console

    result = publish(ctx.options, ctx.publish)
    if isinstance(result, Err):
        console.error(result.error.pretty())
        raise typer.Exit(code=int(result.error.exit_code))

    console.success(f"{result.value.name}: {result.value.url}")


def main() -> None:
    app()
